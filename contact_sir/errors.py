"""Exceptions raised by contact_sir."""


class ContactSIRError(Exception):
    """Base class for all contact_sir errors."""


class InvalidEdgeError(ContactSIRError, ValueError):
    """Self-loop, duplicate edge, or interaction outside its valid range."""


class InvalidParameterError(ContactSIRError, ValueError):
    """Model or generator parameter outside its valid range."""


class UnknownNodeError(ContactSIRError, IndexError):
    """Node id not present in the graph."""
