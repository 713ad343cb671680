"""Random source handling."""

from typing import List, Union

import numpy as np

RandomLike = Union[None, int, np.random.RandomState]


def make_rng(rng: RandomLike = None) -> np.random.RandomState:
    """
    Normalise a seed or random source into a ``RandomState``.

    Args:
        rng: ``None`` for fresh OS entropy, an integer seed, or an existing
            ``RandomState`` (returned as is, so its stream is shared)

    Returns:
        A ``numpy.random.RandomState``
    """
    if rng is None:
        return np.random.RandomState()
    if isinstance(rng, np.random.RandomState):
        return rng
    if isinstance(rng, (int, np.integer)) and not isinstance(rng, bool):
        return np.random.RandomState(int(rng))
    raise TypeError(f"Cannot build a RandomState from {type(rng).__name__}")


def spawn_rngs(seed: int, count: int) -> List[np.random.RandomState]:
    """
    Independent ``RandomState`` streams derived from one seed.

    Child ``k`` depends only on ``seed`` and ``k``, not on ``count``.

    Args:
        seed: Root seed
        count: Number of streams

    Returns:
        List of ``count`` random sources
    """
    children = np.random.SeedSequence(seed).spawn(count)
    return [np.random.RandomState(np.random.MT19937(child)) for child in children]


def graph_rng(seed: int) -> np.random.RandomState:
    """Stream used to generate the contact graph for ``seed``."""
    return spawn_rngs(seed, 1)[0]


def run_rng(seed: int, run_id: int = 0) -> np.random.RandomState:
    """Stream used by simulation run ``run_id`` for ``seed``; never overlaps the graph stream."""
    return spawn_rngs(seed, run_id + 2)[run_id + 1]
