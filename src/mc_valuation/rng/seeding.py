"""
Deterministic per-path random number generation.

Each simulated path draws from its own generator, built from a fixed model
seed and the path index. Re-running path ``k`` therefore always reproduces
the same realization, whatever order paths are run in and whichever worker
runs them.
"""

import zlib

import numpy as np


def model_seed(name: str) -> int:
    """
    Stable seed derived from a model name.

    Parameters
    ----------
    name : str
        Model name, usually the simulator class name

    Returns
    -------
    int
        CRC-32 of the UTF-8 encoded name (a non-negative 32 bit integer)

    Notes
    -----
    Python's built-in ``hash`` of a string changes between interpreter runs,
    so it cannot be used here.
    """
    return zlib.crc32(name.encode("utf-8"))


def path_generator(seed: int, path_index: int) -> np.random.Generator:
    """
    Random generator for one path of one model.

    Parameters
    ----------
    seed : int
        Fixed model seed (must be >= 0)
    path_index : int
        Index of the path (must be >= 0)

    Returns
    -------
    np.random.Generator
        Generator seeded with ``SeedSequence(entropy=seed, spawn_key=(path_index,))``,
        a pure function of the two arguments. Different path indices give
        statistically independent streams.
    """
    if seed < 0:
        raise ValueError("seed must be non-negative")
    if path_index < 0:
        raise ValueError("path_index must be non-negative")
    sequence = np.random.SeedSequence(entropy=seed, spawn_key=(path_index,))
    return np.random.default_rng(sequence)
