import random

_MASK_64 = 0xFFFFFFFFFFFFFFFF


def get_seeded_rng(seed: int) -> random.Random:
    """Returns a new random.Random instance seeded with the given integer."""
    return random.Random(seed)


def chunk_seed(world_seed: int, cx: int, cy: int) -> int:
    """
    Derives a stable 64-bit seed for a chunk from the world seed and chunk coordinates.
    Uses the classic spatial-hash primes so that neighbouring chunks get unrelated streams.
    """
    h = (cx * 73856093) ^ (cy * 19349663) ^ (world_seed * 83492791)
    return h & _MASK_64


def get_chunk_rng(world_seed: int, cx: int, cy: int) -> random.Random:
    return random.Random(chunk_seed(world_seed, cx, cy))
