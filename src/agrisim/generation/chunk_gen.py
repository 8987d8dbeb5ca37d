from __future__ import annotations
import logging
from typing import Dict, List, Tuple

import numpy as np

from ..core.ids import Coord
from ..core.rng import get_chunk_rng
from ..world.model import CHUNK_SIZE
from ..world.terrain import TerrainType
from .noise import fractal_noise

logger = logging.getLogger(__name__)


def _chunk_axes(cx: int, cy: int) -> Tuple[np.ndarray, np.ndarray]:
    """World x/y arrays for every tile of a chunk, x-major (index = lx * CHUNK_SIZE + ly)."""
    lx, ly = np.meshgrid(np.arange(CHUNK_SIZE), np.arange(CHUNK_SIZE), indexing="ij")
    xs = (cx * CHUNK_SIZE + lx).ravel()
    ys = (cy * CHUNK_SIZE + ly).ravel()
    return xs, ys


class ClassicTerrainGenerator:
    """
    Noise plus per-chunk random stream. A tile's type depends on the noise at
    its coordinate and on the draws its chunk stream has produced so far, so
    chunk contents are stable but forest/dirt patches stop at chunk borders.
    """

    name = "classic"

    def __init__(self, seed: int, scale: float = 0.08, octaves: int = 3):
        self.seed = seed
        self.scale = scale
        self.octaves = octaves

    def generate(self, cx: int, cy: int) -> Dict[Coord, TerrainType]:
        xs, ys = _chunk_axes(cx, cy)
        values = fractal_noise(xs, ys, self.seed, self.scale, self.octaves)
        rng = get_chunk_rng(self.seed, cx, cy)

        tiles: Dict[Coord, TerrainType] = {}
        for x, y, n in zip(xs.tolist(), ys.tolist(), values.tolist()):
            if n < 0.2:
                terrain = TerrainType.WATER
            elif n < 0.3:
                terrain = TerrainType.SAND
            elif n > 0.8:
                terrain = TerrainType.STONE
            elif n > 0.7 and rng.random() < 0.3:
                terrain = TerrainType.FOREST
            elif rng.random() < 0.2:
                terrain = TerrainType.DIRT
            else:
                terrain = TerrainType.GRASS
            tiles[(x, y)] = terrain
        return tiles


class ContinuousTerrainGenerator:
    """
    Three independent noise fields (height, moisture, ruggedness) evaluated
    per coordinate. Purely spatial, so biomes flow across chunk borders and
    marshes appear in wet lowlands.
    """

    name = "continuous"

    HEIGHT_SCALE = 0.05
    MOISTURE_SCALE = 0.08
    TERRAIN_SCALE = 0.03

    def __init__(self, seed: int, octaves: int = 3):
        self.seed = seed
        self.octaves = octaves

    def generate(self, cx: int, cy: int) -> Dict[Coord, TerrainType]:
        xs, ys = _chunk_axes(cx, cy)
        height = fractal_noise(xs, ys, self.seed, self.HEIGHT_SCALE, self.octaves)
        moisture = fractal_noise(xs, ys, self.seed + 1013, self.MOISTURE_SCALE, self.octaves)
        rugged = fractal_noise(xs, ys, self.seed + 2027, self.TERRAIN_SCALE, self.octaves)

        # Default GRASS, then overwrite from lowest to highest priority.
        codes = np.full(xs.shape, 0, dtype=np.int8)
        biome = [
            TerrainType.GRASS,
            TerrainType.DIRT,
            TerrainType.MARSH,
            TerrainType.FOREST,
            TerrainType.STONE,
            TerrainType.SAND,
            TerrainType.WATER,
        ]
        mid = (height >= 0.35) & (height <= 0.75)
        codes[mid & ((moisture < 0.35) | (rugged < 0.3))] = 1
        codes[mid & (moisture > 0.75) & (height < 0.5)] = 2
        codes[mid & (moisture > 0.65) & (rugged > 0.4)] = 3
        codes[height > 0.75] = 4
        codes[height < 0.35] = 5
        codes[height < 0.25] = 6

        return {(x, y): biome[c] for x, y, c in zip(xs.tolist(), ys.tolist(), codes.tolist())}


def make_generator(kind: str, seed: int):
    if kind == "classic":
        return ClassicTerrainGenerator(seed)
    if kind == "continuous":
        return ContinuousTerrainGenerator(seed)
    raise ValueError(f"Unknown terrain generator '{kind}'.")
