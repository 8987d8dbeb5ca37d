from __future__ import annotations
import logging
from typing import Dict, Iterable, List, Optional, Set

from ..core.ids import Coord, ChunkCoord
from ..generation.chunk_gen import make_generator
from .model import TerrainTile, Viewport, CHUNK_SIZE, chunk_of
from .terrain import TerrainType

logger = logging.getLogger(__name__)


class WorldGrid:
    """
    Unbounded tile map filled lazily chunk by chunk. Tiles are created by
    generation (or by set_terrain_type) and never removed.
    """

    def __init__(self, seed: int, generator: str = "classic", margin_chunks: int = 2):
        self.seed = seed
        self.generator_kind = generator
        self.margin_chunks = margin_chunks
        self._generator = make_generator(generator, seed)
        self.tiles: Dict[Coord, TerrainTile] = {}
        self.generated_chunks: Set[ChunkCoord] = set()

    def generate_in_view(self, viewport: Viewport) -> List[ChunkCoord]:
        """Generates every missing chunk covering the viewport plus margin. Returns the new chunks."""
        xs, ys = viewport.chunk_range(self.margin_chunks)
        new_chunks = []
        for cx in xs:
            for cy in ys:
                if self.generate_chunk(cx, cy):
                    new_chunks.append((cx, cy))
        if new_chunks:
            logger.debug("Generated %d chunks around %s", len(new_chunks), viewport)
        return new_chunks

    def generate_chunk(self, cx: int, cy: int) -> bool:
        if (cx, cy) in self.generated_chunks:
            return False
        for coord, terrain_type in self._generator.generate(cx, cy).items():
            # Tiles written before their chunk was generated keep their terrain.
            if coord not in self.tiles:
                self.tiles[coord] = TerrainTile(coord=coord, terrain_type=terrain_type, explored=True)
        self.generated_chunks.add((cx, cy))
        return True

    def is_chunk_generated(self, cx: int, cy: int) -> bool:
        return (cx, cy) in self.generated_chunks

    def get_tile(self, x: int, y: int) -> Optional[TerrainTile]:
        return self.tiles.get((x, y))

    def terrain_at(self, x: int, y: int) -> Optional[TerrainType]:
        tile = self.tiles.get((x, y))
        return tile.terrain_type if tile else None

    def set_terrain_type(self, x: int, y: int, terrain_type: TerrainType) -> TerrainTile:
        tile = self.tiles.get((x, y))
        if tile is None:
            tile = TerrainTile(coord=(x, y), terrain_type=terrain_type)
            self.tiles[(x, y)] = tile
        else:
            tile.terrain_type = terrain_type
        return tile

    def any_within(self, x: int, y: int, radius: int, types: Iterable[TerrainType]) -> bool:
        """True if a tile of one of `types` lies within Chebyshev `radius` of (x, y), centre excluded."""
        wanted = set(types)
        for dx in range(-radius, radius + 1):
            for dy in range(-radius, radius + 1):
                if dx == 0 and dy == 0:
                    continue
                tile = self.tiles.get((x + dx, y + dy))
                if tile is not None and tile.terrain_type in wanted:
                    return True
        return False

    def tiles_in_rect(self, left: int, bottom: int, right: int, top: int) -> List[TerrainTile]:
        result = []
        for x in range(left, right + 1):
            for y in range(bottom, top + 1):
                tile = self.tiles.get((x, y))
                if tile is not None:
                    result.append(tile)
        return result

    def chunk_tiles(self, cx: int, cy: int) -> List[TerrainTile]:
        x0, y0 = cx * CHUNK_SIZE, cy * CHUNK_SIZE
        return self.tiles_in_rect(x0, y0, x0 + CHUNK_SIZE - 1, y0 + CHUNK_SIZE - 1)

    @staticmethod
    def chunk_coords_of(x: int, y: int) -> ChunkCoord:
        return chunk_of(x, y)

    def terrain_counts(self) -> Dict[TerrainType, int]:
        counts: Dict[TerrainType, int] = {}
        for tile in self.tiles.values():
            counts[tile.terrain_type] = counts.get(tile.terrain_type, 0) + 1
        return counts
