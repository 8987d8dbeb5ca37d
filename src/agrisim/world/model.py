from __future__ import annotations
from dataclasses import dataclass
import math
from typing import Tuple

from ..core.ids import Coord, ChunkCoord
from .terrain import TerrainType

CHUNK_SIZE = 16


@dataclass
class TerrainTile:
    coord: Coord
    terrain_type: TerrainType
    explored: bool = False

    @property
    def x(self) -> int:
        return self.coord[0]

    @property
    def y(self) -> int:
        return self.coord[1]


@dataclass(frozen=True)
class Viewport:
    """Axis-aligned tile rectangle, edges inclusive."""
    left: float
    bottom: float
    right: float
    top: float

    @classmethod
    def around(cls, x: int, y: int, width: int, height: int) -> "Viewport":
        half_w = width / 2.0
        half_h = height / 2.0
        return cls(left=x - half_w, bottom=y - half_h, right=x + half_w, top=y + half_h)

    def chunk_range(self, margin_chunks: int) -> Tuple[range, range]:
        margin = margin_chunks * CHUNK_SIZE
        start_x = math.floor((self.left - margin) / CHUNK_SIZE)
        end_x = math.ceil((self.right + margin) / CHUNK_SIZE)
        start_y = math.floor((self.bottom - margin) / CHUNK_SIZE)
        end_y = math.ceil((self.top + margin) / CHUNK_SIZE)
        return range(start_x, end_x + 1), range(start_y, end_y + 1)


def chunk_of(x: int, y: int) -> ChunkCoord:
    # Floor division keeps negative coordinates in the right chunk.
    return (x // CHUNK_SIZE, y // CHUNK_SIZE)
