from dataclasses import dataclass
from enum import Enum
import logging
from pathlib import Path
from typing import Dict, List, Optional
import yaml

logger = logging.getLogger(__name__)


class TerrainType(Enum):
    GRASS = "GRASS"
    DIRT = "DIRT"
    SAND = "SAND"
    WATER = "WATER"
    STONE = "STONE"
    FOREST = "FOREST"
    PADDY = "PADDY"
    FARMLAND = "FARMLAND"
    MARSH = "MARSH"
    DRAINED_MARSH = "DRAINED_MARSH"
    WATER_CHANNEL = "WATER_CHANNEL"
    BARREN = "BARREN"

    @classmethod
    def parse(cls, value: str) -> "TerrainType":
        try:
            return cls(str(value).upper())
        except ValueError:
            raise ValueError(f"Unknown terrain type '{value}'.")


@dataclass(frozen=True)
class TerrainAttributes:
    type: TerrainType
    moisture: float
    fertility: float
    drainage: float
    tillage: float
    water_source: bool = False
    buildable: bool = False
    grazeable: bool = False
    glyph: str = "?"
    color: str = "#808080"


# Built-in rows; data/terrain.yaml may override any of them.
_DEFAULT_ROWS = [
    TerrainAttributes(TerrainType.GRASS, 0.5, 0.6, 0.6, 0.3, grazeable=True, glyph=",", color="#5fa845"),
    TerrainAttributes(TerrainType.DIRT, 0.5, 0.7, 0.5, 0.4, glyph=".", color="#8b6b3d"),
    TerrainAttributes(TerrainType.SAND, 0.3, 0.3, 0.9, 0.2, glyph=":", color="#e0cf8a"),
    TerrainAttributes(TerrainType.WATER, 1.0, 0.2, 0.0, 1.0, water_source=True, glyph="~", color="#2f6fbf"),
    TerrainAttributes(TerrainType.STONE, 0.2, 0.1, 0.8, 1.0, buildable=True, glyph="^", color="#8a8a8a"),
    TerrainAttributes(TerrainType.FOREST, 0.6, 0.8, 0.4, 0.7, glyph="T", color="#2e6b2a"),
    TerrainAttributes(TerrainType.PADDY, 0.95, 0.7, 0.2, 0.8, water_source=True, glyph="p", color="#6fb8a8"),
    TerrainAttributes(TerrainType.FARMLAND, 0.45, 0.75, 0.6, 0.3, glyph="#", color="#6b4a26"),
    TerrainAttributes(TerrainType.MARSH, 0.85, 0.6, 0.1, 0.9, glyph="m", color="#4f6b4a"),
    TerrainAttributes(TerrainType.DRAINED_MARSH, 0.6, 0.65, 0.5, 0.7, glyph="d", color="#7a7a4a"),
    TerrainAttributes(TerrainType.WATER_CHANNEL, 1.0, 0.3, 0.0, 1.0, water_source=True, glyph="=", color="#3f8fdf"),
    TerrainAttributes(TerrainType.BARREN, 0.1, 0.05, 0.9, 1.0, buildable=True, glyph="_", color="#b09a7a"),
]


class TerrainTable:
    """Per-terrain attributes shared by conversion, farming, livestock, buildings and renderers."""

    def __init__(self):
        self._rows: Dict[TerrainType, TerrainAttributes] = {row.type: row for row in _DEFAULT_ROWS}

    def load_from_yaml(self, path: Path):
        """
        Overrides the built-in rows with the ones found in the file.
        Rows that fail to parse are skipped; terrains missing from the file keep their defaults.
        """
        with open(path, 'r') as f:
            data = yaml.safe_load(f)

        if data is None:
            raise ValueError(f"YAML file '{path}' is empty or malformed.")

        for t_data in data:
            try:
                terrain_type = TerrainType.parse(t_data['type'])
                base = self._rows[terrain_type]
                soil = t_data.get('soil', {})
                row = TerrainAttributes(
                    type=terrain_type,
                    moisture=float(soil.get('moisture', base.moisture)),
                    fertility=float(soil.get('fertility', base.fertility)),
                    drainage=float(soil.get('drainage', base.drainage)),
                    tillage=float(soil.get('tillage', base.tillage)),
                    water_source=bool(t_data.get('water_source', base.water_source)),
                    buildable=bool(t_data.get('buildable', base.buildable)),
                    grazeable=bool(t_data.get('grazeable', base.grazeable)),
                    glyph=str(t_data.get('glyph', base.glyph))[:1],
                    color=t_data.get('color', base.color),
                )
            except (KeyError, TypeError, ValueError) as e:
                logger.warning("Skipping terrain row %r in %s: %s", t_data, path, e)
                continue
            self._rows[terrain_type] = row

    def get(self, terrain_type: TerrainType) -> TerrainAttributes:
        return self._rows[terrain_type]

    def water_sources(self) -> List[TerrainType]:
        return [t for t, row in self._rows.items() if row.water_source]

    def glyph(self, terrain_type: Optional[TerrainType]) -> str:
        if terrain_type is None:
            return " "
        return self._rows[terrain_type].glyph

    def all_rows(self) -> List[TerrainAttributes]:
        return list(self._rows.values())
