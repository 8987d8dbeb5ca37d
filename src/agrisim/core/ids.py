from typing import NewType, Tuple

ItemId = NewType('ItemId', int)
SpeciesId = NewType('SpeciesId', int)
RecipeId = NewType('RecipeId', int)
BuildingType = NewType('BuildingType', str)

Coord = Tuple[int, int]
ChunkCoord = Tuple[int, int]
