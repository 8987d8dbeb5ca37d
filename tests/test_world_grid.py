import pytest

from src.agrisim.core.rng import chunk_seed
from src.agrisim.world.grid import WorldGrid
from src.agrisim.world.model import CHUNK_SIZE, Viewport, chunk_of
from src.agrisim.world.terrain import TerrainType


@pytest.mark.parametrize("generator", ["classic", "continuous"])
def test_chunk_generation_is_independent_of_call_order(generator):
    forward = WorldGrid(seed=777, generator=generator)
    backward = WorldGrid(seed=777, generator=generator)
    chunks = [(0, 0), (1, 0), (-1, -1), (3, -2)]

    for cx, cy in chunks:
        forward.generate_chunk(cx, cy)
    for cx, cy in reversed(chunks):
        backward.generate_chunk(cx, cy)

    assert {c: t.terrain_type for c, t in forward.tiles.items()} == \
        {c: t.terrain_type for c, t in backward.tiles.items()}


@pytest.mark.parametrize("generator", ["classic", "continuous"])
def test_chunk_does_not_depend_on_neighbour_history(generator):
    lonely = WorldGrid(seed=99, generator=generator)
    lonely.generate_chunk(2, 2)

    crowded = WorldGrid(seed=99, generator=generator)
    for cx in range(0, 5):
        for cy in range(0, 5):
            crowded.generate_chunk(cx, cy)

    for tile in lonely.chunk_tiles(2, 2):
        assert crowded.terrain_at(tile.x, tile.y) == tile.terrain_type


def test_generate_chunk_is_idempotent():
    grid = WorldGrid(seed=5)
    assert grid.generate_chunk(0, 0) is True
    before = {c: t.terrain_type for c, t in grid.tiles.items()}

    assert grid.generate_chunk(0, 0) is False
    assert len(grid.tiles) == CHUNK_SIZE * CHUNK_SIZE
    assert {c: t.terrain_type for c, t in grid.tiles.items()} == before


def test_negative_chunks_cover_negative_coordinates():
    grid = WorldGrid(seed=5)
    grid.generate_chunk(-1, -1)

    xs = sorted({c[0] for c in grid.tiles})
    ys = sorted({c[1] for c in grid.tiles})
    assert xs == list(range(-CHUNK_SIZE, 0))
    assert ys == list(range(-CHUNK_SIZE, 0))
    assert grid.is_chunk_generated(-1, -1)
    assert not grid.is_chunk_generated(0, 0)


def test_chunk_of_uses_floor_division():
    assert chunk_of(0, 0) == (0, 0)
    assert chunk_of(15, 15) == (0, 0)
    assert chunk_of(16, 0) == (1, 0)
    assert chunk_of(-1, -1) == (-1, -1)
    assert chunk_of(-16, -17) == (-1, -2)


def test_generate_in_view_covers_viewport_plus_margin():
    grid = WorldGrid(seed=1, margin_chunks=2)
    viewport = Viewport.around(0, 0, 40, 24)

    new_chunks = grid.generate_in_view(viewport)

    # x: floor(-52/16)..ceil(52/16) = -4..4, y: floor(-44/16)..ceil(44/16) = -3..3
    assert len(new_chunks) == 9 * 7
    assert (-4, -3) in new_chunks and (4, 3) in new_chunks
    assert grid.generate_in_view(viewport) == []


def test_pre_existing_tiles_survive_generation():
    grid = WorldGrid(seed=3)
    grid.set_terrain_type(2, 2, TerrainType.PADDY)

    grid.generate_chunk(0, 0)

    tile = grid.get_tile(2, 2)
    assert tile.terrain_type == TerrainType.PADDY
    assert tile.explored is False
    assert grid.get_tile(3, 3).explored is True


def test_set_terrain_type_creates_missing_tile():
    grid = WorldGrid(seed=3)
    assert grid.get_tile(100, -100) is None

    grid.set_terrain_type(100, -100, TerrainType.BARREN)

    assert grid.terrain_at(100, -100) == TerrainType.BARREN


def test_any_within_excludes_centre_and_respects_radius():
    grid = WorldGrid(seed=3)
    grid.set_terrain_type(0, 0, TerrainType.WATER)
    assert not grid.any_within(0, 0, 1, [TerrainType.WATER])

    grid.set_terrain_type(1, 1, TerrainType.WATER)
    assert grid.any_within(0, 0, 1, [TerrainType.WATER])
    # (0, 0) is itself a neighbour of (-1, -1)
    assert grid.any_within(-1, -1, 1, [TerrainType.WATER])
    assert not grid.any_within(3, 3, 1, [TerrainType.WATER])
    assert grid.any_within(3, 3, 2, [TerrainType.WATER])


def test_classic_generator_only_emits_classic_terrain():
    grid = WorldGrid(seed=2024, generator="classic")
    for cx in range(-2, 2):
        for cy in range(-2, 2):
            grid.generate_chunk(cx, cy)

    allowed = {TerrainType.WATER, TerrainType.SAND, TerrainType.STONE,
               TerrainType.FOREST, TerrainType.DIRT, TerrainType.GRASS}
    assert set(grid.terrain_counts()) <= allowed


def test_seeds_change_the_world():
    a = WorldGrid(seed=1)
    b = WorldGrid(seed=2)
    a.generate_chunk(0, 0)
    b.generate_chunk(0, 0)
    assert [t.terrain_type for t in a.chunk_tiles(0, 0)] != [t.terrain_type for t in b.chunk_tiles(0, 0)]


def test_chunk_seed_is_stable_and_non_negative():
    assert chunk_seed(42, -3, 7) == chunk_seed(42, -3, 7)
    assert chunk_seed(42, -3, 7) != chunk_seed(42, 7, -3)
    for cx, cy in [(-1, -1), (-1000, 5), (0, 0)]:
        assert 0 <= chunk_seed(42, cx, cy) < 2 ** 64


def test_unknown_generator_is_rejected():
    with pytest.raises(ValueError):
        WorldGrid(seed=1, generator="fractal")
