"""
Lattice value noise on integer tile coordinates.

Every lattice point gets a pseudo-random value from a stateless 64-bit hash of
(x, y, seed), so any tile can be evaluated in isolation and in any order.
Values between lattice points are blended with smoothstep bilinear
interpolation, and several octaves are summed for the fractal fields used by
the terrain generators.
"""
import numpy as np

_U64 = np.uint64
_PRIME_X = _U64(73856093)
_PRIME_Y = _U64(19349663)
_GOLDEN = _U64(0x9E3779B97F4A7C15)
_MIX_1 = _U64(0xBF58476D1CE4E5B9)
_MIX_2 = _U64(0x94D049BB133111EB)
_MASK_64 = 0xFFFFFFFFFFFFFFFF


def _to_u64(values) -> np.ndarray:
    return np.atleast_1d(np.asarray(values, dtype=np.int64)).astype(np.uint64)


def lattice_hash(ix, iy, seed: int) -> np.ndarray:
    """Returns a float in [0, 1) for each integer lattice point (splitmix64 finalizer)."""
    with np.errstate(over="ignore"):
        z = (_to_u64(ix) * _PRIME_X) ^ (_to_u64(iy) * _PRIME_Y) ^ _U64(seed & _MASK_64)
        z = z + _GOLDEN
        z = (z ^ (z >> _U64(30))) * _MIX_1
        z = (z ^ (z >> _U64(27))) * _MIX_2
        z = z ^ (z >> _U64(31))
    return (z >> _U64(11)).astype(np.float64) * (1.0 / 9007199254740992.0)


def _smoothstep(t: np.ndarray) -> np.ndarray:
    return t * t * (3.0 - 2.0 * t)


def value_noise(xs, ys, seed: int) -> np.ndarray:
    """Single-octave value noise sampled at float coordinates."""
    xs = np.atleast_1d(np.asarray(xs, dtype=np.float64))
    ys = np.atleast_1d(np.asarray(ys, dtype=np.float64))
    x0 = np.floor(xs)
    y0 = np.floor(ys)
    tx = _smoothstep(xs - x0)
    ty = _smoothstep(ys - y0)
    x0 = x0.astype(np.int64)
    y0 = y0.astype(np.int64)

    n00 = lattice_hash(x0, y0, seed)
    n10 = lattice_hash(x0 + 1, y0, seed)
    n01 = lattice_hash(x0, y0 + 1, seed)
    n11 = lattice_hash(x0 + 1, y0 + 1, seed)

    nx0 = n00 + (n10 - n00) * tx
    nx1 = n01 + (n11 - n01) * tx
    return nx0 + (nx1 - nx0) * ty


def fractal_noise(
    xs,
    ys,
    seed: int,
    scale: float,
    octaves: int = 3,
    persistence: float = 0.5,
    lacunarity: float = 2.0,
) -> np.ndarray:
    """
    Sums `octaves` layers of value noise, halving amplitude and doubling
    frequency per layer by default, and normalizes the result back to [0, 1].
    """
    xs = np.atleast_1d(np.asarray(xs, dtype=np.float64))
    ys = np.atleast_1d(np.asarray(ys, dtype=np.float64))
    total = np.zeros(np.broadcast(xs, ys).shape, dtype=np.float64)
    amplitude = 1.0
    frequency = scale
    max_value = 0.0
    for octave in range(octaves):
        # Each octave gets its own lattice so layers do not line up.
        total += value_noise(xs * frequency, ys * frequency, seed + octave * 7919) * amplitude
        max_value += amplitude
        amplitude *= persistence
        frequency *= lacunarity
    return total / max_value


def noise_at(x: int, y: int, seed: int, scale: float, octaves: int = 3) -> float:
    return float(fractal_noise([x], [y], seed, scale, octaves)[0])
