"""Per-sample random number streams.

Every camera sample owns its own 32-bit generator state, seeded by hashing
the pixel index, the sample index and a global seed. The state is passed
explicitly through camera and material functions, each of which returns the
advanced state alongside its result. Because no stream is shared between
pixels, a render is reproducible for a given seed no matter how the parallel
kernel schedules its work.

The generator is a xorshift32 sequence started from an integer hash of the
seed triple.

Example:
    >>> @ti.kernel
    ... def draw() -> ti.f32:
    ...     state = seed_stream(0, 0, 42)
    ...     state, u = next_random(state)
    ...     return u
"""

import taichi as ti
import taichi.math as tm

vec3 = tm.vec3

# Hash multipliers (all below 2**31 so they are valid i32 literals)
_HASH_MULTIPLIER = 0x45D9F3B
_PIXEL_PRIME = 1973
_SAMPLE_PRIME = 9277
_SEED_PRIME = 26699

# 2**-24: maps the top 24 bits of the state to [0, 1)
_INV_2_24 = 1.0 / 16777216.0


@ti.func
def _hash_u32(value: ti.u32) -> ti.u32:
    """Integer avalanche hash used to decorrelate neighbouring seeds."""
    m = ti.cast(_HASH_MULTIPLIER, ti.u32)
    x = ((value >> 16) ^ value) * m
    x = ((x >> 16) ^ x) * m
    x = (x >> 16) ^ x
    return x


@ti.func
def _xorshift32(value: ti.u32) -> ti.u32:
    """Advance a xorshift32 state by one step."""
    x = value
    x ^= x << 13
    x ^= x >> 17
    x ^= x << 5
    return x


@ti.func
def seed_stream(pixel_index: ti.i32, sample_index: ti.i32, seed: ti.i32) -> ti.u32:
    """Create the generator state for one (pixel, sample) pair.

    Args:
        pixel_index: Flat index of the pixel (row * width + column).
        sample_index: Index of the sample within the pixel.
        seed: Global render seed.

    Returns:
        A non-zero 32-bit state.
    """
    state = (
        ti.cast(pixel_index, ti.u32) * ti.cast(_PIXEL_PRIME, ti.u32)
        + ti.cast(sample_index, ti.u32) * ti.cast(_SAMPLE_PRIME, ti.u32)
        + ti.cast(seed, ti.u32) * ti.cast(_SEED_PRIME, ti.u32)
    )
    state = _hash_u32(state)
    # xorshift has a fixed point at zero
    if state == ti.cast(0, ti.u32):
        state = ti.cast(_HASH_MULTIPLIER, ti.u32)
    return state


@ti.func
def next_random(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current generator state.

    Returns:
        A tuple of (new_state, value).
    """
    new_state = _xorshift32(state)
    value = ti.cast(new_state >> 8, ti.f32) * _INV_2_24
    return new_state, value


@ti.func
def random_range(state: ti.u32, low: ti.f32, high: ti.f32):
    """Draw a uniform float in [low, high).

    Returns:
        A tuple of (new_state, value).
    """
    new_state, u = next_random(state)
    return new_state, low + (high - low) * u


@ti.func
def random_in_cube(state: ti.u32):
    """Draw a point uniformly from the cube [-1, 1)^3.

    Each component is sampled independently; there is no rejection step.

    Returns:
        A tuple of (new_state, point).
    """
    s, x = random_range(state, -1.0, 1.0)
    s, y = random_range(s, -1.0, 1.0)
    s, z = random_range(s, -1.0, 1.0)
    return s, vec3(x, y, z)
