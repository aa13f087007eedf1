"""
Curve sampling

Converts glTF sampler curves to keyframes that are interpolated linearly at
runtime:

- LINEAR curves map 1:1 to keyframes.
- STEP curves get a second key just before each transition to hold the value.
- CUBICSPLINE curves are resampled at a fixed rate along the Hermite spline.
"""

import math

import numpy as np
from pyrr import vector

from ..config.settings import QUATERNION_NORM_TOLERANCE, STEP_EPSILON
from ..errors import SchemaViolation
from .animation import AnimationTarget, Track


def sample_linear(times: np.ndarray, values: np.ndarray, track: Track):
    """
    Copy a LINEAR curve verbatim.

    Args:
        times: Authored timestamps, shape (n,)
        values: Authored values, shape (n, width)
        track: Track receiving the keyframes
    """
    if len(values) != len(times):
        raise SchemaViolation(
            f"LINEAR sampler has {len(times)} timestamps but {len(values)} values"
        )

    for time, value in zip(times, values):
        track.add_keyframe(float(time), track.target.make_value(value))


def sample_step(times: np.ndarray, values: np.ndarray, track: Track, epsilon: float = STEP_EPSILON):
    """
    Expand a STEP curve to 2n - 1 keyframes.

    Each value is held by a second key placed epsilon before the next
    timestamp. The last value is a single key.
    """
    if len(values) != len(times):
        raise SchemaViolation(
            f"STEP sampler has {len(times)} timestamps but {len(values)} values"
        )

    count = len(times)
    for i in range(count):
        track.add_keyframe(float(times[i]), track.target.make_value(values[i]))
        if i < count - 1:
            track.add_keyframe(float(times[i + 1]) - epsilon, track.target.make_value(values[i]))


def hermite(u, p0, m0, p1, m1):
    """
    Evaluate a cubic Hermite spline.

    p(u) = (2u^3 - 3u^2 + 1)p0 + (u^3 - 2u^2 + u)m0 + (-2u^3 + 3u^2)p1 + (u^3 - u^2)m1

    Args:
        u: Normalized segment parameter(s) in [0, 1]; broadcast against points
        p0: Start point
        m0: Start tangent, already scaled by the segment duration
        p1: End point
        m1: End tangent, already scaled by the segment duration
    """
    u2 = u * u
    u3 = u2 * u

    a = 2.0 * u3 - 3.0 * u2 + 1.0
    b = u3 - 2.0 * u2 + u
    c = -2.0 * u3 + 3.0 * u2
    d = u3 - u2

    return a * p0 + b * m0 + c * p1 + d * m1


def _normalize_rotations(result, points, keys, u):
    """
    Restore unit length after Hermite blending.

    Opposite neighbouring keys (q and -q) can blend through the zero
    quaternion. Such samples take the nearest authored key instead.

    Raises:
        SchemaViolation: an authored rotation has zero length
    """
    norms = np.linalg.norm(result, axis=1)
    degenerate = ~(norms > QUATERNION_NORM_TOLERANCE)
    if np.any(degenerate):
        nearest = np.where(u[:, 0] < 0.5, keys, keys + 1)
        result = result.copy()
        result[degenerate] = points[nearest[degenerate]]
        norms = np.linalg.norm(result, axis=1)
        if np.any(~(norms > QUATERNION_NORM_TOLERANCE)):
            raise SchemaViolation("CUBICSPLINE sampler contains a zero length rotation")
    return vector.normalize(result)


def sample_cubic_spline(
    times: np.ndarray,
    values: np.ndarray,
    track: Track,
    sampling_rate: float,
    duration: float
):
    """
    Resample a CUBICSPLINE curve at a fixed rate.

    Outputs floor(duration * sampling_rate) + 1 keys at i / sampling_rate.
    Values are stored as (in-tangent, value, out-tangent) triplets. The
    segment of each sample time is found by binary search, so sample times
    need not be ordered.

    Args:
        times: Authored timestamps, shape (n,)
        values: Triplets, shape (3n, width)
        track: Track receiving the keyframes
        sampling_rate: Output keys per second
        duration: Channel duration in seconds
    """
    num_keys = len(times)
    if len(values) != num_keys * 3:
        raise SchemaViolation(
            f"CUBICSPLINE sampler has {num_keys} timestamps but {len(values)} values "
            f"(expected {num_keys * 3})"
        )
    if num_keys == 0:
        return

    values = np.asarray(values, dtype='f8')
    in_tangents = values[0::3]
    points = values[1::3]
    out_tangents = values[2::3]
    key_times = np.asarray(times, dtype='f8')

    num_samples = int(math.floor(duration * sampling_rate)) + 1
    sample_times = np.minimum(np.arange(num_samples, dtype='f8') / sampling_rate, duration)

    if num_keys == 1:
        keys = np.zeros(num_samples, dtype=int)
        u = np.zeros((num_samples, 1))
        result = points[keys]
    else:
        keys = np.searchsorted(key_times, sample_times, side='right') - 1
        keys = np.clip(keys, 0, num_keys - 2)

        t0 = key_times[keys]
        t1 = key_times[keys + 1]
        span = (t1 - t0)[:, None]
        # Clamped outside the authored range
        u = np.clip((sample_times - t0) / (t1 - t0), 0.0, 1.0)[:, None]

        result = hermite(
            u,
            points[keys],
            out_tangents[keys] * span,
            points[keys + 1],
            in_tangents[keys + 1] * span,
        )

    if track.target is AnimationTarget.ROTATION:
        result = _normalize_rotations(result, points, keys, u)

    for time, value in zip(sample_times, result):
        track.add_keyframe(float(time), track.target.make_value(value))
