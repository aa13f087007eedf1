"""
Channel dispatch

Routes one glTF animation channel to the curve sampler matching its
interpolation and target property.
"""

import numpy as np

from ..animation.animation import AnimationTarget, InterpolationType, JointTrack
from ..animation.sampling import sample_cubic_spline, sample_linear, sample_step
from ..errors import SchemaViolation
from .buffer_view import typed_view
from .document import GltfDocument


def sample_channel(
    document: GltfDocument,
    sampler,
    target_path: str,
    sampling_rate: float,
    joint_track: JointTrack,
    duration: float
) -> float:
    """
    Sample one channel into the matching track of a joint.

    Args:
        document: GltfDocument owning the sampler accessors
        sampler: pygltflib AnimationSampler driving the channel
        target_path: Animated property ("translation", "rotation" or "scale")
        sampling_rate: Resampling rate for CUBICSPLINE curves
        joint_track: Tracks of the targeted joint
        duration: Animation duration so far

    Returns:
        Animation duration including this channel

    Raises:
        UnsupportedChannel: unknown interpolation or target property
        SchemaViolation: missing max bound, bad sample counts, unordered timestamps
        FormatMismatch: accessor element sizes do not match
    """
    target = AnimationTarget.parse(target_path)
    interpolation = InterpolationType.parse(sampler.interpolation)

    gltf = document.gltf
    input_accessor = gltf.accessors[sampler.input]
    output_accessor = gltf.accessors[sampler.output]

    # The max of the input accessor is the channel duration. glTF requires
    # sampler inputs to declare min and max.
    if not input_accessor.max:
        raise SchemaViolation(f"Sampler input accessor {sampler.input} does not declare max")
    channel_duration = float(np.float32(input_accessor.max[0]))
    duration = max(duration, channel_duration)

    expected_outputs = input_accessor.count
    if interpolation is InterpolationType.CUBICSPLINE:
        expected_outputs *= 3
    if output_accessor.count != expected_outputs:
        raise SchemaViolation(
            f"{interpolation.value} sampler has {input_accessor.count} inputs and "
            f"{output_accessor.count} outputs"
        )

    timestamps = typed_view(document, sampler.input, np.float32)
    if np.any(np.diff(timestamps) <= 0.0):
        raise SchemaViolation(f"Sampler input accessor {sampler.input} is not strictly increasing")
    values = typed_view(document, sampler.output, np.float32, target.width)

    track = joint_track.track_for(target)
    if interpolation is InterpolationType.LINEAR:
        sample_linear(timestamps, values, track)
    elif interpolation is InterpolationType.STEP:
        sample_step(timestamps, values, track)
    else:
        sample_cubic_spline(timestamps, values, track, sampling_rate, channel_duration)

    return duration
