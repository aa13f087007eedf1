"""
Animation import

glTF stores animations as channels, each targeting one property of one
node. Output animations are stored per joint, so channels are grouped by
target node name and sampled into the tracks of the matching joint.
"""

import logging
from typing import Dict, List, Optional

from ..animation.animation import Animation, JointTrack
from ..animation.skeleton import Skeleton
from ..errors import StructuralError
from .channels import sample_channel
from .document import GltfDocument
from .skeleton_import import node_transform


logger = logging.getLogger(__name__)


def _channels_per_joint(document, gltf_animation) -> Dict[str, list]:
    channels: Dict[str, list] = {}
    for channel in gltf_animation.channels or []:
        if channel.target is None or channel.target.node is None:
            continue
        name = document.node_name(channel.target.node)
        channels.setdefault(name, []).append(channel)
    return channels


def _add_bind_pose_keys(joint_track: JointTrack, document, node_idx: int):
    """Pad every empty track with the node's rest pose at time 0."""
    rest = node_transform(document, node_idx)
    if not joint_track.translations.keyframes:
        joint_track.translations.add_keyframe(0.0, rest.translation)
    if not joint_track.rotations.keyframes:
        joint_track.rotations.add_keyframe(0.0, rest.rotation)
    if not joint_track.scales.keyframes:
        joint_track.scales.add_keyframe(0.0, rest.scale)


def import_animation(
    document: GltfDocument,
    gltf_animation,
    skeleton: Skeleton,
    sampling_rate: float,
    name: Optional[str] = None
) -> Animation:
    """
    Build the per-joint tracks of one animation.

    Args:
        document: GltfDocument
        gltf_animation: pygltflib Animation
        skeleton: Skeleton the tracks are aligned with
        sampling_rate: Resampling rate for CUBICSPLINE curves
        name: Output animation name (defaults to the glTF name)

    Returns:
        Validated animation with one JointTrack per skeleton joint
    """
    animation = Animation(name if name is not None else gltf_animation.name)
    channels_per_joint = _channels_per_joint(document, gltf_animation)
    samplers = gltf_animation.samplers or []

    node_indices = document.node_indices_by_name()

    tracks: List[JointTrack] = []
    duration = 0.0
    for joint_name in skeleton.joint_names:
        joint_track = JointTrack()

        for channel in channels_per_joint.get(joint_name, []):
            if not 0 <= channel.sampler < len(samplers):
                raise StructuralError(
                    f"Channel on joint '{joint_name}' references missing sampler {channel.sampler}"
                )
            duration = sample_channel(
                document,
                samplers[channel.sampler],
                channel.target.path,
                sampling_rate,
                joint_track,
                duration,
            )

        node_idx = node_indices.get(joint_name)
        if node_idx is None:
            raise StructuralError(f"Joint '{joint_name}' has no matching node")
        _add_bind_pose_keys(joint_track, document, node_idx)

        tracks.append(joint_track)

    animation.tracks = tracks
    animation.duration = duration

    logger.debug("Processed animation '%s' (tracks: %d, duration: %ss).",
                 animation.name, len(animation.tracks), animation.duration)

    animation.validate(skeleton.num_joints)
    return animation
