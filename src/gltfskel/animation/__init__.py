"""
Animation System

Skeleton and per-joint keyframe track data produced by the importer.
"""

from .skeleton import Transform, Joint, Skeleton
from .animation import Keyframe, Track, JointTrack, Animation, AnimationTarget, InterpolationType

__all__ = [
    'Transform',
    'Joint',
    'Skeleton',
    'Keyframe',
    'Track',
    'JointTrack',
    'Animation',
    'AnimationTarget',
    'InterpolationType',
]
