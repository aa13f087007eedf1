"""
gltfskel - glTF skeleton and animation import

Converts glTF scene graphs into joint hierarchies and per-joint
translation/rotation/scale keyframe tracks.
"""

# Configuration
from .config.settings import *

# Errors
from .errors import (
    ImportFailure,
    FormatMismatch,
    SchemaViolation,
    UnsupportedChannel,
    StructuralError,
    ValidationFailure,
)

# Animation data
from .animation import (
    Transform,
    Joint,
    Skeleton,
    Keyframe,
    Track,
    JointTrack,
    Animation,
    AnimationTarget,
    InterpolationType,
)

# Loaders
from .loaders import GltfDocument, GltfImporter

__version__ = "0.1.0"
__all__ = [
    # Config (exported via *)
    # Errors
    "ImportFailure",
    "FormatMismatch",
    "SchemaViolation",
    "UnsupportedChannel",
    "StructuralError",
    "ValidationFailure",
    # Animation data
    "Transform",
    "Joint",
    "Skeleton",
    "Keyframe",
    "Track",
    "JointTrack",
    "Animation",
    "AnimationTarget",
    "InterpolationType",
    # Loaders
    "GltfDocument",
    "GltfImporter",
]
