"""
Import Configuration Settings

All configuration constants for the skeleton and animation importer.
Modify these values to change import behavior.
"""

# ============================================================================
# Animation Sampling
# ============================================================================

# glTF carries no scene frame rate, so a rate of 0 ("automatic") resolves to this
DEFAULT_SAMPLING_RATE = 30.0  # Hz, used to resample CUBICSPLINE curves

# Offset of the hold key inserted before each STEP transition (seconds).
# Must stay below the smallest authored time delta to keep key times increasing.
STEP_EPSILON = 1e-6

# Rotation keys are re-normalized after Hermite blending
QUATERNION_NORM_TOLERANCE = 1e-5

# ============================================================================
# Scene Selection
# ============================================================================

DEFAULT_SCENE_INDEX = 0  # Used when the document declares no default scene

# ============================================================================
# Naming
# ============================================================================

# Unnamed nodes/animations are addressed as <prefix><index>
UNNAMED_NODE_PREFIX = "node_"
UNNAMED_ANIMATION_PREFIX = "animation_"
