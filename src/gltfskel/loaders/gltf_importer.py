"""
GLTF/GLB Importer

Imports skeletons and animations from glTF documents.
"""

import logging
from typing import List

from ..animation.animation import Animation
from ..animation.skeleton import Skeleton
from ..config.settings import DEFAULT_SAMPLING_RATE, DEFAULT_SCENE_INDEX
from ..errors import ImportFailure, StructuralError, UnsupportedChannel
from .animation_import import import_animation
from .document import GltfDocument
from .skeleton_import import build_skeleton, resolve_roots


logger = logging.getLogger(__name__)


class GltfImporter:
    """
    Converts a glTF document to a skeleton and per-joint animations.

    The document is never modified, so several importers can share it.
    """

    def __init__(self, document: GltfDocument):
        """
        Initialize importer.

        Args:
            document: Parsed glTF document
        """
        self.document = document
        self._sampling_rate_warned = False

    @classmethod
    def from_file(cls, filepath) -> 'GltfImporter':
        """
        Create an importer for a .gltf or .glb file.

        Args:
            filepath: Path to the file
        """
        return cls(GltfDocument.load(filepath))

    def _default_scene(self) -> int:
        scenes = self.document.scenes
        if not scenes:
            raise StructuralError("No scenes found.")

        # A document without default scene is allowed, take the first one
        scene_idx = self.document.gltf.scene
        if scene_idx is None or not 0 <= scene_idx < len(scenes):
            scene_idx = DEFAULT_SCENE_INDEX

        logger.debug("Importing from default scene #%d with name \"%s\".",
                     scene_idx, scenes[scene_idx].name or "")

        if not scenes[scene_idx].nodes:
            raise StructuralError("Scene has no node.")
        return scene_idx

    def import_skeleton(self) -> Skeleton:
        """
        Import the skeleton of the default scene.

        Returns:
            Skeleton made of every skin root of the scene, or of the whole
            scene graph when the scene has no skin
        """
        try:
            scene_idx = self._default_scene()
            roots = resolve_roots(self.document, scene_idx)
            skeleton = build_skeleton(self.document, roots)
        except ImportFailure as e:
            logger.error("Failed to import skeleton: %s", e)
            raise

        logger.info("Imported skeleton with %d joints", skeleton.num_joints)
        return skeleton

    def animation_names(self) -> List[str]:
        """Names of all animations in the document."""
        return [self.document.animation_name(i) for i in range(len(self.document.animations))]

    def import_animation(self, name: str, skeleton: Skeleton, sampling_rate: float = 0.0) -> Animation:
        """
        Import one animation.

        Args:
            name: Animation name, as listed by animation_names()
            skeleton: Skeleton the tracks must be aligned with
            sampling_rate: Resampling rate for cubic curves in Hz, 0 for automatic

        Returns:
            Animation with one track set per skeleton joint
        """
        if sampling_rate < 0.0:
            raise ValueError(f"Sampling rate cannot be negative, got {sampling_rate}")
        if sampling_rate == 0.0:
            sampling_rate = DEFAULT_SAMPLING_RATE
            if not self._sampling_rate_warned:
                logger.info("The animation sampling rate is set to 0 (automatic) but glTF "
                            "does not carry scene frame rate information. Assuming a "
                            "sampling rate of %shz.", sampling_rate)
                self._sampling_rate_warned = True

        names = self.animation_names()
        if name not in names:
            raise KeyError(f"Animation '{name}' not found. Available: {names}")
        gltf_animation = self.document.animations[names.index(name)]

        try:
            animation = import_animation(self.document, gltf_animation, skeleton, sampling_rate, name=name)
        except ImportFailure as e:
            logger.error("Failed to import animation '%s': %s", name, e)
            raise

        logger.info("Imported animation '%s' (tracks: %d, duration: %.3fs)",
                    animation.name, len(animation.tracks), animation.duration)
        return animation

    def node_properties(self, node_name: str) -> list:
        """User-defined node properties. glTF import does not support any."""
        return []

    def import_property_track(self, animation_name: str, node_name: str, property_name: str,
                              sampling_rate: float = 0.0):
        """User-defined property tracks are not supported for glTF."""
        raise UnsupportedChannel(
            f"Property track '{property_name}' of node '{node_name}' in animation "
            f"'{animation_name}' cannot be imported from glTF"
        )
