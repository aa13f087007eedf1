"""
glTF document access

Wraps a parsed pygltflib document with the lookups the importer needs:
resolved buffer bytes, node names and the inverse node hierarchy.
"""

import logging
from pathlib import Path
from typing import Dict, List, Optional, Set
from urllib.parse import unquote

import pygltflib

from ..config.settings import UNNAMED_ANIMATION_PREFIX, UNNAMED_NODE_PREFIX
from ..errors import FormatMismatch


logger = logging.getLogger(__name__)


class GltfDocument:
    """
    Read-only view of a parsed glTF document.
    """

    def __init__(self, gltf: pygltflib.GLTF2, base_path: Optional[Path] = None):
        """
        Args:
            gltf: Parsed document
            base_path: Directory used to resolve external buffer files
        """
        self.gltf = gltf
        self.base_path = Path(base_path) if base_path is not None else None
        self._buffers: Dict[int, bytes] = {}

    @classmethod
    def load(cls, filepath) -> 'GltfDocument':
        """
        Load a GLTF or GLB file.

        Args:
            filepath: Path to .gltf or .glb file
        """
        filepath = Path(filepath)
        logger.info("Loading glTF document: %s", filepath)
        gltf = pygltflib.GLTF2().load(str(filepath))
        return cls(gltf, filepath.parent)

    @property
    def nodes(self) -> List[pygltflib.Node]:
        return self.gltf.nodes or []

    @property
    def skins(self) -> List[pygltflib.Skin]:
        return self.gltf.skins or []

    @property
    def animations(self) -> List[pygltflib.Animation]:
        return self.gltf.animations or []

    @property
    def scenes(self) -> List[pygltflib.Scene]:
        return self.gltf.scenes or []

    def node_name(self, node_index: int) -> str:
        name = self.nodes[node_index].name
        return name if name else f"{UNNAMED_NODE_PREFIX}{node_index}"

    def animation_name(self, animation_index: int) -> str:
        name = self.animations[animation_index].name
        return name if name else f"{UNNAMED_ANIMATION_PREFIX}{animation_index}"

    def node_indices_by_name(self) -> Dict[str, int]:
        """Map node name -> index. The first node wins when names repeat."""
        indices: Dict[str, int] = {}
        for index in range(len(self.nodes)):
            indices.setdefault(self.node_name(index), index)
        return indices

    def children(self, node_index: int) -> List[int]:
        return self.nodes[node_index].children or []

    def parent_map(self) -> Dict[int, int]:
        """Map child node index -> parent node index over the whole document."""
        parents: Dict[int, int] = {}
        for idx in range(len(self.nodes)):
            for child_idx in self.children(idx):
                parents[child_idx] = idx
        return parents

    def animation_target_nodes(self) -> Set[int]:
        """Indices of all nodes targeted by any animation channel."""
        targets: Set[int] = set()
        for animation in self.animations:
            for channel in animation.channels or []:
                if channel.target is not None and channel.target.node is not None:
                    targets.add(channel.target.node)
        return targets

    def buffer_data(self, buffer_index: int) -> bytes:
        """
        Get the bytes of a buffer.

        Args:
            buffer_index: Buffer index

        Returns:
            Buffer contents
        """
        if buffer_index in self._buffers:
            return self._buffers[buffer_index]

        buffer = self.gltf.buffers[buffer_index]
        if not buffer.uri:
            # Embedded buffer (GLB)
            data = self.gltf.binary_blob()
        elif buffer.uri.startswith("data:"):
            data = self.gltf.get_data_from_buffer_uri(buffer.uri)
        else:
            # External buffer file
            base = self.base_path if self.base_path is not None else Path.cwd()
            data = (base / unquote(buffer.uri)).read_bytes()

        if data is None:
            raise FormatMismatch(f"Buffer {buffer_index} has no data")

        self._buffers[buffer_index] = data
        return data
