"""
Skeleton

Represents a hierarchical skeleton structure with joints/bones.
"""

from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np
from pyrr import Quaternion, Vector3, quaternion

from ..errors import ValidationFailure


def _floats(value, default) -> np.ndarray:
    return np.array(value if value is not None else default, dtype='f4')


class Transform:
    """
    Local TRS transform of a joint.

    Rotation is stored as a pyrr quaternion in (x, y, z, w) order, the same
    layout glTF uses.
    """

    def __init__(
        self,
        translation: Optional[Sequence[float]] = None,
        rotation: Optional[Sequence[float]] = None,
        scale: Optional[Sequence[float]] = None
    ):
        self.translation = Vector3(_floats(translation, [0.0, 0.0, 0.0]))
        self.rotation = Quaternion(_floats(rotation, [0.0, 0.0, 0.0, 1.0]))
        self.scale = Vector3(_floats(scale, [1.0, 1.0, 1.0]))

    @classmethod
    def identity(cls) -> 'Transform':
        return cls()

    @classmethod
    def from_matrix(cls, matrix: Sequence[float]) -> 'Transform':
        """
        Decompose a glTF node matrix into TRS.

        Args:
            matrix: 16 floats in glTF column-major order

        Returns:
            Equivalent Transform
        """
        # Column-major storage read row by row: rows of the basis are the
        # scaled columns of the glTF rotation, translation is the last row
        m = np.array(matrix, dtype='f8').reshape(4, 4)
        basis = m[:3, :3]
        scale = np.linalg.norm(basis, axis=1)
        if np.linalg.det(basis) < 0.0:
            # Mirrored
            scale = -scale
        divisor = np.where(scale == 0.0, 1.0, scale)

        # create_from_matrix expects column vectors, so undo the transposition
        rotation = quaternion.create_from_matrix((basis / divisor[:, None]).T)
        return cls(translation=m[3, :3], rotation=rotation, scale=scale)

    def __repr__(self):
        return (f"Transform(t={list(self.translation)}, r={list(self.rotation)}, "
                f"s={list(self.scale)})")


class Joint:
    """
    Represents a single joint (bone) in a skeleton hierarchy.

    Each joint has:
    - Bind transform (relative to parent)
    - Ordered children
    """

    def __init__(self, name: str, transform: Optional[Transform] = None):
        """
        Initialize a joint.

        Args:
            name: Joint name, unique within its skeleton
            transform: Bind pose local transform (identity when omitted)
        """
        self.name = name
        self.transform = transform if transform is not None else Transform.identity()
        self.children: List['Joint'] = []

    def add_child(self, child: 'Joint'):
        """Add a child joint to this joint's hierarchy."""
        self.children.append(child)

    def __repr__(self):
        return f"Joint(name='{self.name}', children={len(self.children)})"


class Skeleton:
    """
    Hierarchical skeleton structure.

    A skeleton is a forest of root joints. Joint indices follow depth-first
    pre-order, roots in order, children in order. Animation tracks are
    aligned with that order.
    """

    def __init__(self, roots: Optional[List[Joint]] = None, name: str = "Skeleton"):
        """
        Initialize skeleton.

        Args:
            roots: Root joints of the forest
            name: Skeleton name for debugging
        """
        self.name = name
        self.roots: List[Joint] = list(roots) if roots else []

    def iter_joints(self) -> Iterator[Joint]:
        """Yield joints in depth-first pre-order."""
        stack = list(reversed(self.roots))
        while stack:
            joint = stack.pop()
            yield joint
            stack.extend(reversed(joint.children))

    @property
    def joints(self) -> List[Joint]:
        return list(self.iter_joints())

    @property
    def num_joints(self) -> int:
        return sum(1 for _ in self.iter_joints())

    @property
    def joint_names(self) -> List[str]:
        return [joint.name for joint in self.iter_joints()]

    @property
    def parents(self) -> List[int]:
        """Parent index of every joint, -1 for roots."""
        parents: List[int] = []
        stack = [(root, -1) for root in reversed(self.roots)]
        while stack:
            joint, parent_index = stack.pop()
            index = len(parents)
            parents.append(parent_index)
            stack.extend((child, index) for child in reversed(joint.children))
        return parents

    def get_joint(self, name: str) -> Optional[Joint]:
        """
        Find a joint by name.

        Args:
            name: Joint name

        Returns:
            Joint if found, None otherwise
        """
        for joint in self.iter_joints():
            if joint.name == name:
                return joint
        return None

    def validate(self):
        """
        Check the forest is a valid skeleton.

        Raises:
            ValidationFailure: a joint is shared between parents, the hierarchy
                loops back on itself, or two joints have the same name
        """
        seen_ids = set()
        names: Dict[str, int] = {}
        stack = list(reversed(self.roots))
        while stack:
            joint = stack.pop()
            if id(joint) in seen_ids:
                raise ValidationFailure(
                    f"Joint '{joint.name}' is reachable more than once (shared parent or cycle)"
                )
            seen_ids.add(id(joint))

            if joint.name in names:
                raise ValidationFailure(f"Duplicate joint name '{joint.name}'")
            names[joint.name] = len(names)

            stack.extend(reversed(joint.children))

    def __repr__(self):
        return f"Skeleton(name='{self.name}', joints={self.num_joints}, roots={len(self.roots)})"
