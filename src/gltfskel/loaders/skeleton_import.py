"""
Skeleton import

Finds skeleton roots in a glTF scene and builds the joint hierarchy below
them.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from ..animation.skeleton import Joint, Skeleton, Transform
from ..errors import SchemaViolation, StructuralError
from .document import GltfDocument


logger = logging.getLogger(__name__)


def node_transform(document: GltfDocument, node_idx: int) -> Transform:
    """
    Rest transform of a node.

    Missing TRS components default to identity. A matrix is decomposed.
    """
    node = document.nodes[node_idx]
    if node.matrix:
        return Transform.from_matrix(node.matrix)
    return Transform(node.translation, node.rotation, node.scale)


def scene_nodes(document: GltfDocument, scene_idx: int) -> Set[int]:
    """Every node reachable from the scene's root nodes."""
    found: Set[int] = set()
    open_nodes = list(document.scenes[scene_idx].nodes or [])
    while open_nodes:
        node_idx = open_nodes.pop()
        if node_idx in found:
            continue
        found.add(node_idx)
        open_nodes.extend(document.children(node_idx))
    return found


def skins_for_scene(document: GltfDocument, scene_idx: int) -> list:
    """Skins whose first joint belongs to the scene."""
    found = scene_nodes(document, scene_idx)
    return [skin for skin in document.skins if skin.joints and skin.joints[0] in found]


def _ancestors(node_idx: int, parents: Dict[int, int]) -> List[int]:
    """The node followed by its ancestors, nearest first."""
    chain = [node_idx]
    seen = {node_idx}
    while chain[-1] in parents:
        parent_idx = parents[chain[-1]]
        if parent_idx in seen:
            raise StructuralError(f"Node hierarchy loops through node {parent_idx}")
        seen.add(parent_idx)
        chain.append(parent_idx)
    return chain


def _walk_to_root(start: int, parents: Dict[int, int], resolved: Dict[int, int]) -> int:
    path = []
    seen = set()
    node_idx = start
    while node_idx in parents and node_idx not in resolved:
        if node_idx in seen:
            raise StructuralError(f"Skin joints loop through node {node_idx}")
        seen.add(node_idx)
        path.append(node_idx)
        node_idx = parents[node_idx]

    root = resolved.get(node_idx, node_idx)
    for visited in path:
        resolved[visited] = root
    return root


def _common_ancestor(nodes: Iterable[int], parents: Dict[int, int]) -> Optional[int]:
    """Deepest node that is an ancestor of (or equal to) every given node."""
    chains = [_ancestors(node_idx, parents) for node_idx in nodes]
    common = set(chains[0])
    for chain in chains[1:]:
        common.intersection_update(chain)
    for node_idx in chains[0]:
        if node_idx in common:
            return node_idx
    return None


def find_skin_root(document: GltfDocument, skin) -> Optional[int]:
    """
    Find which node is the skeleton root of a skin.

    Args:
        document: GltfDocument
        skin: pygltflib Skin

    Returns:
        Root node index, or None when the skin has no joints

    Raises:
        SchemaViolation: the declared root is neither a joint nor an ancestor of all joints
        StructuralError: the joints have no single root
    """
    joints = list(skin.joints or [])
    if not joints:
        return None
    joint_set = set(joints)

    if skin.skeleton is not None:
        root = skin.skeleton
        if root in joint_set:
            return root
        parents = document.parent_map()
        if all(root in _ancestors(joint_idx, parents) for joint_idx in joints):
            return root
        raise SchemaViolation(
            f"Skin '{skin.name}' declares node {root} as skeleton root, which is "
            f"neither one of its joints nor an ancestor of all of them"
        )

    # Parent links between joints of this skin only
    skin_parents: Dict[int, int] = {}
    for joint_idx in joints:
        for child_idx in document.children(joint_idx):
            if child_idx in joint_set:
                skin_parents[child_idx] = joint_idx

    resolved: Dict[int, int] = {}
    terminals = {_walk_to_root(joint_idx, skin_parents, resolved) for joint_idx in joints}
    if len(terminals) == 1:
        return terminals.pop()

    # Joints linked through non-joint nodes
    root = _common_ancestor(sorted(terminals), document.parent_map())
    if root is None:
        raise StructuralError(
            f"Skin '{skin.name}' joints form {len(terminals)} unconnected hierarchies"
        )
    return root


def resolve_roots(document: GltfDocument, scene_idx: int) -> List[int]:
    """
    Find the skeleton roots of a scene.

    Without skins the whole scene graph is the skeleton. Otherwise every
    skin contributes its root; all skins end up in one skeleton.

    Returns:
        Root node indices in ascending order, without duplicates
    """
    roots: Set[int] = set()
    skins = skins_for_scene(document, scene_idx)
    if not skins:
        logger.debug("No skin exists in the scene, the whole scene graph will be "
                     "considered as a skeleton.")
        roots.update(document.scenes[scene_idx].nodes or [])
    else:
        if len(skins) > 1:
            logger.debug("Multiple skins exist in the scene, they will all be "
                         "exported to a single skeleton.")
        for skin in skins:
            root = find_skin_root(document, skin)
            if root is not None:
                roots.add(root)
    return sorted(roots)


def _create_joint(document, node_idx: int, animated: Set[int]) -> Joint:
    node = document.nodes[node_idx]
    name = document.node_name(node_idx)
    if node.matrix and node_idx in animated:
        # Animation targets may only carry TRS properties
        raise SchemaViolation(
            f"Node \"{name}\" transformation matrix is not empty. This is disallowed "
            f"by the glTF spec as this node is an animation target."
        )
    return Joint(name, node_transform(document, node_idx))


def _build_joint_tree(document, root_idx: int, animated: Set[int]) -> Joint:
    num_nodes = len(document.nodes)
    root = _create_joint(document, root_idx, animated)

    on_path = {root_idx}
    stack = [(root_idx, root, iter(document.children(root_idx)))]
    while stack:
        node_idx, joint, children = stack[-1]
        child_idx = next(children, None)
        if child_idx is None:
            stack.pop()
            on_path.discard(node_idx)
            continue

        if not 0 <= child_idx < num_nodes:
            raise StructuralError(
                f"Node \"{document.node_name(node_idx)}\" references missing child {child_idx}"
            )
        if child_idx in on_path:
            raise StructuralError(
                f"Node hierarchy loops back to \"{document.node_name(child_idx)}\""
            )

        child = _create_joint(document, child_idx, animated)
        joint.add_child(child)
        on_path.add(child_idx)
        stack.append((child_idx, child, iter(document.children(child_idx))))

    return root


def build_skeleton(document: GltfDocument, roots: List[int], name: str = "Skeleton") -> Skeleton:
    """
    Build the joint hierarchy below the given root nodes.

    Args:
        document: GltfDocument
        roots: Root node indices
        name: Skeleton name

    Returns:
        Validated skeleton

    Raises:
        SchemaViolation: an animated node carries a matrix
        StructuralError: the hierarchy contains a cycle
        ValidationFailure: the resulting forest is not a valid skeleton
    """
    num_nodes = len(document.nodes)
    animated = document.animation_target_nodes()

    root_joints = []
    for root_idx in roots:
        if not 0 <= root_idx < num_nodes:
            raise StructuralError(f"Skeleton root {root_idx} is not a node")
        root_joints.append(_build_joint_tree(document, root_idx, animated))

    skeleton = Skeleton(root_joints, name=name)
    skeleton.validate()
    return skeleton
