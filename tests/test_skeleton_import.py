"""Tests for skeleton root resolution and construction"""

import math
from itertools import permutations

import pytest
import numpy as np

from gltfskel.errors import SchemaViolation, StructuralError, ValidationFailure
from gltfskel.loaders.skeleton_import import (
    build_skeleton,
    find_skin_root,
    resolve_roots,
    skins_for_scene,
)

from gltf_fixtures import DocumentBuilder, chain_document


@pytest.mark.parametrize("order", list(permutations(range(3))))
def test_skin_root_independent_of_joint_order(order):
    """The parentless joint is the root whatever the joint order"""
    document = chain_document(order).build()

    assert find_skin_root(document, document.skins[0]) == 0


def test_explicit_skin_root():
    """A declared skeleton root is used as is"""
    builder = chain_document()
    builder.gltf.skins[0].skeleton = 1
    document = builder.build()

    assert find_skin_root(document, document.skins[0]) == 1


def test_explicit_root_ancestor_of_joints():
    """A declared root may be a non-joint ancestor of all joints"""
    builder = DocumentBuilder()
    armature = builder.add_node("Armature", children=[1])
    builder.add_node("hips", children=[2])
    builder.add_node("spine")
    builder.add_scene([armature])
    builder.add_skin([1, 2], skeleton=armature)
    document = builder.build()

    assert find_skin_root(document, document.skins[0]) == armature


def test_explicit_root_unrelated_to_joints():
    """A declared root outside the joint hierarchy is rejected"""
    builder = chain_document()
    builder.add_node("Elsewhere")
    builder.gltf.skins[0].skeleton = 3
    document = builder.build()

    with pytest.raises(SchemaViolation):
        find_skin_root(document, document.skins[0])


def test_empty_skin_has_no_root():
    """A skin without joints contributes nothing"""
    builder = chain_document()
    builder.add_skin([])
    document = builder.build()

    assert find_skin_root(document, document.skins[1]) is None
    assert resolve_roots(document, 0) == [0]


def test_joints_linked_through_non_joint():
    """Joints separated by a non-joint node resolve to their common ancestor"""
    builder = DocumentBuilder()
    root = builder.add_node("root", children=[1, 2])
    builder.add_node("left")
    builder.add_node("right")
    builder.add_scene([root])
    builder.add_skin([1, 2])
    document = builder.build()

    assert find_skin_root(document, document.skins[0]) == root


def test_disconnected_skin_joints():
    """Joints with no common ancestor cannot form one skeleton"""
    builder = DocumentBuilder()
    builder.add_node("a")
    builder.add_node("b")
    builder.add_scene([0, 1])
    builder.add_skin([0, 1])
    document = builder.build()

    with pytest.raises(StructuralError):
        find_skin_root(document, document.skins[0])


def test_cyclic_skin_joints():
    """Joints that parent each other have no root"""
    builder = DocumentBuilder()
    builder.add_node("a", children=[1])
    builder.add_node("b", children=[0])
    builder.add_scene([0])
    builder.add_skin([0, 1])
    document = builder.build()

    with pytest.raises(StructuralError):
        find_skin_root(document, document.skins[0])


def test_no_skins_uses_scene_roots():
    """Without skins every scene root is a skeleton root"""
    builder = DocumentBuilder()
    builder.add_node("b")
    builder.add_node("a")
    builder.add_scene([1, 0])
    document = builder.build()

    assert resolve_roots(document, 0) == [0, 1]


def test_two_disjoint_skins():
    """Two skins give two roots in one forest"""
    builder = DocumentBuilder()
    builder.add_node("body_root", children=[1])
    builder.add_node("body_spine")
    builder.add_node("tail_root", children=[3])
    builder.add_node("tail_tip")
    builder.add_scene([0, 2])
    builder.add_skin([1, 0])
    builder.add_skin([3, 2])
    document = builder.build()

    roots = resolve_roots(document, 0)
    skeleton = build_skeleton(document, roots)

    assert roots == [0, 2]
    assert [root.name for root in skeleton.roots] == ["body_root", "tail_root"]
    assert skeleton.num_joints == 4


def test_shared_root_is_deduplicated():
    """Skins sharing a root contribute it once"""
    builder = chain_document()
    builder.add_skin([1, 0])
    document = builder.build()

    assert resolve_roots(document, 0) == [0]


def test_skins_outside_scene_are_ignored():
    """Only skins whose joints are in the scene are used"""
    builder = chain_document()
    builder.add_node("detached")
    builder.add_skin([3])
    document = builder.build()

    assert len(skins_for_scene(document, 0)) == 1


def test_build_preserves_hierarchy_and_transforms():
    """Joints keep names, bind transforms and child order"""
    builder = DocumentBuilder()
    builder.add_node("root", children=[2, 1], translation=[1.0, 2.0, 3.0])
    builder.add_node("second", rotation=[0.0, 0.0, 1.0, 0.0])
    builder.add_node("first", scale=[0.5, 0.5, 0.5])
    builder.add_scene([0])
    document = builder.build()

    skeleton = build_skeleton(document, [0])
    root = skeleton.roots[0]

    assert [child.name for child in root.children] == ["first", "second"]
    assert np.allclose(np.asarray(root.transform.translation), [1.0, 2.0, 3.0])
    assert np.allclose(np.asarray(root.transform.rotation), [0.0, 0.0, 0.0, 1.0])
    assert np.allclose(np.asarray(root.children[0].transform.scale), [0.5, 0.5, 0.5])
    assert np.allclose(np.asarray(root.children[1].transform.rotation), [0.0, 0.0, 1.0, 0.0])


def test_unnamed_nodes_get_index_names():
    """Unnamed nodes are named after their index"""
    builder = DocumentBuilder()
    builder.add_node(None, children=[1])
    builder.add_node(None)
    builder.add_scene([0])
    document = builder.build()

    skeleton = build_skeleton(document, [0])

    assert skeleton.joint_names == ["node_0", "node_1"]


def test_cycle_is_rejected():
    """A node graph that loops back fails instead of recursing forever"""
    builder = DocumentBuilder()
    builder.add_node("a", children=[1])
    builder.add_node("b", children=[2])
    builder.add_node("c", children=[0])
    builder.add_scene([0])
    document = builder.build()

    with pytest.raises(StructuralError):
        build_skeleton(document, [0])


def test_shared_child_fails_validation():
    """A node with two parents duplicates its joint name"""
    builder = DocumentBuilder()
    builder.add_node("a", children=[2])
    builder.add_node("b", children=[2])
    builder.add_node("shared")
    builder.add_scene([0, 1])
    document = builder.build()

    with pytest.raises(ValidationFailure):
        build_skeleton(document, [0, 1])


def test_matrix_on_animated_node():
    """Animation targets cannot use a matrix transform"""
    builder = DocumentBuilder()
    identity = [1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0, 1.0]
    builder.add_node("bone", matrix=identity)
    builder.add_scene([0])
    builder.add_animation("wiggle", [
        (0, "translation", [0.0, 1.0], [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]], "LINEAR"),
    ])
    document = builder.build()

    with pytest.raises(SchemaViolation):
        build_skeleton(document, [0])


def test_matrix_on_static_node():
    """Static matrix nodes are decomposed into a bind transform"""
    builder = DocumentBuilder()
    # Rz(90 degrees), translated
    matrix = [0.0, 1.0, 0.0, 0.0, -1.0, 0.0, 0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 5.0, 6.0, 7.0, 1.0]
    builder.add_node("mount", matrix=matrix)
    builder.add_scene([0])
    document = builder.build()

    skeleton = build_skeleton(document, [0])

    transform = skeleton.roots[0].transform
    half_sqrt2 = math.sqrt(0.5)
    assert np.allclose(np.asarray(transform.translation), [5.0, 6.0, 7.0])
    assert np.allclose(np.asarray(transform.rotation), [0.0, 0.0, half_sqrt2, half_sqrt2], atol=1e-6)


def test_deep_hierarchy():
    """Deep chains are built without hitting the recursion limit"""
    builder = DocumentBuilder()
    depth = 3000
    for i in range(depth):
        builder.add_node(f"bone_{i}", children=[i + 1] if i + 1 < depth else [])
    builder.add_scene([0])
    document = builder.build()

    skeleton = build_skeleton(document, [0])

    assert skeleton.num_joints == depth
    assert skeleton.parents[-1] == depth - 2
