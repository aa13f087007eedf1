"""In-memory glTF documents for tests"""

import numpy as np
import pygltflib

from gltfskel.loaders.document import GltfDocument


class DocumentBuilder:
    """Builds a GLB-style document whose accessors live in one binary blob."""

    def __init__(self):
        self.gltf = pygltflib.GLTF2()
        self.gltf.buffers.append(pygltflib.Buffer(byteLength=0))
        self.blob = bytearray()

    def add_node(self, name=None, children=None, translation=None, rotation=None,
                 scale=None, matrix=None) -> int:
        node = pygltflib.Node(
            name=name,
            children=list(children) if children else [],
            translation=translation,
            rotation=rotation,
            scale=scale,
            matrix=matrix,
        )
        self.gltf.nodes.append(node)
        return len(self.gltf.nodes) - 1

    def add_scene(self, nodes, name=None) -> int:
        self.gltf.scenes.append(pygltflib.Scene(name=name, nodes=list(nodes)))
        if self.gltf.scene is None:
            self.gltf.scene = 0
        return len(self.gltf.scenes) - 1

    def add_skin(self, joints, skeleton=None, name=None) -> int:
        self.gltf.skins.append(pygltflib.Skin(name=name, joints=list(joints), skeleton=skeleton))
        return len(self.gltf.skins) - 1

    def add_bytes(self, data: bytes, byte_stride=None) -> int:
        """Append raw bytes as a new buffer view."""
        while len(self.blob) % 4:
            self.blob.append(0)
        offset = len(self.blob)
        self.blob.extend(data)
        self.gltf.bufferViews.append(pygltflib.BufferView(
            buffer=0, byteOffset=offset, byteLength=len(data), byteStride=byte_stride,
        ))
        return len(self.gltf.bufferViews) - 1

    def add_accessor(self, data, accessor_type, with_bounds=False,
                     component_type=pygltflib.FLOAT, dtype='f4') -> int:
        array = np.asarray(data, dtype=dtype)
        view = self.add_bytes(array.tobytes())
        accessor = pygltflib.Accessor(
            bufferView=view,
            byteOffset=0,
            componentType=component_type,
            count=len(array),
            type=accessor_type,
        )
        if with_bounds:
            accessor.max = [float(array.max())]
            accessor.min = [float(array.min())]
        self.gltf.accessors.append(accessor)
        return len(self.gltf.accessors) - 1

    def add_sampler_accessors(self, times, values, path):
        """Accessors for a sampler: timestamps with bounds, VEC3/VEC4 values."""
        input_idx = self.add_accessor(times, pygltflib.SCALAR, with_bounds=True)
        value_type = pygltflib.VEC4 if path == "rotation" else pygltflib.VEC3
        output_idx = self.add_accessor(values, value_type)
        return input_idx, output_idx

    def add_animation(self, name, channels) -> int:
        """
        Args:
            channels: (node, path, times, values, interpolation) tuples
        """
        animation = pygltflib.Animation(name=name, channels=[], samplers=[])
        for node, path, times, values, interpolation in channels:
            input_idx, output_idx = self.add_sampler_accessors(times, values, path)
            animation.samplers.append(pygltflib.AnimationSampler(
                input=input_idx, output=output_idx, interpolation=interpolation,
            ))
            animation.channels.append(pygltflib.AnimationChannel(
                sampler=len(animation.samplers) - 1,
                target=pygltflib.AnimationChannelTarget(node=node, path=path),
            ))
        self.gltf.animations.append(animation)
        return len(self.gltf.animations) - 1

    def build(self) -> GltfDocument:
        self.gltf.buffers[0].byteLength = len(self.blob)
        self.gltf.set_binary_blob(bytes(self.blob))
        return GltfDocument(self.gltf)


def chain_document(joint_order=(2, 0, 1)):
    """J0 <- J1 <- J2 with a skin listing the joints in the given order."""
    builder = DocumentBuilder()
    j0 = builder.add_node("J0", children=[1], translation=[0.0, 1.0, 0.0])
    j1 = builder.add_node("J1", children=[2])
    j2 = builder.add_node("J2", scale=[2.0, 2.0, 2.0])
    builder.add_scene([j0])
    builder.add_skin([(j0, j1, j2)[i] for i in joint_order])
    return builder
