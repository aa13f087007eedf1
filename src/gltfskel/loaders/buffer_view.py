"""
Typed buffer views

Exposes accessor data as read-only numpy arrays over the buffer bytes.
"""

import numpy as np

from ..errors import FormatMismatch


COMPONENT_TYPE_SIZES = {
    5120: 1,  # BYTE
    5121: 1,  # UNSIGNED_BYTE
    5122: 2,  # SHORT
    5123: 2,  # UNSIGNED_SHORT
    5125: 4,  # UNSIGNED_INT
    5126: 4,  # FLOAT
}

COMPONENT_COUNTS = {
    'SCALAR': 1,
    'VEC2': 2,
    'VEC3': 3,
    'VEC4': 4,
    'MAT2': 4,
    'MAT3': 9,
    'MAT4': 16,
}


def typed_view(document, accessor_idx: int, dtype, width: int = 1) -> np.ndarray:
    """
    View accessor data as an array of the expected element type.

    The array does not copy the buffer and is read-only. Bytes are
    reinterpreted as ``dtype``; only the element sizes must agree.

    Args:
        document: GltfDocument owning the buffers
        accessor_idx: Accessor index
        dtype: Expected component dtype
        width: Expected number of components per element

    Returns:
        Array of shape (count,) when width is 1, else (count, width)

    Raises:
        FormatMismatch: element sizes disagree or the data is out of bounds
    """
    gltf = document.gltf
    accessor = gltf.accessors[accessor_idx]
    expected = np.dtype(dtype)
    expected_size = expected.itemsize * width

    component_size = COMPONENT_TYPE_SIZES.get(accessor.componentType)
    component_count = COMPONENT_COUNTS.get(accessor.type)
    if component_size is None or component_count is None:
        raise FormatMismatch(
            f"Accessor {accessor_idx} has unsupported layout "
            f"({accessor.componentType}, {accessor.type})"
        )

    element_size = component_size * component_count
    if element_size != expected_size:
        raise FormatMismatch(
            f"Invalid buffer view access. Expected element size {expected_size} "
            f"got {element_size} instead (accessor {accessor_idx})."
        )

    if accessor.bufferView is None:
        raise FormatMismatch(f"Accessor {accessor_idx} has no buffer view")

    buffer_view = gltf.bufferViews[accessor.bufferView]
    data = document.buffer_data(buffer_view.buffer)

    offset = (buffer_view.byteOffset or 0) + (accessor.byteOffset or 0)
    stride = buffer_view.byteStride or element_size
    count = accessor.count or 0
    end = offset + (count - 1) * stride + element_size if count else offset
    if end > len(data):
        raise FormatMismatch(
            f"Accessor {accessor_idx} reads {end} bytes from a {len(data)} byte buffer"
        )

    array = np.ndarray(
        shape=(count, width),
        dtype=expected,
        buffer=data,
        offset=offset,
        strides=(stride, expected.itemsize),
    )
    array.flags.writeable = False

    if width == 1:
        return array[:, 0]
    return array
