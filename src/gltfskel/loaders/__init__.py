"""Loaders turning glTF documents into skeletons and animations."""

from .document import GltfDocument
from .buffer_view import typed_view
from .gltf_importer import GltfImporter

__all__ = ['GltfDocument', 'typed_view', 'GltfImporter']
