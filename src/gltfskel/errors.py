"""Import failures raised while converting glTF data to skeletons and animations."""

from __future__ import annotations


class ImportFailure(RuntimeError):
    """Base class for every fatal import error. No partial result is returned."""


class FormatMismatch(ImportFailure):
    """Raised when buffer data does not have the element layout a consumer expects."""


class SchemaViolation(ImportFailure):
    """Raised when the document breaks a glTF schema rule the importer relies on."""


class UnsupportedChannel(ImportFailure):
    """Raised for an unknown interpolation kind or animated property."""


class StructuralError(ImportFailure):
    """Raised when the node graph cannot be turned into a tree (cycles, missing roots)."""


class ValidationFailure(ImportFailure):
    """Raised when a constructed skeleton or animation fails its structural checks."""
