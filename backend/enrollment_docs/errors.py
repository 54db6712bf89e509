"""
Exception taxonomy for enrollment document generation.

Messages name documents, roles and template fields only, never applicant data,
so they can be logged and surfaced to callers as-is.
"""

from __future__ import annotations

from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .field_maps import DocumentKind


class DocumentGenerationError(RuntimeError):
    """Base error for a document that could not be produced."""

    def __init__(self, message: str, document: Optional["DocumentKind"] = None):
        self.message = message
        self.document = document
        super().__init__(message)


class TemplateError(DocumentGenerationError):
    """Template bytes could not be opened as a PDF form."""


class FieldPopulationError(DocumentGenerationError):
    """Filling, flattening or serializing a loaded template failed."""


class RecordError(DocumentGenerationError):
    """Input data cannot be assembled into a document record."""
