"""
Document fillers: map a `DocumentRecord` onto one template.

One filler exists per document kind. Both share the same population steps;
they differ in their field map and in when the guardian section applies.
"""

from __future__ import annotations

import logging
import re
from typing import Dict, List, Mapping, Optional

from .errors import DocumentGenerationError, FieldPopulationError, RecordError, TemplateError
from .field_maps import (
    APPLICANT_TYPE_INDICATORS,
    FIELD_MAPS,
    GUARDIAN_ROLES,
    GUARDIAN_TYPE_INDICATORS,
    DocumentKind,
    FieldMap,
    FieldRole,
)
from .formatting import build_identity_label, format_document_number, indicator_values
from .pdf_utils import TemplateForm, open_template
from .records import DocumentOutput, DocumentRecord, DocumentType

logger = logging.getLogger(__name__)

_FILENAME_UNSAFE = re.compile(r"[^0-9A-Za-z-]")


def build_filename(kind: DocumentKind, document_number: str) -> str:
    """``{document_number}_{slug}.pdf`` with separators and unsafe characters removed."""
    number = _FILENAME_UNSAFE.sub("", document_number or "") or "documento"
    return f"{number}_{kind.slug}.pdf"


class FieldWriter:
    """Writes role values through a field map and keeps a per-document fill report."""

    def __init__(self, form: TemplateForm, field_map: FieldMap, kind: DocumentKind):
        self.form = form
        self.field_map = field_map
        self.kind = kind
        self.values: Dict[str, str] = {}
        self.warnings: List[str] = []

    def applies(self, role: FieldRole) -> bool:
        return role in self.field_map

    def set(self, role: FieldRole, value: Optional[str]) -> None:
        for field_name in self.field_map.get(role, ()):
            text = value or ""
            if self.form.set_text(field_name, text):
                self.values[field_name] = text
            else:
                self._missing(role, field_name)

    def set_indicator(self, role: FieldRole, checked: bool) -> None:
        for field_name in self.field_map.get(role, ()):
            if self.form.set_indicator(field_name, checked):
                self.values[field_name] = "X" if checked else ""
            else:
                self._missing(role, field_name)

    def set_indicator_group(self, group: Mapping[object, FieldRole], selected: object) -> None:
        for role, checked in indicator_values(group, selected).items():
            self.set_indicator(role, checked)

    def sign(self, role: FieldRole, payload: Optional[str]) -> None:
        for field_name in self.field_map.get(role, ()):
            if not self.form.insert_signature(field_name, payload):
                self.warnings.append(f"signature '{field_name}' was not inserted")

    def _missing(self, role: FieldRole, field_name: str) -> None:
        logger.warning("Field '%s' (%s) not found in %s template", field_name, role.value, self.kind.slug)
        self.warnings.append(f"field '{field_name}' not found")


class DocumentFiller:
    kind: DocumentKind

    def __init__(self, field_map: Optional[FieldMap] = None):
        self.field_map = field_map if field_map is not None else FIELD_MAPS[self.kind]

    def guardian_required(self, record: DocumentRecord) -> bool:
        return record.is_minor

    def fill(self, record: DocumentRecord, template: bytes) -> DocumentOutput:
        """
        Fill, sign, flatten and serialize one document.

        Raises:
            TemplateError: the template bytes cannot be opened as a form.
            RecordError: the record lacks data this document needs.
            FieldPopulationError: any other failure while producing the PDF.
        """
        logger.info("Filling %s template", self.kind.slug)
        try:
            form = open_template(template, name=self.kind.slug)
        except TemplateError as exc:
            exc.document = self.kind
            raise

        writer = FieldWriter(form, self.field_map, self.kind)
        try:
            self.populate(writer, record)
            self.sign(writer, record)
            content = form.flatten()
        except DocumentGenerationError as exc:
            exc.document = exc.document or self.kind
            raise
        except Exception as exc:
            raise FieldPopulationError(f"Failed to populate the {self.kind.slug} template", self.kind) from exc
        finally:
            form.close()

        filename = build_filename(self.kind, record.applicant.document_number)
        logger.info(
            "Generated %s (%d bytes, %d fields, %d warnings)",
            filename,
            len(content),
            len(writer.values),
            len(writer.warnings),
        )
        return DocumentOutput(filename=filename, content=content, fields=writer.values, warnings=writer.warnings)

    def populate(self, writer: FieldWriter, record: DocumentRecord) -> None:
        applicant = record.applicant

        writer.set(FieldRole.APPLICANT_NAME, applicant.full_name)
        writer.set(FieldRole.APPLICANT_DOC_NUMBER, format_document_number(applicant.document_number))
        writer.set(
            FieldRole.APPLICANT_OTHER_TYPE,
            applicant.other_type_label if applicant.document_type is DocumentType.OTHER else "",
        )
        writer.set_indicator_group(APPLICANT_TYPE_INDICATORS, applicant.document_type)

        writer.set(FieldRole.PROGRAM, applicant.program)
        writer.set(FieldRole.COHORT, applicant.cohort)
        writer.set(FieldRole.TRAINING_CENTER, applicant.training_center)
        writer.set(FieldRole.CITY, applicant.city)
        writer.set(FieldRole.REGION, applicant.region)

        writer.set(FieldRole.DAY, record.date.day)
        writer.set(FieldRole.MONTH, record.date.month)
        writer.set(FieldRole.YEAR, record.date.year)
        writer.set(FieldRole.FULL_DATE, record.date.full)

        if self.guardian_required(record):
            self.populate_guardian(writer, record)
        else:
            self.clear_guardian(writer)

    def populate_guardian(self, writer: FieldWriter, record: DocumentRecord) -> None:
        guardian = record.guardian
        if guardian is None:
            raise RecordError(f"The {self.kind.slug} document requires guardian data", self.kind)

        writer.set(FieldRole.GUARDIAN_NAME, guardian.full_name)
        writer.set(
            FieldRole.GUARDIAN_IDENTITY,
            build_identity_label(guardian.document_type, guardian.document_number),
        )
        writer.set(FieldRole.GUARDIAN_DOC_NUMBER, format_document_number(guardian.document_number))
        writer.set_indicator_group(GUARDIAN_TYPE_INDICATORS, guardian.document_type)
        writer.set(FieldRole.GUARDIAN_MUNICIPALITY, guardian.municipality)
        writer.set(FieldRole.GUARDIAN_EMAIL, guardian.email)
        writer.set(FieldRole.GUARDIAN_ADDRESS, guardian.address)

    def clear_guardian(self, writer: FieldWriter) -> None:
        # Flattened output must never show stale guardian data.
        for role in GUARDIAN_ROLES:
            if role in (FieldRole.GUARDIAN_TYPE_CC, FieldRole.GUARDIAN_TYPE_CE):
                writer.set_indicator(role, False)
            else:
                writer.set(role, "")

    def sign(self, writer: FieldWriter, record: DocumentRecord) -> None:
        writer.sign(FieldRole.APPLICANT_SIGNATURE, record.signatures.applicant)
        if self.guardian_required(record):
            writer.sign(FieldRole.GUARDIAN_SIGNATURE, record.signatures.guardian)


class CommitmentFiller(DocumentFiller):
    """Acta de compromiso: signed by every applicant, co-signed by the guardian of a minor."""

    kind = DocumentKind.COMMITMENT


class DataTreatmentFiller(DocumentFiller):
    """Minor's data-treatment consent: always carries the guardian section and signature."""

    kind = DocumentKind.DATA_TREATMENT

    def guardian_required(self, record: DocumentRecord) -> bool:
        return True
