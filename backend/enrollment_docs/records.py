"""
Request-scoped value records consumed by the document fillers.

Applicant data, guardian data, signatures and the computed date are separate
frozen dataclasses, merged into a single `DocumentRecord` by
`build_document_record`. Nothing here is persisted.
"""

from __future__ import annotations

import datetime as dt
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .errors import RecordError

logger = logging.getLogger(__name__)

SPANISH_MONTHS = (
    "enero",
    "febrero",
    "marzo",
    "abril",
    "mayo",
    "junio",
    "julio",
    "agosto",
    "septiembre",
    "octubre",
    "noviembre",
    "diciembre",
)


class DocumentType(str, Enum):
    """Applicant identity document; `TI` marks a minor."""

    TI = "TI"
    CC = "CC"
    CE = "CE"
    OTHER = "Other"

    @classmethod
    def parse(cls, value: object) -> "DocumentType":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        if text.lower() in ("other", "otro"):
            return cls.OTHER
        try:
            return cls(text.upper())
        except ValueError as exc:
            raise RecordError(f"Unknown applicant document type {text!r}") from exc

    @property
    def is_minor(self) -> bool:
        return self is DocumentType.TI


class GuardianDocumentType(str, Enum):
    CC = "CC"
    CE = "CE"

    @classmethod
    def parse(cls, value: object) -> "GuardianDocumentType":
        if isinstance(value, cls):
            return value
        text = str(value or "").strip().upper()
        try:
            return cls(text)
        except ValueError as exc:
            raise RecordError(f"Unknown guardian document type {text!r}") from exc


@dataclass(frozen=True)
class ApplicantRecord:
    full_name: str
    document_type: DocumentType
    document_number: str
    program: str = ""
    cohort: str = ""
    training_center: str = ""
    city: str = ""
    region: str = ""
    other_type_label: str = ""

    def __post_init__(self) -> None:
        if self.other_type_label and self.document_type is not DocumentType.OTHER:
            raise RecordError("other_type_label is only allowed for document type 'Other'")

    @property
    def is_minor(self) -> bool:
        return self.document_type.is_minor


@dataclass(frozen=True)
class GuardianRecord:
    full_name: str
    document_type: GuardianDocumentType
    document_number: str
    municipality: str = ""
    email: str = ""
    address: str = ""


@dataclass(frozen=True)
class SignatureAssets:
    """Base64 or data-URI encoded signature images."""

    applicant: str
    guardian: Optional[str] = None


@dataclass(frozen=True)
class ComputedDate:
    day: str
    month: str
    year: str
    full: str


@dataclass(frozen=True)
class DocumentRecord:
    """Everything a filler needs for one generation request."""

    applicant: ApplicantRecord
    signatures: SignatureAssets
    date: ComputedDate
    guardian: Optional[GuardianRecord] = None

    @property
    def is_minor(self) -> bool:
        return self.applicant.is_minor


@dataclass
class DocumentOutput:
    filename: str
    content: bytes
    fields: Dict[str, str] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class GenerationResult:
    commitment: DocumentOutput
    data_treatment: Optional[DocumentOutput] = None
    storage: Dict[str, Optional[str]] = field(default_factory=dict)


def compute_date(today: Optional[dt.date] = None) -> ComputedDate:
    """Render a date the way the legal templates print it, e.g. ``07 de marzo de 2025``."""
    today = today or dt.date.today()
    day = f"{today.day:02d}"
    month = SPANISH_MONTHS[today.month - 1]
    year = f"{today.year:04d}"
    return ComputedDate(day=day, month=month, year=year, full=f"{day} de {month} de {year}")


def build_applicant(data: Dict[str, object]) -> ApplicantRecord:
    """Build an `ApplicantRecord` from a loose mapping (API payload or upstream lookup)."""
    doc_type = DocumentType.parse(data.get("document_type"))
    other_label = _text(data.get("other_type_label"))
    if doc_type is not DocumentType.OTHER and other_label:
        logger.debug("Ignoring other_type_label for document type %s", doc_type.value)
        other_label = ""
    return ApplicantRecord(
        full_name=_text(data.get("full_name")),
        document_type=doc_type,
        document_number=_text(data.get("document_number")),
        program=_text(data.get("program")),
        cohort=_text(data.get("cohort")),
        training_center=_text(data.get("training_center")),
        city=_text(data.get("city")),
        region=_text(data.get("region")),
        other_type_label=other_label,
    )


def build_guardian(data: Dict[str, object]) -> GuardianRecord:
    return GuardianRecord(
        full_name=_text(data.get("full_name")),
        document_type=GuardianDocumentType.parse(data.get("document_type")),
        document_number=_text(data.get("document_number")),
        municipality=_text(data.get("municipality")),
        email=_text(data.get("email")),
        address=_text(data.get("address")),
    )


def build_document_record(
    applicant: ApplicantRecord,
    guardian: Optional[GuardianRecord],
    signatures: SignatureAssets,
    date: Optional[ComputedDate] = None,
) -> DocumentRecord:
    """
    Merge the partial records into one `DocumentRecord`.

    Raises:
        RecordError: when a required piece is missing for the applicant's age
            category. Messages name the missing piece, never its value.
    """
    if not applicant.document_number:
        raise RecordError("Applicant document number is required")
    if not signatures.applicant:
        raise RecordError("Applicant signature is required")

    if applicant.is_minor:
        if guardian is None:
            raise RecordError("Guardian data is required for a minor applicant")
        if not guardian.full_name or not guardian.document_number:
            raise RecordError("Guardian name and document number are required for a minor applicant")
        if not signatures.guardian:
            raise RecordError("Guardian signature is required for a minor applicant")
    elif guardian is not None or signatures.guardian:
        logger.debug("Dropping guardian data supplied for an adult applicant")
        guardian = None
        signatures = SignatureAssets(applicant=signatures.applicant)

    return DocumentRecord(
        applicant=applicant,
        guardian=guardian,
        signatures=signatures,
        date=date or compute_date(),
    )


def _text(value: object) -> str:
    if value is None:
        return ""
    return str(value).strip()
