"""
Enrollment document generation for vocational-training applicants.

This package fills the two legal PDF templates of the enrollment workflow:
  - the commitment acknowledgment (acta de compromiso), for every applicant
  - the data-treatment consent (tratamiento de datos), for minors only

Templates are AcroForm PDFs. Fields are filled through semantic role maps,
signature images are fitted into their field boxes, and the form is flattened
before the documents are handed back.
"""

from .errors import DocumentGenerationError, FieldPopulationError, RecordError, TemplateError
from .field_maps import DocumentKind, FieldRole
from .records import (
    ApplicantRecord,
    ComputedDate,
    DocumentOutput,
    DocumentRecord,
    DocumentType,
    GenerationResult,
    GuardianDocumentType,
    GuardianRecord,
    SignatureAssets,
    build_document_record,
    compute_date,
)
from .service import EnrollmentDocumentService, generate_documents

__all__ = [
    "ApplicantRecord",
    "ComputedDate",
    "DocumentGenerationError",
    "DocumentKind",
    "DocumentOutput",
    "DocumentRecord",
    "DocumentType",
    "EnrollmentDocumentService",
    "FieldPopulationError",
    "FieldRole",
    "GenerationResult",
    "GuardianDocumentType",
    "GuardianRecord",
    "RecordError",
    "SignatureAssets",
    "TemplateError",
    "build_document_record",
    "compute_date",
    "generate_documents",
]
