"""
High-level service that exposes enrollment document generation to the FastAPI layer.

Responsibilities
----------------
* decide which documents an applicant needs (commitment always, data-treatment
  consent only for a minor)
* load the two templates from the configured directory for every request
* validate the templates' field lists against the field maps at startup
* optionally hand the generated documents to a storage uploader
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Optional

from .config import Settings
from .errors import TemplateError
from .field_maps import FIELD_MAPS, DocumentKind
from .filler import CommitmentFiller, DataTreatmentFiller
from .records import DocumentRecord, GenerationResult
from .storage import S3Uploader, Uploader
from .template_scanner import TemplateScanner

logger = logging.getLogger(__name__)


def generate_documents(
    record: DocumentRecord,
    acta_template: bytes,
    tratamiento_template: bytes,
    uploader: Optional[Uploader] = None,
) -> GenerationResult:
    """
    Produce the commitment document and, for a minor, the data-treatment consent.

    A failure of either document aborts the whole request: the consent is a
    compliance requirement for a minor, so there is no "commitment only"
    fallback. The data-treatment slot is None for an adult.
    """
    logger.info("Generating enrollment documents (minor=%s)", record.is_minor)

    commitment = CommitmentFiller().fill(record, acta_template)

    data_treatment = None
    if record.is_minor:
        data_treatment = DataTreatmentFiller().fill(record, tratamiento_template)
    else:
        logger.info("Adult applicant: %s not required", DocumentKind.DATA_TREATMENT.slug)

    result = GenerationResult(commitment=commitment, data_treatment=data_treatment)
    if uploader is not None:
        result.storage = store_documents(result, uploader)
    return result


def store_documents(result: GenerationResult, uploader: Uploader) -> Dict[str, Optional[str]]:
    """Upload every generated document; a failed upload is recorded as None."""
    documents = {DocumentKind.COMMITMENT: result.commitment}
    if result.data_treatment is not None:
        documents[DocumentKind.DATA_TREATMENT] = result.data_treatment

    locations: Dict[str, Optional[str]] = {}
    for kind, document in documents.items():
        try:
            locations[kind.slug] = uploader(kind, document)
        except Exception as exc:
            logger.error("Storage upload failed for %s: %s", document.filename, exc, exc_info=True)
            locations[kind.slug] = None
    return locations


class EnrollmentDocumentService:
    def __init__(
        self,
        settings: Optional[Settings] = None,
        uploader: Optional[Uploader] = None,
        validate: bool = True,
    ):
        self.settings = settings or Settings.from_env()
        self.template_scanner = TemplateScanner()

        self.uploader = uploader
        if self.uploader is None and self.settings.storage_enabled:
            self.uploader = S3Uploader(self.settings.s3_bucket, prefix=self.settings.s3_prefix)

        self.template_issues: Dict[str, Optional[List[str]]] = {}
        if validate:
            self.template_issues = self.validate_templates()

    # ------------------------------------------------------------------
    # Templates
    # ------------------------------------------------------------------
    def template_paths(self) -> Dict[DocumentKind, Path]:
        return {
            DocumentKind.COMMITMENT: self.settings.acta_template_path,
            DocumentKind.DATA_TREATMENT: self.settings.tratamiento_template_path,
        }

    def validate_templates(self) -> Dict[str, Optional[List[str]]]:
        """Map each document slug to its missing field names (None if the file is absent)."""
        issues: Dict[str, Optional[List[str]]] = {}
        for kind, path in self.template_paths().items():
            if not path.exists():
                logger.warning("Template for %s not found at %s", kind.slug, path)
                issues[kind.slug] = None
                continue
            issues[kind.slug] = self.template_scanner.validate_template(path, FIELD_MAPS[kind])
        return issues

    def scan_templates(self) -> Dict[str, Dict]:
        results = {}
        for kind, path in self.template_paths().items():
            if path.exists():
                results[kind.slug] = self.template_scanner.scan_template(path)
            else:
                results[kind.slug] = {"template_file": path.name, "has_fields": False, "error": "Template file not found"}
        return results

    def load_template(self, kind: DocumentKind) -> bytes:
        path = self.template_paths()[kind]
        try:
            with path.open("rb") as f:
                return f.read()
        except OSError as exc:
            raise TemplateError(f"Template for {kind.slug} could not be loaded", kind) from exc

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------
    def generate(self, record: DocumentRecord) -> GenerationResult:
        acta_template = self.load_template(DocumentKind.COMMITMENT)
        tratamiento_template = self.load_template(DocumentKind.DATA_TREATMENT) if record.is_minor else b""
        return generate_documents(record, acta_template, tratamiento_template, uploader=self.uploader)
