from __future__ import annotations

import base64
import datetime as dt
import io

import fitz
import pytest
from PIL import Image, ImageDraw

from enrollment_docs.field_maps import DocumentKind
from enrollment_docs.records import (
    ApplicantRecord,
    DocumentRecord,
    DocumentType,
    GuardianDocumentType,
    GuardianRecord,
    SignatureAssets,
    compute_date,
)
from enrollment_docs.sample_templates import build_sample_template


def image_data_uri(width: int = 300, height: int = 100, fmt: str = "PNG") -> str:
    image = Image.new("RGB", (width, height), "white")
    ImageDraw.Draw(image).line((10, height - 10, width - 10, 10), fill="black", width=4)
    buffer = io.BytesIO()
    image.save(buffer, format=fmt)
    mime = "png" if fmt == "PNG" else "jpeg"
    return f"data:image/{mime};base64," + base64.b64encode(buffer.getvalue()).decode("ascii")


def page_images(pdf_bytes: bytes) -> list:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return [len(page.get_images()) for page in doc]


def pdf_text(pdf_bytes: bytes) -> str:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return "\n".join(page.get_text() for page in doc)


def widget_count(pdf_bytes: bytes) -> int:
    with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
        return sum(len(list(page.widgets())) for page in doc)


def prefill_template(template: bytes, values: dict) -> bytes:
    """Return ``template`` with default values already stored in its fields."""
    with fitz.open(stream=template, filetype="pdf") as doc:
        for page in doc:
            for widget in page.widgets():
                if widget.field_name in values:
                    widget.field_value = values[widget.field_name]
                    widget.update()
        return doc.tobytes()


@pytest.fixture
def acta_template() -> bytes:
    return build_sample_template(DocumentKind.COMMITMENT)


@pytest.fixture
def tratamiento_template() -> bytes:
    return build_sample_template(DocumentKind.DATA_TREATMENT)


@pytest.fixture
def signature() -> str:
    return image_data_uri()


@pytest.fixture
def fixed_date():
    return compute_date(dt.date(2025, 10, 26))


@pytest.fixture
def adult_applicant() -> ApplicantRecord:
    return ApplicantRecord(
        full_name="Laura Gómez Ruiz",
        document_type=DocumentType.CC,
        document_number="1061234567",
        program="Tecnología en Análisis y Desarrollo de Software",
        cohort="2845123",
        training_center="Centro de Comercio y Servicios",
        city="Popayán",
        region="Cauca",
    )


@pytest.fixture
def minor_applicant() -> ApplicantRecord:
    return ApplicantRecord(
        full_name="Juan Felipe Pérez García",
        document_type=DocumentType.TI,
        document_number="3456780",
        program="Tecnología en Análisis y Desarrollo de Software",
        cohort="7725999",
        training_center="Centro de Comercio y Servicios",
        city="Popayán",
        region="Cauca",
    )


@pytest.fixture
def guardian() -> GuardianRecord:
    return GuardianRecord(
        full_name="María González",
        document_type=GuardianDocumentType.CE,
        document_number="98765432",
        municipality="Popayán",
        email="maria.gonzalez@example.com",
        address="Calle 5 # 10-20",
    )


@pytest.fixture
def adult_record(adult_applicant, signature, fixed_date) -> DocumentRecord:
    return DocumentRecord(
        applicant=adult_applicant,
        signatures=SignatureAssets(applicant=signature),
        date=fixed_date,
    )


@pytest.fixture
def minor_record(minor_applicant, guardian, signature, fixed_date) -> DocumentRecord:
    return DocumentRecord(
        applicant=minor_applicant,
        guardian=guardian,
        signatures=SignatureAssets(applicant=signature, guardian=image_data_uri(400, 100, "JPEG")),
        date=fixed_date,
    )
