import datetime as dt

import pytest

from enrollment_docs.errors import RecordError
from enrollment_docs.records import (
    ApplicantRecord,
    DocumentType,
    GuardianDocumentType,
    SignatureAssets,
    build_applicant,
    build_document_record,
    build_guardian,
    compute_date,
)


def test_compute_date():
    date = compute_date(dt.date(2025, 3, 7))
    assert (date.day, date.month, date.year) == ("07", "marzo", "2025")
    assert date.full == "07 de marzo de 2025"


def test_compute_date_defaults_to_today():
    today = dt.date.today()
    assert compute_date().year == str(today.year)


@pytest.mark.parametrize(
    "raw, expected",
    [("TI", DocumentType.TI), ("cc", DocumentType.CC), ("Other", DocumentType.OTHER), ("Otro", DocumentType.OTHER)],
)
def test_document_type_parse(raw, expected):
    assert DocumentType.parse(raw) is expected


def test_document_type_parse_rejects_unknown():
    with pytest.raises(RecordError):
        DocumentType.parse("PP")
    with pytest.raises(RecordError):
        GuardianDocumentType.parse("TI")


def test_only_ti_is_minor():
    assert [t for t in DocumentType if t.is_minor] == [DocumentType.TI]


def test_other_type_label_requires_other():
    with pytest.raises(RecordError):
        ApplicantRecord(full_name="A", document_type=DocumentType.CC, document_number="1", other_type_label="Pasaporte")


def test_build_applicant_drops_stray_other_label():
    applicant = build_applicant(
        {"full_name": " Ana ", "document_type": "CC", "document_number": "123", "other_type_label": "Pasaporte"}
    )
    assert applicant.full_name == "Ana"
    assert applicant.other_type_label == ""

    other = build_applicant({"full_name": "Ana", "document_type": "Otro", "document_number": "1", "other_type_label": "Pasaporte"})
    assert other.document_type is DocumentType.OTHER
    assert other.other_type_label == "Pasaporte"


def test_build_guardian():
    guardian = build_guardian({"full_name": "María", "document_type": "cc", "document_number": "42", "email": "m@example.com"})
    assert guardian.document_type is GuardianDocumentType.CC
    assert guardian.email == "m@example.com"
    assert guardian.address == ""


def test_minor_requires_guardian_and_guardian_signature(minor_applicant, guardian, signature):
    with pytest.raises(RecordError):
        build_document_record(minor_applicant, None, SignatureAssets(applicant=signature, guardian=signature))
    with pytest.raises(RecordError):
        build_document_record(minor_applicant, guardian, SignatureAssets(applicant=signature))

    record = build_document_record(minor_applicant, guardian, SignatureAssets(applicant=signature, guardian=signature))
    assert record.is_minor
    assert record.guardian == guardian


def test_applicant_signature_always_required(adult_applicant):
    with pytest.raises(RecordError) as excinfo:
        build_document_record(adult_applicant, None, SignatureAssets(applicant=""))
    assert adult_applicant.full_name not in str(excinfo.value)


def test_adult_drops_guardian_data(adult_applicant, guardian, signature, fixed_date):
    record = build_document_record(
        adult_applicant, guardian, SignatureAssets(applicant=signature, guardian=signature), fixed_date
    )
    assert record.guardian is None
    assert record.signatures.guardian is None
    assert record.date == fixed_date
