import base64

import pytest
from fastapi.testclient import TestClient

import main
from enrollment_docs.config import Settings
from enrollment_docs.sample_templates import write_sample_templates
from enrollment_docs.service import EnrollmentDocumentService
from tests.conftest import image_data_uri, pdf_text


@pytest.fixture
def client(monkeypatch, tmp_path):
    write_sample_templates(tmp_path)
    monkeypatch.setattr(main, "document_service", EnrollmentDocumentService(settings=Settings(templates_dir=tmp_path)))
    return TestClient(main.app)


def adult_payload(**overrides):
    payload = {
        "aprendiz": {
            "nombre_aprendiz": "Laura Gómez Ruiz",
            "tipo_documento_aprendiz": "CC",
            "numero_documento_aprendiz": "1061234567",
            "programa_formacion": "Tecnología en Análisis y Desarrollo de Software",
            "numero_ficha": "2845123",
            "centro_formacion": "Centro de Comercio y Servicios",
            "ciudad": "Popayán",
            "regional": "Cauca",
        },
        "firma_aprendiz": image_data_uri(),
    }
    payload.update(overrides)
    return payload


def minor_payload(**overrides):
    payload = adult_payload(
        firma_tutor=image_data_uri(400, 100, "JPEG"),
        nombre_tutor="María González",
        tipo_documento_tutor="CC",
        numero_documento_tutor="98765432",
        municipio_documento_tutor="Popayán",
        correo_electronico_tutor="maria.gonzalez@example.com",
        direccion_contacto_tutor="Calle 5 # 10-20",
    )
    payload["aprendiz"].update(tipo_documento_aprendiz="TI", numero_documento_aprendiz="3456780")
    payload.update(overrides)
    return payload


def test_adult_request_returns_commitment_only(client):
    response = client.post("/api/generar-formatos", json=adult_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["metadata"]["es_menor"] is False
    assert body["metadata"]["almacenamiento"] is None

    acta = body["documentos"]["acta_compromiso"]
    assert acta["filename"] == "1061234567_acta_compromiso.pdf"
    pdf = base64.b64decode(acta["pdf_base64"])
    assert pdf.startswith(b"%PDF")
    assert acta["size"] == len(pdf)
    assert "1.061.234.567" in pdf_text(pdf)
    assert body["documentos"]["tratamiento_datos"] == {"filename": None, "pdf_base64": None, "size": None}


def test_minor_request_returns_both_documents(client):
    response = client.post("/api/generar-formatos", json=minor_payload())

    assert response.status_code == 200
    body = response.json()
    assert body["metadata"]["es_menor"] is True
    tratamiento = body["documentos"]["tratamiento_datos"]
    assert tratamiento["filename"] == "3456780_tratamiento_datos.pdf"
    assert "maria.gonzalez@example.com" in pdf_text(base64.b64decode(tratamiento["pdf_base64"]))


def test_minor_without_guardian_field_is_rejected(client):
    response = client.post("/api/generar-formatos", json=minor_payload(correo_electronico_tutor=""))

    assert response.status_code == 400
    assert response.json()["detail"] == "Campo obligatorio faltante: correo_electronico_tutor"


def test_missing_applicant_signature_is_rejected(client):
    response = client.post("/api/generar-formatos", json=adult_payload(firma_aprendiz=None))

    assert response.status_code == 400
    assert response.json()["detail"] == "Campo obligatorio faltante: firma_aprendiz"


def test_unknown_document_type_is_rejected(client):
    payload = adult_payload()
    payload["aprendiz"]["tipo_documento_aprendiz"] = "Pasaporte"

    response = client.post("/api/generar-formatos", json=payload)

    assert response.status_code == 400


def test_unknown_guardian_document_type_is_rejected(client):
    response = client.post("/api/generar-formatos", json=minor_payload(tipo_documento_tutor="TI"))

    assert response.status_code == 400


def test_missing_template_is_a_server_error(client, tmp_path):
    (tmp_path / "formato_acta_compromiso.pdf").unlink()

    response = client.post("/api/generar-formatos", json=adult_payload())

    assert response.status_code == 500
    assert response.json()["detail"].startswith("Plantilla no disponible")


def test_info_endpoint_reports_template_state(client):
    response = client.get("/api/generar-formatos")

    assert response.status_code == 200
    body = response.json()
    assert body["method"] == "POST"
    assert body["storage"] == "disabled"
    assert body["templates"] == {"acta_compromiso": [], "tratamiento_datos": []}
    assert "correo_electronico_tutor" in body["required_fields_minor"]


def test_scan_endpoint(client):
    response = client.get("/api/templates/scan")

    assert response.status_code == 200
    assert response.json()["templates"]["acta_compromiso"]["has_fields"] is True
