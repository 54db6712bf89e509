import base64
import datetime as dt
import logging

from dotenv import load_dotenv

load_dotenv(".env.local"); load_dotenv()  # also loads .env if present

from typing import Optional  # noqa: E402

from fastapi import FastAPI, HTTPException  # noqa: E402
from fastapi.middleware.cors import CORSMiddleware  # noqa: E402
from pydantic import BaseModel  # noqa: E402

from enrollment_docs import (  # noqa: E402
    DocumentGenerationError,
    EnrollmentDocumentService,
    RecordError,
    SignatureAssets,
    TemplateError,
    build_document_record,
    compute_date,
)
from enrollment_docs.config import Settings  # noqa: E402
from enrollment_docs.records import DocumentType, build_applicant, build_guardian  # noqa: E402

settings = Settings.from_env()
logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger("enrollment_docs.api")

app = FastAPI(title="Enrollment documents")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

document_service = EnrollmentDocumentService(settings=settings)


class AprendizPayload(BaseModel):
    nombre_aprendiz: str
    tipo_documento_aprendiz: str
    cual_tipo_id_aprendiz: str = ""
    numero_documento_aprendiz: str
    programa_formacion: str = ""
    numero_ficha: str = ""
    centro_formacion: str = ""
    ciudad: str = ""
    regional: str = ""


class GenerationRequest(BaseModel):
    aprendiz: AprendizPayload
    firma_aprendiz: Optional[str] = None
    firma_tutor: Optional[str] = None
    nombre_tutor: Optional[str] = None
    tipo_documento_tutor: Optional[str] = None
    numero_documento_tutor: Optional[str] = None
    municipio_documento_tutor: Optional[str] = None
    correo_electronico_tutor: Optional[str] = None
    direccion_contacto_tutor: Optional[str] = None


# Signature of the applicant is always required; guardian fields only for a minor.
REQUIRED_FIELDS = ["firma_aprendiz"]
REQUIRED_GUARDIAN_FIELDS = [
    "firma_tutor",
    "nombre_tutor",
    "tipo_documento_tutor",
    "numero_documento_tutor",
    "municipio_documento_tutor",
    "correo_electronico_tutor",
    "direccion_contacto_tutor",
]


def _missing_field(req: GenerationRequest, is_minor: bool) -> Optional[str]:
    required = REQUIRED_FIELDS + (REQUIRED_GUARDIAN_FIELDS if is_minor else [])
    for field in required:
        if not (getattr(req, field) or "").strip():
            return field
    return None


def _document_payload(document) -> dict:
    if document is None:
        return {"filename": None, "pdf_base64": None, "size": None}
    return {
        "filename": document.filename,
        "pdf_base64": base64.b64encode(document.content).decode("ascii"),
        "size": document.size,
        "warnings": document.warnings,
    }


@app.get("/api/generar-formatos")
def generation_info():
    return {
        "endpoint": "/api/generar-formatos",
        "method": "POST",
        "description": "Genera el Acta de Compromiso y, para menores de edad (TI), el Formato de Tratamiento de Datos",
        "generates": ["Acta de Compromiso", "Formato de Tratamiento de Datos"],
        "required_fields": REQUIRED_FIELDS,
        "required_fields_minor": REQUIRED_GUARDIAN_FIELDS,
        "storage": "enabled" if document_service.uploader else "disabled",
        "templates": document_service.template_issues,
    }


@app.get("/api/templates/scan")
def scan_templates():
    return {"templates": document_service.scan_templates()}


@app.post("/api/generar-formatos")
def generate_documents(req: GenerationRequest):
    try:
        doc_type = DocumentType.parse(req.aprendiz.tipo_documento_aprendiz)
    except RecordError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc

    missing = _missing_field(req, doc_type.is_minor)
    if missing:
        logger.warning("Rejected request: missing field %s", missing)
        raise HTTPException(status_code=400, detail=f"Campo obligatorio faltante: {missing}")

    try:
        applicant = build_applicant(
            {
                "full_name": req.aprendiz.nombre_aprendiz,
                "document_type": doc_type,
                "other_type_label": req.aprendiz.cual_tipo_id_aprendiz,
                "document_number": req.aprendiz.numero_documento_aprendiz,
                "program": req.aprendiz.programa_formacion,
                "cohort": req.aprendiz.numero_ficha,
                "training_center": req.aprendiz.centro_formacion,
                "city": req.aprendiz.ciudad,
                "region": req.aprendiz.regional,
            }
        )
        guardian = None
        if doc_type.is_minor:
            guardian = build_guardian(
                {
                    "full_name": req.nombre_tutor,
                    "document_type": req.tipo_documento_tutor,
                    "document_number": req.numero_documento_tutor,
                    "municipality": req.municipio_documento_tutor,
                    "email": req.correo_electronico_tutor,
                    "address": req.direccion_contacto_tutor,
                }
            )
        record = build_document_record(
            applicant,
            guardian,
            SignatureAssets(applicant=req.firma_aprendiz, guardian=req.firma_tutor),
            compute_date(),
        )
    except RecordError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc

    try:
        result = document_service.generate(record)
    except TemplateError as exc:
        logger.error("Template failure: %s", exc.message, exc_info=True)
        raise HTTPException(status_code=500, detail=f"Plantilla no disponible: {exc.message}") from exc
    except RecordError as exc:
        raise HTTPException(status_code=400, detail=exc.message) from exc
    except DocumentGenerationError as exc:
        logger.error("Document generation failed: %s", exc.message, exc_info=True)
        raise HTTPException(status_code=500, detail=_internal_detail(exc)) from exc
    except Exception as exc:
        logger.exception("Unexpected error while generating documents")
        raise HTTPException(status_code=500, detail=_internal_detail(exc)) from exc

    return {
        "success": True,
        "message": "Documentos generados exitosamente",
        "documentos": {
            "acta_compromiso": _document_payload(result.commitment),
            "tratamiento_datos": _document_payload(result.data_treatment),
        },
        "metadata": {
            "es_menor": record.is_minor,
            "fecha": record.date.full,
            "fecha_generacion": dt.datetime.now(dt.timezone.utc).isoformat(),
            "almacenamiento": result.storage or None,
        },
    }


def _internal_detail(exc: Exception) -> str:
    message = "Error interno del servidor al generar documentos"
    if settings.debug:
        return f"{message}: {type(exc).__name__}"
    return message
