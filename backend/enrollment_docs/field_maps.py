"""
Semantic field roles and their template field names.

The names below are the authoring contract with the two PDF templates. A role
may point at several widgets when the template repeats a value (for example
the applicant document number printed twice on the commitment form).
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, List, Tuple

from .records import DocumentType, GuardianDocumentType


class DocumentKind(str, Enum):
    COMMITMENT = "acta_compromiso"
    DATA_TREATMENT = "tratamiento_datos"

    @property
    def slug(self) -> str:
        return self.value

    @property
    def title(self) -> str:
        return _TITLES[self]


_TITLES = {
    DocumentKind.COMMITMENT: "Acta de Compromiso",
    DocumentKind.DATA_TREATMENT: "Formato de Tratamiento de Datos",
}


class FieldRole(str, Enum):
    # The templates print the applicant type through the indicators and
    # cual_tipo_id_aprendiz; only the guardian has a composite identity field.
    APPLICANT_NAME = "applicant_name"
    APPLICANT_DOC_NUMBER = "applicant_doc_number"
    APPLICANT_OTHER_TYPE = "applicant_other_type"
    APPLICANT_TYPE_TI = "applicant_type_ti"
    APPLICANT_TYPE_CC = "applicant_type_cc"
    APPLICANT_TYPE_CE = "applicant_type_ce"
    APPLICANT_TYPE_OTHER = "applicant_type_other"

    PROGRAM = "program"
    COHORT = "cohort"
    TRAINING_CENTER = "training_center"
    CITY = "city"
    REGION = "region"

    DAY = "day"
    MONTH = "month"
    YEAR = "year"
    FULL_DATE = "full_date"

    GUARDIAN_NAME = "guardian_name"
    GUARDIAN_IDENTITY = "guardian_identity"
    GUARDIAN_DOC_NUMBER = "guardian_doc_number"
    GUARDIAN_TYPE_CC = "guardian_type_cc"
    GUARDIAN_TYPE_CE = "guardian_type_ce"
    GUARDIAN_MUNICIPALITY = "guardian_municipality"
    GUARDIAN_EMAIL = "guardian_email"
    GUARDIAN_ADDRESS = "guardian_address"

    APPLICANT_SIGNATURE = "applicant_signature"
    GUARDIAN_SIGNATURE = "guardian_signature"


FieldMap = Dict[FieldRole, Tuple[str, ...]]

APPLICANT_TYPE_INDICATORS: Dict[DocumentType, FieldRole] = {
    DocumentType.TI: FieldRole.APPLICANT_TYPE_TI,
    DocumentType.CC: FieldRole.APPLICANT_TYPE_CC,
    DocumentType.CE: FieldRole.APPLICANT_TYPE_CE,
    DocumentType.OTHER: FieldRole.APPLICANT_TYPE_OTHER,
}

GUARDIAN_TYPE_INDICATORS: Dict[GuardianDocumentType, FieldRole] = {
    GuardianDocumentType.CC: FieldRole.GUARDIAN_TYPE_CC,
    GuardianDocumentType.CE: FieldRole.GUARDIAN_TYPE_CE,
}

GUARDIAN_ROLES = (
    FieldRole.GUARDIAN_NAME,
    FieldRole.GUARDIAN_IDENTITY,
    FieldRole.GUARDIAN_DOC_NUMBER,
    FieldRole.GUARDIAN_TYPE_CC,
    FieldRole.GUARDIAN_TYPE_CE,
    FieldRole.GUARDIAN_MUNICIPALITY,
    FieldRole.GUARDIAN_EMAIL,
    FieldRole.GUARDIAN_ADDRESS,
)

COMMITMENT_FIELDS: FieldMap = {
    FieldRole.APPLICANT_NAME: ("nombre_aprendiz=",),
    FieldRole.APPLICANT_OTHER_TYPE: ("cual_tipo_id_aprendiz",),
    FieldRole.APPLICANT_DOC_NUMBER: ("numero_documento_aprendiz#0", "numero_documento_aprendiz#1"),
    FieldRole.APPLICANT_TYPE_TI: ("tipo_tarjeta_aprendiz",),
    FieldRole.APPLICANT_TYPE_CC: ("tipo_cedula_aprendiz",),
    FieldRole.APPLICANT_TYPE_CE: ("tipo_CE_aprendiz",),
    FieldRole.APPLICANT_TYPE_OTHER: ("tipo_otro_aprendiz",),
    FieldRole.PROGRAM: ("programa_formacion",),
    FieldRole.COHORT: ("numero_ficha",),
    FieldRole.TRAINING_CENTER: ("centro_formacion",),
    FieldRole.GUARDIAN_IDENTITY: ("tipo_y_documento_tutor",),
    FieldRole.DAY: ("dia",),
    FieldRole.MONTH: ("mes",),
    FieldRole.YEAR: ("año",),
    FieldRole.APPLICANT_SIGNATURE: ("firma_aprendiz",),
    FieldRole.GUARDIAN_SIGNATURE: ("firma_tutor",),
}

DATA_TREATMENT_FIELDS: FieldMap = {
    FieldRole.FULL_DATE: ("fecha",),
    FieldRole.CITY: ("cludad",),
    FieldRole.REGION: ("regional",),
    FieldRole.TRAINING_CENTER: ("centro_formacion",),
    FieldRole.PROGRAM: ("programa_formacion",),
    FieldRole.COHORT: ("numero_ficha",),
    FieldRole.GUARDIAN_NAME: ("nombre_tutor",),
    FieldRole.GUARDIAN_TYPE_CC: ("cc_tutor",),
    FieldRole.GUARDIAN_TYPE_CE: ("ce_tutor",),
    FieldRole.GUARDIAN_DOC_NUMBER: ("documento_tutor",),
    FieldRole.GUARDIAN_MUNICIPALITY: ("municipio_documento_tutor",),
    FieldRole.GUARDIAN_IDENTITY: ("tipo_y_documento_tutor",),
    FieldRole.GUARDIAN_EMAIL: ("correo_electronico_tutor",),
    FieldRole.GUARDIAN_ADDRESS: ("direccion_contacto_tutor",),
    FieldRole.APPLICANT_NAME: ("nombre_aprendiz#0", "nombre_aprendiz#1"),
    FieldRole.APPLICANT_DOC_NUMBER: ("numero_documento_aprendiz#0", "numero_documento_aprendiz#1"),
    FieldRole.APPLICANT_SIGNATURE: ("firma_aprendiz",),
    FieldRole.GUARDIAN_SIGNATURE: ("firma_tutor",),
}

FIELD_MAPS: Dict[DocumentKind, FieldMap] = {
    DocumentKind.COMMITMENT: COMMITMENT_FIELDS,
    DocumentKind.DATA_TREATMENT: DATA_TREATMENT_FIELDS,
}


def template_field_names(field_map: FieldMap) -> List[str]:
    names: List[str] = []
    for field_names in field_map.values():
        for name in field_names:
            if name not in names:
                names.append(name)
    return names


def missing_fields(field_map: FieldMap, available: Iterable[str]) -> List[str]:
    """Template field names referenced by ``field_map`` that ``available`` lacks."""
    present = set(available)
    return [name for name in template_field_names(field_map) if name not in present]
