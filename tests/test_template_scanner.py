from enrollment_docs.field_maps import COMMITMENT_FIELDS, DATA_TREATMENT_FIELDS, DocumentKind, FieldRole, template_field_names
from enrollment_docs.sample_templates import FieldSpec, build_template
from enrollment_docs.template_scanner import TemplateScanner


def test_scan_sample_commitment_template(acta_template):
    scan = TemplateScanner().scan_template(acta_template, name="formato_acta_compromiso.pdf")

    assert scan["has_fields"]
    assert scan["template_file"] == "formato_acta_compromiso.pdf"
    assert set(scan["form_fields"]) == set(template_field_names(COMMITMENT_FIELDS))
    assert scan["form_fields"]["nombre_aprendiz="] == "text"


def test_scan_reports_widget_types():
    template = build_template([FieldSpec("nombre", 0, (200, 60, 400, 74)), FieldSpec("casilla", 0, (200, 80, 214, 94), checkbox=True)])

    scan = TemplateScanner().scan_template(template)

    assert scan["form_fields"] == {"nombre": "text", "casilla": "button"}


def test_scan_unreadable_template():
    scan = TemplateScanner().scan_template(b"garbage", name="broken.pdf")

    assert scan["has_fields"] is False
    assert "error" in scan


def test_validate_template_lists_missing_fields():
    template = build_template([FieldSpec("nombre_aprendiz=", 0, (200, 60, 400, 74))])

    missing = TemplateScanner().validate_template(template, COMMITMENT_FIELDS)

    assert "nombre_aprendiz=" not in missing
    assert "firma_aprendiz" in missing
    assert len(missing) == len(template_field_names(COMMITMENT_FIELDS)) - 1


def test_validate_sample_templates_are_complete(acta_template, tratamiento_template):
    from enrollment_docs.field_maps import FIELD_MAPS

    scanner = TemplateScanner()
    assert scanner.validate_template(acta_template, FIELD_MAPS[DocumentKind.COMMITMENT]) == []
    assert scanner.validate_template(tratamiento_template, FIELD_MAPS[DocumentKind.DATA_TREATMENT]) == []


def test_every_field_role_is_bound_to_a_template_field():
    bound = set(COMMITMENT_FIELDS) | set(DATA_TREATMENT_FIELDS)

    assert set(FieldRole) == bound
