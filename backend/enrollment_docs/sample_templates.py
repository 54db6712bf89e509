"""
Build stand-in AcroForm templates that follow the field maps.

The official templates are authored outside this repository. These stand-ins
carry the same field names so the service can run locally and in tests:

    python -m enrollment_docs.sample_templates path/to/templates
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence

import fitz  # PyMuPDF

from .field_maps import FIELD_MAPS, DocumentKind, FieldRole
from .config import Settings

logger = logging.getLogger(__name__)

PAGE_WIDTH, PAGE_HEIGHT = fitz.paper_size("letter")
SIGNATURE_ROLES = (FieldRole.APPLICANT_SIGNATURE, FieldRole.GUARDIAN_SIGNATURE)


@dataclass(frozen=True)
class FieldSpec:
    name: str
    page: int
    rect: Sequence[float]
    checkbox: bool = False


def layout_fields(
    field_names: Iterable[str],
    signature_names: Iterable[str] = (),
    checkbox_names: Iterable[str] = (),
    signature_page: int = 0,
) -> List[FieldSpec]:
    """One labelled row per field on page 0; signature boxes side by side on ``signature_page``."""
    signatures = list(signature_names)
    checkboxes = set(checkbox_names)
    specs = []
    y = 60.0
    for name in field_names:
        if name in signatures:
            continue
        width = 14 if name in checkboxes else 260
        specs.append(FieldSpec(name=name, page=0, rect=(220, y, 220 + width, y + 14), checkbox=name in checkboxes))
        y += 18
    base_y = y + 20 if signature_page == 0 else 120
    for i, name in enumerate(signatures):
        x = 60 + i * 260
        specs.append(FieldSpec(name=name, page=signature_page, rect=(x, base_y, x + 220, base_y + 70)))
    return specs


def build_template(fields: Iterable[FieldSpec], title: str = "", page_count: Optional[int] = None) -> bytes:
    fields = list(fields)
    pages = page_count or (max((f.page for f in fields), default=0) + 1)
    doc = fitz.open()
    for number in range(pages):
        page = doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
        if title:
            page.insert_text((60, 36), f"{title} ({number + 1}/{pages})", fontsize=12)

    for spec in fields:
        page = doc[spec.page]
        rect = fitz.Rect(spec.rect)
        page.insert_text((60, rect.y1 - 3), spec.name, fontsize=8)
        widget = fitz.Widget()
        widget.field_name = spec.name
        widget.rect = rect
        if spec.checkbox:
            widget.field_type = fitz.PDF_WIDGET_TYPE_CHECKBOX
            widget.field_value = False
        else:
            widget.field_type = fitz.PDF_WIDGET_TYPE_TEXT
            widget.text_fontsize = 9
            widget.field_value = ""
        page.add_widget(widget)

    data = doc.tobytes()
    doc.close()
    return data


def sample_fields(kind: DocumentKind) -> List[FieldSpec]:
    field_map = FIELD_MAPS[kind]
    names: List[str] = []
    for role, field_names in field_map.items():
        if role not in SIGNATURE_ROLES:
            names.extend(n for n in field_names if n not in names)
    signature_names = [n for role in SIGNATURE_ROLES for n in field_map.get(role, ())]
    signature_page = 1 if kind is DocumentKind.COMMITMENT else 0
    return layout_fields(names + signature_names, signature_names=signature_names, signature_page=signature_page)


def build_sample_template(kind: DocumentKind) -> bytes:
    return build_template(sample_fields(kind), title=kind.title)


def write_sample_templates(directory: Path, settings: Optional[Settings] = None) -> Dict[DocumentKind, Path]:
    settings = settings or Settings(templates_dir=Path(directory))
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    filenames = {
        DocumentKind.COMMITMENT: settings.acta_template,
        DocumentKind.DATA_TREATMENT: settings.tratamiento_template,
    }
    written = {}
    for kind, filename in filenames.items():
        target = directory / filename
        target.write_bytes(build_sample_template(kind))
        logger.info("Wrote sample %s template to %s", kind.slug, target)
        written[kind] = target
    return written


if __name__ == "__main__":  # pragma: no cover
    logging.basicConfig(level=logging.INFO)
    settings = Settings.from_env()
    write_sample_templates(Path(sys.argv[1]) if len(sys.argv) > 1 else settings.templates_dir, settings)
