"""
Low-level PDF utilities for filling AcroForm-based templates.

Everything that touches the PyMuPDF document model lives here: opening a
template, writing text and indicator widgets, placing signature images inside
a widget's box, and baking the form into static page content. The fillers in
`filler.py` only speak in terms of field names and values.
"""

from __future__ import annotations

import base64
import binascii
import io
import logging
import re
from dataclasses import dataclass
from typing import Dict, List, NamedTuple, Optional, Tuple

import fitz  # PyMuPDF
from PIL import Image, UnidentifiedImageError

from .errors import TemplateError
from .formatting import CHECKBOX_SENTINEL

logger = logging.getLogger(__name__)

_DATA_URI = re.compile(r"^\s*data:image/(?P<subtype>[\w.+-]+);base64,", re.IGNORECASE)
_MIME_FORMATS = {"png": "PNG", "jpg": "JPEG", "jpeg": "JPEG"}
SUPPORTED_IMAGE_FORMATS = ("PNG", "JPEG")


class Placement(NamedTuple):
    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True)
class SignatureImage:
    data: bytes
    format: str
    width: int
    height: int

    @property
    def aspect_ratio(self) -> float:
        return self.width / self.height


def fit_image_rect(
    box_x: float,
    box_y: float,
    box_width: float,
    box_height: float,
    image_width: float,
    image_height: float,
) -> Placement:
    """
    Fit an image inside a box without distortion and center it.

    The image takes the full box width unless that would overflow the height,
    in which case it takes the full height instead.
    """
    if image_width <= 0 or image_height <= 0:
        raise ValueError("Image dimensions must be positive")

    aspect_ratio = image_width / image_height
    draw_width = box_width
    draw_height = draw_width / aspect_ratio
    if draw_height > box_height:
        draw_height = box_height
        draw_width = draw_height * aspect_ratio

    return Placement(
        x=box_x + (box_width - draw_width) / 2,
        y=box_y + (box_height - draw_height) / 2,
        width=draw_width,
        height=draw_height,
    )


def decode_signature(payload: str) -> SignatureImage:
    """
    Decode a data-URI or bare base64 PNG/JPEG signature.

    Raises:
        ValueError: payload is not valid base64, not an image, not PNG/JPEG,
            or does not match the MIME type it declares.
    """
    declared: Optional[str] = None
    match = _DATA_URI.match(payload)
    if match:
        subtype = match.group("subtype").lower()
        declared = _MIME_FORMATS.get(subtype)
        if declared is None:
            raise ValueError(f"Unsupported signature image type image/{subtype}")
        payload = payload[match.end():]

    try:
        raw = base64.b64decode("".join(payload.split()), validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValueError("Signature payload is not valid base64") from exc
    if not raw:
        raise ValueError("Signature payload decodes to no data")

    try:
        with Image.open(io.BytesIO(raw)) as image:
            image.load()
            detected = image.format
            width, height = image.size
    except (UnidentifiedImageError, OSError) as exc:
        raise ValueError("Signature payload is not a readable image") from exc

    if detected not in SUPPORTED_IMAGE_FORMATS:
        raise ValueError(f"Unsupported signature image format {detected}")
    if declared and declared != detected:
        raise ValueError(f"Signature declared as {declared} but decodes as {detected}")
    if width <= 0 or height <= 0:
        raise ValueError("Signature image has no pixels")

    return SignatureImage(data=raw, format=detected, width=width, height=height)


class TemplateForm:
    """
    A loaded template plus an index of its widgets by field name.

    Widgets are addressed by (page number, annotation xref) and reloaded on
    demand, since PyMuPDF widget objects are only valid while their page is.
    """

    def __init__(self, doc: fitz.Document, name: str = "template"):
        self.doc = doc
        self.name = name
        self.pages = [doc[i] for i in range(doc.page_count)]
        self._widgets: Dict[str, List[Tuple[int, int]]] = {}
        for page in self.pages:
            for widget in page.widgets():
                if widget.field_name:
                    self._widgets.setdefault(widget.field_name, []).append((page.number, widget.xref))

    @property
    def field_names(self) -> List[str]:
        return list(self._widgets)

    def has_field(self, field_name: str) -> bool:
        return field_name in self._widgets

    def widgets(self, field_name: str) -> List[fitz.Widget]:
        loaded = []
        for page_number, xref in self._widgets.get(field_name, []):
            widget = self.pages[page_number].load_widget(xref)
            if widget is not None:
                loaded.append(widget)
        return loaded

    def set_text(self, field_name: str, value: str) -> bool:
        """Write ``value`` into every widget of ``field_name``; False when the field is absent."""
        widgets = self.widgets(field_name)
        if not widgets:
            return False
        for widget in widgets:
            if widget.field_type in (fitz.PDF_WIDGET_TYPE_CHECKBOX, fitz.PDF_WIDGET_TYPE_RADIOBUTTON):
                widget.field_value = widget.on_state() if value else "Off"
                widget.update()
            elif value:
                widget.field_value = value
                widget.update()
            else:
                self._clear_text(widget)
        return True

    def _clear_text(self, widget: fitz.Widget) -> None:
        # PyMuPDF ignores an empty field_value, so a pre-filled value would
        # survive into the baked page. Draw a blank appearance, then empty /V.
        widget.field_value = " "
        widget.update()
        self.doc.xref_set_key(widget.xref, "V", "()")
        kind, parent = self.doc.xref_get_key(widget.xref, "Parent")
        if kind == "xref":
            parent_xref = int(parent.split()[0])
            if self.doc.xref_get_key(parent_xref, "V")[0] != "null":
                self.doc.xref_set_key(parent_xref, "V", "()")

    def set_indicator(self, field_name: str, checked: bool) -> bool:
        """
        Mark or clear a boolean indicator.

        Templates implement indicators either as real check boxes or as text
        fields that print an ``X``; both are handled here.
        """
        return self.set_text(field_name, CHECKBOX_SENTINEL if checked else "")

    def insert_signature(self, field_name: str, payload: Optional[str]) -> bool:
        """
        Draw a signature image centered inside the first widget of ``field_name``.

        Never raises: a bad payload or a missing field only costs the signature.
        """
        if not payload:
            logger.debug("No signature supplied for %s in %s", field_name, self.name)
            return False

        try:
            image = decode_signature(payload)

            widgets = self.widgets(field_name)
            if not widgets:
                logger.warning("Signature field '%s' has no widget in %s", field_name, self.name)
                return False

            widget = widgets[0]
            page = getattr(widget, "parent", None) or self.doc[0]
            rect = widget.rect
            placement = fit_image_rect(rect.x0, rect.y0, rect.width, rect.height, image.width, image.height)
            target = fitz.Rect(
                placement.x,
                placement.y,
                placement.x + placement.width,
                placement.y + placement.height,
            )
            page.insert_image(target, stream=image.data, keep_proportion=False)
            logger.info("Inserted %s signature into '%s' on page %d of %s", image.format, field_name, page.number + 1, self.name)
            return True
        except Exception as exc:
            logger.error("Failed to insert signature '%s' in %s: %s", field_name, self.name, exc, exc_info=True)
            return False

    def flatten(self) -> bytes:
        """Bake every widget into page content and serialize the document."""
        self.doc.bake(annots=False, widgets=True)
        return self.doc.tobytes(garbage=3, deflate=True)

    def close(self) -> None:
        self.doc.close()


def open_template(data: bytes, name: str = "template") -> TemplateForm:
    """
    Open template bytes as a fillable form.

    A readable PDF without a form still loads; every field lookup on it then
    misses and is reported as a warning by the caller.

    Raises:
        TemplateError: the bytes are empty, not a PDF, or have no pages.
    """
    if not data:
        raise TemplateError(f"Template {name} is empty")
    try:
        doc = fitz.open(stream=bytes(data), filetype="pdf")
    except Exception as exc:
        raise TemplateError(f"Template {name} is not a readable PDF") from exc

    if doc.page_count == 0:
        doc.close()
        raise TemplateError(f"Template {name} has no pages")
    if not doc.is_form_pdf:
        logger.warning("Template %s exposes no fillable form fields", name)

    return TemplateForm(doc, name=name)
