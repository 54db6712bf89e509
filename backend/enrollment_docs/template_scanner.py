"""
PDF Template Scanner

Lists the form fields a template exposes and checks them against the field
maps the fillers rely on. A renamed field in a template revision makes the
filler silently skip it, so the service runs this at startup.
"""

import io
import logging
from pathlib import Path
from typing import Dict, List, Optional, Union

from pypdf import PdfReader

from .field_maps import FieldMap, missing_fields

logger = logging.getLogger(__name__)

_FIELD_TYPES = {
    "/Tx": "text",
    "/Btn": "button",
    "/Ch": "choice",
    "/Sig": "signature",
}


class TemplateScanner:
    """Scans PDF templates for form fields"""

    def scan_template(self, source: Union[bytes, Path], name: Optional[str] = None) -> Dict:
        """
        Scan a single PDF template.

        Returns: {
            "template_file": "formato_acta_compromiso.pdf",
            "form_fields": {"nombre_aprendiz=": "text", ...},
            "has_fields": bool,
            "field_count": int,
            "error": "..."   # only when the template could not be read
        }
        """
        if isinstance(source, Path):
            name = name or source.name
        name = name or "template"

        try:
            stream = io.BytesIO(source) if isinstance(source, (bytes, bytearray)) else str(source)
            reader = PdfReader(stream, strict=False)
            fields = reader.get_fields() or {}
        except Exception as e:
            logger.error("Error scanning template %s: %s", name, e)
            return {
                "template_file": name,
                "form_fields": {},
                "has_fields": False,
                "field_count": 0,
                "error": str(e),
            }

        form_fields = {
            field_name: _FIELD_TYPES.get(str(field.get("/FT", "")), "unknown")
            for field_name, field in fields.items()
        }
        logger.debug("Scanned %s: %d form fields", name, len(form_fields))
        return {
            "template_file": name,
            "form_fields": form_fields,
            "has_fields": bool(form_fields),
            "field_count": len(form_fields),
        }

    def validate_template(self, source: Union[bytes, Path], field_map: FieldMap, name: Optional[str] = None) -> List[str]:
        """Return the mapped field names the template lacks, logging each one."""
        scan = self.scan_template(source, name=name)
        missing = missing_fields(field_map, scan["form_fields"])
        for field_name in missing:
            logger.warning("Template %s is missing form field '%s'", scan["template_file"], field_name)
        if not missing and scan["has_fields"]:
            logger.info("Template %s defines all %d mapped fields", scan["template_file"], scan["field_count"])
        return missing
