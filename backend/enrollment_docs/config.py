"""
Configuration for the enrollment document service.
Values come from environment variables; `main.py` loads `.env` files first.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

PACKAGE_DIR = Path(__file__).resolve().parent
DEFAULT_TEMPLATES_DIR = PACKAGE_DIR / "templates"


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass
class Settings:
    templates_dir: Path = DEFAULT_TEMPLATES_DIR
    acta_template: str = "formato_acta_compromiso.pdf"
    tratamiento_template: str = "formato_tratamiento_datos.pdf"
    s3_bucket: Optional[str] = None
    s3_prefix: str = "enrollment-docs/"
    log_level: str = "INFO"
    debug: bool = False

    @property
    def acta_template_path(self) -> Path:
        return self.templates_dir / self.acta_template

    @property
    def tratamiento_template_path(self) -> Path:
        return self.templates_dir / self.tratamiento_template

    @property
    def storage_enabled(self) -> bool:
        return bool(self.s3_bucket)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            templates_dir=Path(os.getenv("ENROLLMENT_DOCS_TEMPLATES_DIR") or DEFAULT_TEMPLATES_DIR),
            acta_template=os.getenv("ENROLLMENT_DOCS_ACTA_TEMPLATE", cls.acta_template),
            tratamiento_template=os.getenv("ENROLLMENT_DOCS_TRATAMIENTO_TEMPLATE", cls.tratamiento_template),
            s3_bucket=os.getenv("ENROLLMENT_DOCS_S3_BUCKET") or None,
            s3_prefix=os.getenv("ENROLLMENT_DOCS_S3_PREFIX", cls.s3_prefix),
            log_level=os.getenv("LOG_LEVEL", cls.log_level).upper(),
            debug=_flag(os.getenv("ENROLLMENT_DOCS_DEBUG")),
        )
