"""
Pure formatting helpers that turn record values into the exact strings the
templates expect.
"""

from __future__ import annotations

import re
from typing import Dict, Mapping, Optional, TypeVar

CHECKBOX_SENTINEL = "X"
GROUP_SEPARATOR = "."
OTHER_DOCUMENT_TYPE = "Other"

_SEPARATORS = re.compile(r"[.\s]")

K = TypeVar("K")


def format_document_number(raw: Optional[str]) -> str:
    """Group a document number in threes from the right: ``1234567`` -> ``1.234.567``."""
    if not raw:
        return ""
    cleaned = _SEPARATORS.sub("", str(raw))
    if not cleaned:
        return ""

    head = len(cleaned) % 3 or 3
    groups = [cleaned[:head]]
    groups.extend(cleaned[i : i + 3] for i in range(head, len(cleaned), 3))
    return GROUP_SEPARATOR.join(groups)


def build_identity_label(doc_type: object, doc_number: Optional[str], other_label: Optional[str] = None) -> str:
    """
    Compose the "type + number" label printed for applicants and guardians.

    ``doc_type`` may be a plain string or a str-valued enum. When it is
    ``Other`` and ``other_label`` is given, the free-text label replaces it.
    """
    type_value = getattr(doc_type, "value", doc_type) or ""
    label = str(type_value)
    if label == OTHER_DOCUMENT_TYPE and other_label and other_label.strip():
        label = other_label.strip()

    number = format_document_number(doc_number)
    if not label and not number:
        return ""
    return f"{label} No. {number}"


def checkbox_sentinel(selected: object, candidate: object) -> str:
    return CHECKBOX_SENTINEL if selected == candidate else ""


def indicator_values(group: Mapping[object, K], selected: object) -> Dict[K, bool]:
    """
    Resolve a mutually exclusive indicator group.

    ``group`` maps each candidate value to the key of its indicator (typically a
    field role). Every indicator is returned, so siblings of the selected one
    are explicitly cleared.
    """
    return {key: bool(checkbox_sentinel(selected, candidate)) for candidate, key in group.items()}
