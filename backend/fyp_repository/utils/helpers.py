"""
Small helpers shared by schemas, models and services.
"""
import re
import secrets
import time
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, Optional

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"

PDF_EXTENSIONS = (".pdf",)
PDF_MIME_TYPES = ("application/pdf",)

# Executable blocks are dropped together with their content
_DANGEROUS_BLOCKS = re.compile(
    r"<\s*(script|style|iframe|object|embed)\b[^>]*>.*?<\s*/\s*\1\s*>",
    re.IGNORECASE | re.DOTALL,
)
_TAGS = re.compile(r"<\s*/?\s*[a-zA-Z!][^>]*>")
_CONTROL_CHARS = re.compile(r"[\x00-\x08\x0B-\x0C\x0E-\x1F\x7F]")


def _to_base36(number: int) -> str:
    if number == 0:
        return "0"
    digits = []
    while number:
        number, rem = divmod(number, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_project_id() -> str:
    """Public project id, e.g. PROJ_LXK2A9QZ_4F8K2M"""
    timestamp = _to_base36(int(time.time() * 1000))
    random_part = "".join(secrets.choice(_BASE36) for _ in range(6))
    return f"proj_{timestamp}_{random_part}".upper()


def sanitize_input(value: Optional[str]) -> str:
    """
    Strip markup from user supplied text.

    Script/style/iframe blocks are removed with their content, remaining tags
    are removed, and any stray angle brackets are escaped.
    """
    if not value or not isinstance(value, str):
        return ""

    cleaned = _CONTROL_CHARS.sub("", value.strip())
    cleaned = _DANGEROUS_BLOCKS.sub("", cleaned)
    cleaned = _TAGS.sub("", cleaned)
    cleaned = cleaned.replace("<", "&lt;").replace(">", "&gt;")
    return cleaned.strip()


def sanitize_fields(data: Dict[str, object]) -> Dict[str, object]:
    """Sanitize every string value in a flat or nested dict"""
    sanitized: Dict[str, object] = {}
    for key, value in data.items():
        if isinstance(value, str):
            sanitized[key] = sanitize_input(value)
        elif isinstance(value, dict):
            sanitized[key] = sanitize_fields(value)
        else:
            sanitized[key] = value
    return sanitized


def is_pdf_file(filename: Optional[str], content_type: Optional[str]) -> bool:
    """Both the extension and the declared content type must say PDF"""
    if not filename or not content_type:
        return False
    extension = filename.lower()[filename.rfind("."):] if "." in filename else ""
    mime = content_type.split(";")[0].strip().lower()
    return extension in PDF_EXTENSIONS and mime in PDF_MIME_TYPES


def calculate_average_rating(ratings: Iterable[int]) -> float:
    """Mean rounded half-up to one decimal; 0 when there are no ratings"""
    values = list(ratings)
    if not values:
        return 0.0
    return average_from_totals(sum(values), len(values))


def average_from_totals(total: int, count: int) -> float:
    if not count:
        return 0.0
    average = (Decimal(total) / Decimal(count)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)
    return float(average)


def escape_like(value: str) -> str:
    """Escape LIKE wildcards so user input matches literally (use escape='\\\\')"""
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
