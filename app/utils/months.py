import re
from datetime import date, datetime

MONTH_FORMAT = "MM-YYYY"
_MONTH_RE = re.compile(r"^(\d{2})-(\d{4})$")


def month_start(value: date | datetime) -> date:
    # Trunca a mes: el día y la hora no tienen significado
    return date(value.year, value.month, 1)


def month_index(value: date | datetime) -> int:
    """Meses calendario desde el año 0: año * 12 + (mes - 1). Consecutivos entre años."""
    return value.year * 12 + (value.month - 1)


def parse_month(value: str) -> date:
    """Parsea 'MM-YYYY' al primer día de ese mes. ValueError si no es válido."""
    match = _MONTH_RE.match(value.strip())
    if not match:
        raise ValueError(f"month must be {MONTH_FORMAT}")
    month, year = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12 or year < 1:
        raise ValueError(f"month must be {MONTH_FORMAT}")
    return date(year, month, 1)


def format_month(value: date) -> str:
    return f"{value.month:02d}-{value.year:04d}"
