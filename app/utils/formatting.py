"""
Utilitaires de formatage fr-FR / fr-FR formatting helpers.
Dates affichées JJ/MM/AAAA, quantités à 2 décimales max.
"""

import unicodedata
from datetime import date, datetime

NARROW_NBSP = "\u202f"  # separateur de milliers fr-FR / fr-FR grouping separator
PLACEHOLDER = "—"


def parse_iso_date(value) -> date | None:
    """Parser AAAA-MM-JJ strict, None si absent ou invalide /
    Strict YYYY-MM-DD parse, None if missing or invalid.
    """
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    raw = str(value).strip()
    if not raw:
        return None
    try:
        return datetime.strptime(raw, "%Y-%m-%d").date()
    except ValueError:
        return None


def date_of(value) -> date | None:
    """Jour d'une date ou d'un horodatage ISO (affichage, tri) /
    Day of an ISO date or timestamp (display, sorting).
    """
    parsed = parse_iso_date(value)
    if parsed is not None or value is None:
        return parsed
    try:
        return datetime.fromisoformat(str(value).strip()).date()
    except ValueError:
        return None


def format_date_fr(value) -> str:
    parsed = date_of(value)
    if parsed is None:
        return PLACEHOLDER
    return parsed.strftime("%d/%m/%Y")


def format_qty(value: float | None) -> str:
    """Quantité fr-FR, 2 décimales max / fr-FR quantity, at most 2 decimals.

    1234.5 -> "1 234,5" (espace fine insécable), 5.0 -> "5".
    """
    if value is None:
        return PLACEHOLDER
    rounded = round(float(value), 2)
    body = f"{abs(rounded):,.2f}".rstrip("0").rstrip(".")
    body = body.replace(",", NARROW_NBSP).replace(".", ",")
    return f"-{body}" if rounded < 0 else body


def normalize_label(value: str | None) -> str:
    """Minuscules sans accents ni espaces de bord / Lower-case, accent-free, trimmed."""
    decomposed = unicodedata.normalize("NFKD", str(value or "").strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))
