import re

# Institutional term-code suffixes. Summer and Fall belong to the academic
# year that ends in the following calendar year.
SEASON_SUFFIX = {
    "Summer": "00",
    "Fall": "01",
    "Winter": "02",
    "Spring": "03",
}
_ROLLOVER_SEASONS = {"Summer", "Fall"}

YEAR_FIRST_RE = re.compile(r'\b(20\d{2})\s+(Fall|Winter|Spring|Summer)\b')
SEASON_FIRST_RE = re.compile(r'\b(Fall|Winter|Spring|Summer)\s+(20\d{2})\b')


def term_label_to_code(season: str, year) -> str | None:
    """
    'Fall', 2025 -> '202601'; 'Spring', 2026 -> '202603'.
    Returns None when the season is not recognized or the year is not numeric.
    """
    suffix = SEASON_SUFFIX.get(season)
    if suffix is None:
        return None
    try:
        y = int(year)
    except (TypeError, ValueError):
        return None
    code_year = y + 1 if season in _ROLLOVER_SEASONS else y
    return f"{code_year}{suffix}"


def parse_term_label(text: str) -> tuple[str, int] | None:
    """Finds '2025 Fall' or 'Fall 2025' inside text. Returns (season, year) or None."""
    s = (text or "").strip()
    m = YEAR_FIRST_RE.search(s)
    if m:
        return m.group(2), int(m.group(1))
    m = SEASON_FIRST_RE.search(s)
    if m:
        return m.group(1), int(m.group(2))
    return None


def format_term_label(season: str, year: int) -> str:
    return f"{season} {year}"


def fallback_term_label(term_index: int) -> str:
    return f"Term {term_index + 1}"
