import re

# Matches: CS 361, CS361, ECE 271, MTH 251H, etc.
CANONICAL = re.compile(r'^([A-Z]{2,4})\s?(\d{3}[A-Za-z]?)$')

# Scraped planner text that looks like a course code.
COURSE_CODE_RE = re.compile(r'^[A-Z]{2,4}\s?\d{3}[A-Za-z]?$')

# Normalized form, letter suffix in either case (audit records vary).
NORMALIZED_RE = re.compile(r'^[A-Z]{2,4}\s\d{3}[A-Z]?$', re.IGNORECASE)

_WHITESPACE = re.compile(r'\s+')


def normalize_course_code(raw: str) -> str:
    """
    Normalizes a course code to canonical 'DISC NNN[L]' format.
    Handles: 'CS361', 'CS 361', 'CS  361', 'MTH 251h'
    Best effort: anything that does not look like a course code
    (including lowercase disciplines such as 'ece271') is returned unchanged.
    """
    if raw is None:
        return raw
    s = _WHITESPACE.sub(" ", str(raw).strip())
    m = CANONICAL.match(s)
    if not m:
        return raw
    return f"{m.group(1)} {m.group(2).upper()}"


def split_course_code(code: str) -> dict | None:
    """'CS 261H' -> {"discipline": "CS", "number": "261H"}; None if not a course code."""
    normalized = normalize_course_code(code)
    if not isinstance(normalized, str):
        return None
    m = CANONICAL.match(normalized)
    if not m:
        return None
    return {"discipline": m.group(1), "number": m.group(2)}


def is_course_code(text: str) -> bool:
    return bool(COURSE_CODE_RE.match((text or "").strip()))


def looks_like_course(code: str) -> bool:
    """Loose check used on audit records, where discipline case is not guaranteed."""
    return bool(NORMALIZED_RE.match(code or ""))
