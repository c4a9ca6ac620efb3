from normalizer import is_course_code, normalize_course_code
from terms import format_term_label, parse_term_label, term_label_to_code


def _column_term(column) -> tuple[str, str] | None:
    """Returns (term_label, term_code) from the first heading text that parses."""
    for text in column.texts:
        parsed = parse_term_label(text)
        if parsed is None:
            continue
        season, year = parsed
        term_code = term_label_to_code(season, year)
        if term_code is None:
            return None
        return format_term_label(season, year), term_code
    return None


def collect_scheduled(page) -> tuple[list[dict], dict[str, int], dict[int, str]]:
    """
    Reads the planner layout into scheduled course instances.

    Column position in document order is the term index, so a skipped column
    still consumes its index.

    Returns:
      (
        [{"course_code": "CS 261", "term_index": 0, "term_code": "202601", "card": "card-7"}],
        {"CS 261": 0},          # course -> term index (last column wins)
        {0: "Fall 2025"},       # term index -> label
      )
    """
    items: list[dict] = []
    course_to_index: dict[str, int] = {}
    term_index_to_label: dict[int, str] = {}

    for term_index, column in enumerate(page.columns()):
        term = _column_term(column)
        if term is None:
            continue
        term_label, term_code = term
        term_index_to_label[term_index] = term_label

        for element in column.course_elements:
            if not is_course_code(element.text):
                continue
            if element.card is None:
                continue
            course_code = normalize_course_code(element.text.strip())
            items.append({
                "course_code": course_code,
                "term_index": term_index,
                "term_code": term_code,
                "card": element.card,
            })
            course_to_index[course_code] = term_index

    return items, course_to_index, term_index_to_label
