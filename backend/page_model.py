"""
Planner page model.

The collector only depends on the small contract below: an ordered list of
term columns, each with candidate heading texts and course-code elements. A
course element's `card` is the scheduled-course unit the annotator writes to;
it is None when the unit cannot be located on the page.

JsonPlannerPage implements the contract over the layout the page script posts:

    {
      "columns": [
        {
          "texts": ["Fall 2025", "15 credits"],
          "courses": [{"text": "CS 261", "card": "card-7"}, ...]
        },
        ...
      ]
    }
"""

import threading


class CourseElement:
    def __init__(self, text: str, card=None):
        self.text = text
        self.card = card


class TermColumn:
    def __init__(self, texts: list[str], course_elements: list[CourseElement]):
        self.texts = texts
        self.course_elements = course_elements


def _parse_course(raw) -> CourseElement | None:
    if isinstance(raw, str):
        return CourseElement(raw)
    if not isinstance(raw, dict):
        return None
    text = raw.get("text")
    if not isinstance(text, str):
        return None
    card = raw.get("card")
    if card is not None and not isinstance(card, str):
        card = str(card)
    return CourseElement(text, card or None)


def _parse_column(raw) -> TermColumn:
    """Malformed columns become empty columns so they still occupy a term index."""
    if not isinstance(raw, dict):
        return TermColumn([], [])
    texts = [t for t in (raw.get("texts") or []) if isinstance(t, str)]
    heading = raw.get("heading")
    if isinstance(heading, str):
        texts.insert(0, heading)
    courses = []
    for entry in raw.get("courses") or []:
        element = _parse_course(entry)
        if element is not None:
            courses.append(element)
    return TermColumn(texts, courses)


def parse_layout(layout) -> list[TermColumn]:
    if not isinstance(layout, dict):
        return []
    raw_columns = layout.get("columns")
    if not isinstance(raw_columns, list):
        return []
    return [_parse_column(c) for c in raw_columns]


class JsonPlannerPage:
    """Page model backed by the most recently posted layout."""

    def __init__(self, layout: dict | None = None):
        self._lock = threading.Lock()
        self._columns = parse_layout(layout)

    def update(self, layout: dict) -> None:
        columns = parse_layout(layout)
        with self._lock:
            self._columns = columns

    def columns(self) -> list[TermColumn]:
        with self._lock:
            return list(self._columns)
