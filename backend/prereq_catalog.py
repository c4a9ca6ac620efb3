import sys

from cache_store import PREREQ_KEY
from mydegrees_client import ApiError
from normalizer import normalize_course_code, split_course_code


def _token_code(token: dict) -> str:
    subject = str(token.get("subjectCodePrerequisite") or "").strip()
    number = str(token.get("courseNumberPrerequisite") or "").strip()
    return normalize_course_code(f"{subject} {number}")


def build_prereq_groups(tokens) -> list[list[str]]:
    """
    Rebuilds the AND-of-OR formula from the flat prerequisite token list.

    Each token carries one prerequisite course plus its layout markers:
      leftParenthesis  "(" opens a new group
      connector        "A" joins to the previous course with AND (new group),
                       anything else is OR (same group)
      rightParenthesis ")" closes the current group

    Example:
      (CS 261 or CS 261H) and (ECE 271 or CS 271)
      -> [["CS 261", "CS 261H"], ["ECE 271", "CS 271"]]

    Codes are de-duplicated within a group; group order is preserved.
    """
    groups: list[list[str]] = []
    current: list[str] = []

    for token in tokens or []:
        if not isinstance(token, dict):
            continue
        code = _token_code(token)
        starts_group = "(" in str(token.get("leftParenthesis") or "")
        is_and = token.get("connector") == "A"

        if (starts_group or is_and) and current:
            groups.append(current)
            current = []

        current.append(code)

        if ")" in str(token.get("rightParenthesis") or "") and current:
            groups.append(current)
            current = []

    if current:
        groups.append(current)
    return [list(dict.fromkeys(g)) for g in groups]


class PrereqCatalog:
    """
    Course -> prerequisite groups, persisted in the local store.
    Entries never expire; only a cache clear drops them.
    """

    def __init__(self, store):
        self.store = store
        self._groups: dict[str, list[list[str]]] = {}

    def load(self) -> None:
        saved = self.store.get("local", PREREQ_KEY, {})
        self._groups = dict(saved) if isinstance(saved, dict) else {}
        print(f"[OK] Loaded {len(self._groups)} cached prerequisite entries")

    def save(self) -> None:
        self.store.set("local", {PREREQ_KEY: self._groups})

    def has(self, course_code: str) -> bool:
        return course_code in self._groups

    def get(self, course_code: str) -> list[list[str]]:
        return self._groups.get(course_code, [])

    def set(self, course_code: str, groups: list[list[str]]) -> None:
        self._groups[course_code] = groups

    def __len__(self) -> int:
        return len(self._groups)

    def _uncached_batches(self, items: list[dict]) -> dict[str, list[dict]]:
        """term_code -> unique [{"discipline", "number"}] for courses without an entry."""
        batches: dict[str, list[dict]] = {}
        seen: dict[str, set[str]] = {}
        for item in items:
            code = item["course_code"]
            if self.has(code):
                continue
            parts = split_course_code(code)
            if parts is None:
                continue
            term_code = item["term_code"]
            key = f"{parts['discipline']} {parts['number']}"
            if key in seen.setdefault(term_code, set()):
                continue
            seen[term_code].add(key)
            batches.setdefault(term_code, []).append(parts)
        return batches

    def ensure_for_scheduled(self, items: list[dict], client) -> int:
        """
        Fetches prerequisite groups for scheduled courses that have no entry,
        one request per term. A failed batch is skipped; its courses stay
        uncached and evaluate as having no prerequisites.

        Returns the number of batches fetched successfully.
        """
        batches = self._uncached_batches(items)
        fetched = 0
        for term_code, courses in batches.items():
            try:
                course_objs = client.fetch_course_info(term_code, courses)
            except ApiError as exc:
                print(f"[WARN] Prerequisite fetch failed for term {term_code}: {exc}", file=sys.stderr)
                continue
            fetched += 1
            for obj in course_objs:
                if not isinstance(obj, dict):
                    continue
                code = normalize_course_code(f"{obj.get('subjectCode') or ''} {obj.get('courseNumber') or ''}".strip())
                if not code:
                    continue
                self.set(code, build_prereq_groups(obj.get("prerequisites")))

        if fetched:
            self.save()
            print(f"[OK] Fetched prerequisites for {fetched} term batch(es)")
        return fetched
