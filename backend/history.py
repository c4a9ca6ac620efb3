import sys
import time

from cache_store import HISTORY_KEY, HISTORY_META_KEY
from mydegrees_client import ApiError
from normalizer import looks_like_course, normalize_course_code

DEFAULT_HISTORY_TTL_SECONDS = 24 * 60 * 60


def _is_timestamp(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


# ── Audit walk ────────────────────────────────────────────────────────────────

def is_course_record(node: dict) -> bool:
    """
    Heuristic for "this audit node is a taken/attempted course".

    The audit schema is undocumented, so the rule is:
      - string `discipline` and `number` fields that form a course code, and
      - at least one of recordType == "C", a string letterGrade,
        inProgress == "Y", preregistered == "Y".

    Known to be loose in both directions; keep it unchanged unless checked
    against real audit payloads.
    """
    discipline = node.get("discipline")
    number = node.get("number")
    if not isinstance(discipline, str) or not isinstance(number, str):
        return False
    if not looks_like_course(normalize_course_code(f"{discipline} {number}")):
        return False
    return (
        node.get("recordType") == "C"
        or isinstance(node.get("letterGrade"), str)
        or node.get("inProgress") == "Y"
        or node.get("preregistered") == "Y"
    )


def walk_audit(node, visit) -> None:
    """Depth-first walk over a JSON tree, calling visit(d) for every dict."""
    stack = [node]
    while stack:
        current = stack.pop()
        if isinstance(current, dict):
            visit(current)
            stack.extend(reversed(list(current.values())))
        elif isinstance(current, list):
            stack.extend(reversed(current))


def extract_history_from_audit(audit, predicate=is_course_record) -> set[str]:
    """Returns normalized course codes for every audit node matching predicate."""
    codes: set[str] = set()

    def visit(node: dict) -> None:
        if predicate(node):
            code = normalize_course_code(f"{node['discipline']} {node['number']}").upper()
            codes.add(normalize_course_code(code))

    walk_audit(audit, visit)
    return codes


# ── Cache ─────────────────────────────────────────────────────────────────────

class HistoryCache:
    """
    Completed / in-progress course set for the current student, cached in the
    local store and refetched once it is older than ttl_seconds.
    """

    def __init__(self, store, client, clock=time.time, ttl_seconds: float = DEFAULT_HISTORY_TTL_SECONDS):
        self.store = store
        self.client = client
        self.clock = clock
        self.ttl_seconds = ttl_seconds
        self.history: set[str] = set()
        # Clock time of the last successful fetch; None until one succeeds.
        self.fetched_at: float | None = None

    def load_cached(self) -> tuple[set[str], dict | None]:
        saved = self.store.get_many("local", {HISTORY_KEY: None, HISTORY_META_KEY: None})
        saved_list = saved[HISTORY_KEY]
        meta = saved[HISTORY_META_KEY]
        history = set(saved_list) if isinstance(saved_list, list) else set()
        if not isinstance(meta, dict) or not _is_timestamp(meta.get("savedAt")):
            meta = None
        return history, meta

    def save(self, student_id: str, history: set[str]) -> None:
        self.store.set("local", {
            HISTORY_KEY: sorted(history),
            HISTORY_META_KEY: {"studentId": student_id, "savedAt": self.clock()},
        })

    def _is_fresh(self, history: set[str], meta: dict | None) -> bool:
        if meta is None or not history:
            return False
        return self.clock() - meta["savedAt"] < self.ttl_seconds

    def ensure_history_set(self) -> set[str]:
        """
        Returns the history set, fetching it when neither the last fetch nor
        the persisted cache is within the TTL. A fetched set is reused until
        it expires even when empty; the persisted cache only counts when
        non-empty.
        """
        if self.fetched_at is not None and self.clock() - self.fetched_at < self.ttl_seconds:
            return self.history

        cached, meta = self.load_cached()
        if self._is_fresh(cached, meta):
            self.history = cached
            return self.history

        # Fails closed: an empty history makes every prerequisite look unmet
        # until a later pass succeeds.
        self.history = set()
        self.fetched_at = None
        try:
            student_id = self.client.fetch_student_id()
            if not student_id:
                print("[WARN] History refresh skipped: no student id", file=sys.stderr)
                return self.history
            audit = self.client.fetch_audit(student_id)
        except ApiError as exc:
            print(f"[WARN] History refresh failed: {exc}", file=sys.stderr)
            return self.history

        history = extract_history_from_audit(audit)
        self.save(student_id, history)
        self.history = history
        self.fetched_at = self.clock()
        print(f"[OK] Loaded {len(history)} history courses for student {student_id}")
        return self.history
