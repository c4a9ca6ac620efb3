"""
Drives the prerequisite pass.

States:
  disabled - toggle off; badges cleared, ticks ignored
  idle     - enabled, waiting for a change notification
  running  - a pass is in flight; further ticks are dropped

Change notifications arm a debounce deadline; run_due() fires the pass once
the deadline has passed. Only one pass runs at a time.
"""

import sys
import threading
import time

from cache_store import migrate_local_cache
from collector import collect_scheduled
from evaluator import apply_warnings

STATE_DISABLED = "disabled"
STATE_IDLE = "idle"
STATE_RUNNING = "running"

DEFAULT_DEBOUNCE_SECONDS = 0.25


class FeatureContext:
    """Toggle state for one feature, passed to anything that writes badges."""

    def __init__(self, enabled: bool = True):
        self.enabled = bool(enabled)


class PrereqScheduler:
    def __init__(
        self,
        context: FeatureContext,
        page,
        catalog,
        history,
        annotator,
        client,
        store=None,
        clock=time.monotonic,
        debounce_seconds: float = DEFAULT_DEBOUNCE_SECONDS,
    ):
        self.context = context
        self.page = page
        self.catalog = catalog
        self.history = history
        self.annotator = annotator
        self.client = client
        self.store = store
        self.clock = clock
        self.debounce_seconds = debounce_seconds

        self.initialized = False
        self.last_verdicts: dict = {}
        self._run_lock = threading.Lock()
        self._timer_lock = threading.Lock()
        self._due_at: float | None = None

    @property
    def state(self) -> str:
        if not self.context.enabled:
            return STATE_DISABLED
        if self._run_lock.locked():
            return STATE_RUNNING
        return STATE_IDLE

    @property
    def pending(self) -> bool:
        with self._timer_lock:
            return self._due_at is not None

    # ── Notifications ─────────────────────────────────────────────────────────

    def set_enabled(self, enabled: bool) -> None:
        was_enabled = self.context.enabled
        self.context.enabled = bool(enabled)

        if not self.context.enabled:
            with self._timer_lock:
                self._due_at = None
            self.annotator.clear_all()
            return

        if was_enabled:
            self.notify_change()
        else:
            self.tick()

    def notify_change(self) -> None:
        if not self.context.enabled:
            return
        with self._timer_lock:
            self._due_at = self.clock() + self.debounce_seconds

    def run_due(self) -> bool:
        """Runs the pass if the debounce deadline has passed. Returns True if a pass ran."""
        with self._timer_lock:
            if self._due_at is None or self.clock() < self._due_at:
                return False
            self._due_at = None
        return self.tick()

    # ── Pass ──────────────────────────────────────────────────────────────────

    def _bootstrap(self) -> None:
        if self.store is not None:
            migrate_local_cache(self.store)
        self.catalog.load()
        self.history.ensure_history_set()

    def tick(self) -> bool:
        """
        One prerequisite pass. Returns False when skipped (disabled or another
        pass in flight), True otherwise. Errors end the pass early and are
        retried on the next tick.
        """
        if not self.context.enabled:
            return False
        if not self._run_lock.acquire(blocking=False):
            return False

        try:
            bootstrapped = False
            if not self.initialized:
                self.initialized = True
                self._bootstrap()
                bootstrapped = True

            items, course_to_index, term_index_to_label = collect_scheduled(self.page)
            if not items:
                if self.context.enabled:
                    self.annotator.retain(())
                return True

            self.catalog.ensure_for_scheduled(items, self.client)
            history = self.history.history if bootstrapped else self.history.ensure_history_set()

            self.last_verdicts = apply_warnings(
                items,
                course_to_index,
                term_index_to_label,
                history,
                self.catalog,
                self.annotator,
                self.context,
            )
        except Exception as exc:
            print(f"[WARN] Prerequisite pass failed: {exc}", file=sys.stderr)
        finally:
            self._run_lock.release()
        return True


class SchedulerDriver:
    """Background thread that polls run_due() until stopped."""

    def __init__(self, scheduler: PrereqScheduler, poll_seconds: float = 0.1):
        self.scheduler = scheduler
        self.poll_seconds = poll_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def start(self) -> None:
        if self._thread is not None and self._thread.is_alive():
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="prereq-scheduler", daemon=True)
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def _run(self) -> None:
        while not self._stop.wait(self.poll_seconds):
            self.scheduler.run_due()
