import os
import sys
import time

# Ensure backend/ is on sys.path so sibling imports work
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from flask import Flask, g, jsonify, request
from werkzeug.exceptions import HTTPException

import config
from annotator import BadgeAnnotator
from cache_store import PREREQS_ENABLED_KEY, JsonCacheStore
from collector import collect_scheduled
from history import HistoryCache
from mydegrees_client import MyDegreesClient
from page_model import JsonPlannerPage
from prereq_catalog import PrereqCatalog
from scheduler import FeatureContext, PrereqScheduler, SchedulerDriver

VERSION = "0.3.0"

app = Flask(__name__)

_SLOW_REQUEST_LOG_MS = config.env_float("SLOW_REQUEST_LOG_MS", 750.0, minimum=0.0)


def build_scheduler(store: JsonCacheStore, client=None, page=None) -> PrereqScheduler:
    """Wires the prerequisite feature against one cache store and API client."""
    client = client or MyDegreesClient()
    enabled = store.get("sync", PREREQS_ENABLED_KEY, True)
    return PrereqScheduler(
        context=FeatureContext(enabled if isinstance(enabled, bool) else True),
        page=page or JsonPlannerPage(),
        catalog=PrereqCatalog(store),
        history=HistoryCache(store, client, ttl_seconds=config.HISTORY_TTL_SECONDS),
        annotator=BadgeAnnotator(),
        client=client,
        store=store,
        debounce_seconds=config.DEBOUNCE_SECONDS,
    )


# ── Runtime wiring ────────────────────────────────────────────────────────────
_store = JsonCacheStore(config.CACHE_DIR)
_scheduler = build_scheduler(_store)


# -- Request timing --------------------------------------------------------
@app.before_request
def _start_request_timer():
    g._request_start_time = time.perf_counter()


@app.after_request
def _log_slow_requests(response):
    started = getattr(g, "_request_start_time", None)
    if started is not None:
        duration_ms = (time.perf_counter() - started) * 1000.0
        if duration_ms >= _SLOW_REQUEST_LOG_MS:
            endpoint = request.endpoint or "unknown"
            print(
                f"[SLOW] {request.method} {request.path} "
                f"endpoint={endpoint} status={response.status_code} duration_ms={duration_ms:.1f}"
            )
    return response


def _error(error_code: str, message: str, status: int):
    return jsonify({
        "mode": "error",
        "error": {
            "error_code": error_code,
            "message": message,
        },
    }), status


def _layout_from_request():
    """Returns (layout, error_response). layout is None when the body is empty."""
    raw = request.get_data(cache=True)
    if not raw or not raw.strip():
        return None, None
    body = request.get_json(force=True, silent=True)
    if not isinstance(body, dict):
        return None, _error("INVALID_INPUT", "Request body must be a JSON object.", 400)
    if not isinstance(body.get("columns"), list):
        return None, _error("INVALID_INPUT", "'columns' must be a list.", 400)
    return body, None


# ── 500 handler ────────────────────────────────────────────────────────────────
@app.errorhandler(Exception)
def handle_unexpected_error(e):
    if isinstance(e, HTTPException):
        return e
    print(f"[WARN] Unhandled error: {e}", file=sys.stderr)
    return _error("SERVER_ERROR", "An unexpected server error occurred.", 500)


# ── Routes ─────────────────────────────────────────────────────────────────────
@app.route("/health", methods=["GET"])
def health_endpoint():
    return jsonify({
        "status": "ok",
        "version": VERSION,
        "prereqs_enabled": _scheduler.context.enabled,
        "state": _scheduler.state,
    })


@app.route("/planner", methods=["POST"])
def planner_endpoint():
    """Page script reports a planner change; the pass runs after the debounce delay."""
    layout, err = _layout_from_request()
    if err is not None:
        return err
    if layout is None:
        return _error("INVALID_INPUT", "Request body must be a JSON object.", 400)

    _scheduler.page.update(layout)
    _scheduler.notify_change()
    items, _, _ = collect_scheduled(_scheduler.page)
    return jsonify({"scheduled": len(items), "pending": _scheduler.pending})


@app.route("/evaluate", methods=["POST"])
def evaluate_endpoint():
    """Runs a pass now (optionally on a new layout) and returns the badge state."""
    layout, err = _layout_from_request()
    if err is not None:
        return err
    if layout is not None:
        _scheduler.page.update(layout)

    ran = _scheduler.tick()
    return jsonify({
        "enabled": _scheduler.context.enabled,
        "ran": ran,
        "badges": _scheduler.annotator.snapshot(),
    })


@app.route("/badges", methods=["GET"])
def badges_endpoint():
    return jsonify({
        "enabled": _scheduler.context.enabled,
        "badges": _scheduler.annotator.snapshot(),
    })


@app.route("/prereqs/enabled", methods=["POST"])
def prereqs_enabled_endpoint():
    body = request.get_json(force=True, silent=True)
    enabled = body.get("enabled") if isinstance(body, dict) else None
    if not isinstance(enabled, bool):
        return _error("INVALID_INPUT", "'enabled' must be true or false.", 400)

    _store.set("sync", {PREREQS_ENABLED_KEY: enabled})
    _scheduler.set_enabled(enabled)
    return jsonify({
        "enabled": _scheduler.context.enabled,
        "badges": _scheduler.annotator.snapshot(),
    })


@app.route("/<path:rest>", methods=["GET", "POST", "PUT", "DELETE", "PATCH"])
def catch_all(rest):
    return jsonify({"error": f"/{rest} not found"}), 404


def main() -> int:
    port = config.env_int("PORT", 5000)
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"
    driver = SchedulerDriver(_scheduler, poll_seconds=config.DRIVER_POLL_SECONDS)
    driver.start()
    print(f"[OK] Prerequisite service on port {port} (cache: {config.CACHE_DIR})")
    try:
        app.run(host="0.0.0.0", port=port, debug=debug, use_reloader=False)
    finally:
        driver.stop(timeout=1.0)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
