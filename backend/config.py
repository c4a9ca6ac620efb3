import os

from dotenv import load_dotenv

load_dotenv()

BACKEND_DIR = os.path.dirname(os.path.abspath(__file__))
PROJECT_ROOT = os.path.dirname(BACKEND_DIR)

_BOOL_TRUTHY = {"true", "1", "yes", "y"}
_BOOL_FALSY = {"false", "0", "no", "n"}


def env_float(name: str, default: float, minimum: float = 0.0) -> float:
    raw = os.environ.get(name, "")
    try:
        return max(minimum, float(raw))
    except (TypeError, ValueError):
        return default


def env_int(name: str, default: int, minimum: int = 1) -> int:
    raw = os.environ.get(name, "")
    try:
        return max(minimum, int(raw))
    except (TypeError, ValueError):
        return default


def env_bool(name: str, default: bool) -> bool:
    raw = os.environ.get(name, "").strip().lower()
    if raw in _BOOL_TRUTHY:
        return True
    if raw in _BOOL_FALSY:
        return False
    return default


def env_str(name: str, default: str) -> str:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    return raw.strip()


def _cache_dir() -> str:
    raw = os.environ.get("MDE_CACHE_DIR")
    if not raw:
        return os.path.join(PROJECT_ROOT, ".cache")
    if not os.path.isabs(raw):
        return os.path.join(PROJECT_ROOT, raw)
    return raw


BASE_URL = env_str("MDE_BASE_URL", "https://mydegrees.oregonstate.edu")
SESSION_COOKIE = os.environ.get("MDE_SESSION_COOKIE", "").strip()
CACHE_DIR = _cache_dir()

HISTORY_TTL_SECONDS = env_float("MDE_HISTORY_TTL_HOURS", 24.0, minimum=0.0) * 60 * 60
DEBOUNCE_SECONDS = env_float("MDE_DEBOUNCE_MS", 250.0, minimum=0.0) / 1000.0
DRIVER_POLL_SECONDS = env_float("MDE_DRIVER_POLL_MS", 100.0, minimum=10.0) / 1000.0
HTTP_TIMEOUT_SECONDS = env_float("MDE_HTTP_TIMEOUT", 20.0, minimum=1.0)

# Fixed institutional audit parameters.
AUDIT_SCHOOL = env_str("MDE_AUDIT_SCHOOL", "01")
AUDIT_DEGREE = env_str("MDE_AUDIT_DEGREE", "BS")
AUDIT_TYPE = env_str("MDE_AUDIT_TYPE", "NV")
