"""
Thin requests-based client for the MyDegrees dashboard API.

Only three calls are used:
  GET  /dashboard/api/users/myself        -> current student id
  GET  /dashboard/api/audit               -> academic audit document
  POST /dashboard/api/course-link/term    -> per-course prerequisite tokens
"""

import requests

import config

USERS_MYSELF_PATH = "/dashboard/api/users/myself"
AUDIT_PATH = "/dashboard/api/audit"
COURSE_LINK_PATH = "/dashboard/api/course-link/term"


class ApiError(Exception):
    """Non-success response or transport failure from the MyDegrees API."""

    def __init__(self, message: str, status: int | None = None):
        super().__init__(message)
        self.status = status


class MyDegreesClient:
    def __init__(
        self,
        base_url: str = config.BASE_URL,
        session: requests.Session | None = None,
        timeout: float = config.HTTP_TIMEOUT_SECONDS,
        cookie: str = config.SESSION_COOKIE,
        school: str = config.AUDIT_SCHOOL,
        degree: str = config.AUDIT_DEGREE,
        audit_type: str = config.AUDIT_TYPE,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout
        self.school = school
        self.degree = degree
        self.audit_type = audit_type
        if cookie:
            self.session.headers["Cookie"] = cookie

    def _request(self, method: str, path: str, label: str, **kwargs):
        url = f"{self.base_url}{path}"
        try:
            resp = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as exc:
            raise ApiError(f"{label} failed: {exc}") from exc
        if not resp.ok:
            raise ApiError(f"{label} failed: {resp.status_code}", status=resp.status_code)
        try:
            return resp.json()
        except ValueError as exc:
            raise ApiError(f"{label} returned invalid JSON", status=resp.status_code) from exc

    def fetch_student_id(self) -> str | None:
        data = self._request("GET", USERS_MYSELF_PATH, "users/myself")
        raw = data.get("id") if isinstance(data, dict) else None
        student_id = str(raw or "").strip()
        return student_id or None

    def audit_params(self, student_id: str) -> dict:
        return {
            "studentId": student_id,
            "school": self.school,
            "degree": self.degree,
            "is-process-new": "true",
            "audit-type": self.audit_type,
            "auditId": "",
            "include-inprogress": "true",
            "include-preregistered": "true",
            "aid-term": "undefined",
        }

    def fetch_audit(self, student_id: str):
        return self._request("GET", AUDIT_PATH, "audit", params=self.audit_params(student_id))

    def fetch_course_info(self, term_code: str, courses: list[dict]) -> list[dict]:
        """
        courses: [{"discipline": "CS", "number": "261"}, ...]
        Returns the courseInformation.courses list (empty when absent).
        """
        data = self._request(
            "POST",
            COURSE_LINK_PATH,
            "course-link/term",
            json={"term": term_code, "courses": courses},
        )
        if not isinstance(data, dict):
            return []
        info = data.get("courseInformation") or {}
        course_objs = info.get("courses") if isinstance(info, dict) else None
        return course_objs if isinstance(course_objs, list) else []
