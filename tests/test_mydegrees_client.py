import pytest
import requests
from mydegrees_client import ApiError, MyDegreesClient


class FakeResponse:
    def __init__(self, status_code=200, payload=None, invalid_json=False):
        self.status_code = status_code
        self._payload = payload
        self._invalid_json = invalid_json

    @property
    def ok(self):
        return 200 <= self.status_code < 400

    def json(self):
        if self._invalid_json:
            raise ValueError("no json")
        return self._payload


class FakeSession:
    def __init__(self, responses):
        self.responses = list(responses)
        self.headers = {}
        self.requests = []

    def request(self, method, url, timeout=None, **kwargs):
        self.requests.append({"method": method, "url": url, "timeout": timeout, **kwargs})
        result = self.responses.pop(0)
        if isinstance(result, Exception):
            raise result
        return result


def make_client(*responses, **kwargs):
    session = FakeSession(responses)
    return MyDegreesClient(base_url="https://degrees.example.edu/", session=session, timeout=5, **kwargs), session


class TestStudentId:
    def test_id_stripped(self):
        client, session = make_client(FakeResponse(payload={"id": " 930000001 "}))
        assert client.fetch_student_id() == "930000001"
        assert session.requests[0]["url"] == "https://degrees.example.edu/dashboard/api/users/myself"
        assert session.requests[0]["timeout"] == 5

    def test_missing_id(self):
        client, _ = make_client(FakeResponse(payload={}))
        assert client.fetch_student_id() is None

    def test_non_success(self):
        client, _ = make_client(FakeResponse(status_code=401))
        with pytest.raises(ApiError) as exc:
            client.fetch_student_id()
        assert exc.value.status == 401

    def test_transport_error(self):
        client, _ = make_client(requests.ConnectionError("down"))
        with pytest.raises(ApiError) as exc:
            client.fetch_student_id()
        assert exc.value.status is None

    def test_invalid_json(self):
        client, _ = make_client(FakeResponse(invalid_json=True))
        with pytest.raises(ApiError):
            client.fetch_student_id()


class TestAudit:
    def test_audit_params(self):
        client, session = make_client(FakeResponse(payload={"blockArray": []}))
        assert client.fetch_audit("930000001") == {"blockArray": []}
        params = session.requests[0]["params"]
        assert params["studentId"] == "930000001"
        assert params["school"] == "01"
        assert params["degree"] == "BS"
        assert params["audit-type"] == "NV"
        assert params["include-inprogress"] == "true"
        assert params["include-preregistered"] == "true"

    def test_audit_params_configurable(self):
        client, session = make_client(FakeResponse(payload={}), school="02", degree="BA", audit_type="AA")
        client.fetch_audit("1")
        params = session.requests[0]["params"]
        assert (params["school"], params["degree"], params["audit-type"]) == ("02", "BA", "AA")


class TestCourseInfo:
    def test_posts_term_and_courses(self):
        payload = {"courseInformation": {"courses": [{"subjectCode": "CS", "courseNumber": "362"}]}}
        client, session = make_client(FakeResponse(payload=payload))
        courses = client.fetch_course_info("202602", [{"discipline": "CS", "number": "362"}])

        assert courses == [{"subjectCode": "CS", "courseNumber": "362"}]
        sent = session.requests[0]
        assert sent["method"] == "POST"
        assert sent["url"].endswith("/dashboard/api/course-link/term")
        assert sent["json"] == {"term": "202602", "courses": [{"discipline": "CS", "number": "362"}]}

    def test_missing_course_information(self):
        client, _ = make_client(FakeResponse(payload={"other": 1}))
        assert client.fetch_course_info("202602", []) == []

    def test_failure(self):
        client, _ = make_client(FakeResponse(status_code=500))
        with pytest.raises(ApiError):
            client.fetch_course_info("202602", [])


class TestCookie:
    def test_cookie_header_set(self):
        _, session = make_client(FakeResponse(payload={}), cookie="JSESSIONID=abc")
        assert session.headers["Cookie"] == "JSESSIONID=abc"
