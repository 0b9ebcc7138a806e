"""Tests for restflow.flows.parser module."""
from __future__ import annotations

from restflow.flows.models import AssertDirective, CaptureDirective, ConsoleDirective, HttpMethod
from restflow.flows.parser import FlowParser, parse_flow, parse_flow_file

LOGIN_FLOW = """\
# Authentication flow
### Login
POST {{BASE_URL}}/login
Content-Type: application/json
Accept: application/json

{
  "username": "admin",
  "password": "{{PASSWORD}}"
}

> assert status == 200
> capture token = body.token

### Get profile
GET /me
Authorization: Bearer {{token}}

> assert body.name == "Admin"
> console body.roles
"""


class TestParseString:
    """Tests for FlowParser.parse_string."""

    def test_parses_steps_in_order(self):
        result = parse_flow(LOGIN_FLOW, name="auth")

        assert result.errors == []
        assert result.flow.name == "auth"
        assert [step.name for step in result.flow.steps] == ["Login", "Get profile"]

    def test_request_line_and_headers(self):
        login = parse_flow(LOGIN_FLOW).flow.steps[0]

        assert login.request.method == HttpMethod.POST
        assert login.request.url == "{{BASE_URL}}/login"
        assert login.request.headers == {"Content-Type": "application/json", "Accept": "application/json"}

    def test_json_body_is_kept_verbatim(self):
        login = parse_flow(LOGIN_FLOW).flow.steps[0]

        assert login.request.body == '{\n  "username": "admin",\n  "password": "{{PASSWORD}}"\n}'

    def test_directives(self):
        login, profile = parse_flow(LOGIN_FLOW).flow.steps

        assert login.directives == [
            AssertDirective(expression="status == 200"),
            CaptureDirective(variable="token", expression="body.token"),
        ]
        assert profile.directives == [
            AssertDirective(expression='body.name == "Admin"'),
            ConsoleDirective(expression="body.roles"),
        ]
        assert profile.request.body is None

    def test_lowercase_method_and_http_version(self):
        step = parse_flow("### Ping\nget https://example.com/ping HTTP/1.1\n").flow.steps[0]

        assert step.request.method == HttpMethod.GET
        assert step.request.url == "https://example.com/ping"
        assert step.request.headers is None

    def test_plain_text_body(self):
        step = parse_flow("### Echo\nPOST /echo\nContent-Type: text/plain\n\nhello world\n").flow.steps[0]

        assert step.request.body == "hello world"

    def test_empty_content(self):
        result = parse_flow("")

        assert result.errors == []
        assert result.flow.steps == []

    def test_invalid_method_skips_step(self):
        result = parse_flow("### Bad\nFETCH /x\n\n### Good\nGET /y\n")

        assert [step.name for step in result.flow.steps] == ["Good"]
        assert result.errors == ["Error parsing step: Invalid HTTP method: FETCH"]

    def test_missing_request(self):
        result = parse_flow("### Lonely step\n")

        assert result.flow.steps == []
        assert result.errors == ["Error parsing step: No HTTP request found"]

    def test_request_line_without_url(self):
        result = parse_flow("### Broken\nGET\n")

        assert result.errors == ["Error parsing step: Invalid request line: GET"]

    def test_unknown_and_malformed_directives_are_ignored(self):
        step = parse_flow("### X\nGET /x\n\n> retry 3\n> capture = body.id\n> assert status == 200\n").flow.steps[0]

        assert step.directives == [AssertDirective(expression="status == 200")]


class TestParseFile:
    """Tests for FlowParser.parse_file."""

    def test_name_from_file(self, tmp_path):
        path = tmp_path / "users.flow"
        path.write_text("### List\nGET /users\n", encoding="utf-8")

        result = parse_flow_file(path)

        assert result.flow.name == "users"
        assert len(result.flow.steps) == 1

    def test_missing_file(self, tmp_path):
        result = FlowParser().parse_file(tmp_path / "missing.flow")

        assert result.flow.steps == []
        assert len(result.errors) == 1
        assert result.errors[0].startswith("Failed to read file")
