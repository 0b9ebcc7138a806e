"""Tests for restflow.flows.executor module."""
from __future__ import annotations

import logging

import pytest

from restflow.config import RestflowConfig
from restflow.flows.errors import FlowExecutionError, HttpError
from restflow.flows.executor import (
    FlowExecutor,
    execute_flow_from_string,
    execute_flow_with_environment,
    format_console_value,
)
from restflow.flows.parser import parse_flow

BASE_URL = "https://api.test"

LOGIN_FLOW = """\
### Login
POST /login
Content-Type: application/json

{"username": "{{USERNAME}}"}

> assert status == 200
> capture token = body.token
> assert token == "abc123"

### Profile
GET /me
Authorization: Bearer {{token}}

> assert status == 200
> assert body.name == "Admin"
> console body.roles
"""


@pytest.fixture
def login_routes(response_factory):
    return {
        ("POST", f"{BASE_URL}/login"): response_factory(body={"token": "abc123"}),
        ("GET", f"{BASE_URL}/me"): response_factory(body={"name": "Admin", "roles": ["admin"]}),
    }


@pytest.fixture
def executor(stub_transport):
    config = RestflowConfig(base_url=BASE_URL, variables={"USERNAME": "admin"})
    return FlowExecutor(config=config, http_client=stub_transport)


class TestExecuteFlow:
    """Tests for FlowExecutor.execute_flow."""

    def test_successful_flow(self, executor, stub_transport, login_routes):
        stub_transport.routes = login_routes

        result = executor.execute_flow(LOGIN_FLOW, name="login")

        assert result.success
        assert result.errors == []
        assert result.flow.name == "login"
        assert result.total_steps == 2
        assert result.passed_steps == 2
        assert result.total_directives == 6
        assert result.failed_directives == 0
        assert result.context.variables["token"] == "abc123"
        assert len(result.context.responses) == 2

    def test_requests_are_resolved(self, executor, stub_transport, login_routes):
        stub_transport.routes = login_routes

        executor.execute_flow(LOGIN_FLOW)

        login, profile = stub_transport.requests
        assert login.url == f"{BASE_URL}/login"
        assert login.body == '{"username": "admin"}'
        assert profile.headers == {"Authorization": "Bearer abc123"}

    def test_capture_is_visible_to_later_directives(self, executor, stub_transport, login_routes):
        stub_transport.routes = login_routes

        result = executor.execute_flow(LOGIN_FLOW)

        capture, same_step_assert = result.steps[0].directives[1:]
        assert capture.captured_value == "abc123"
        assert same_step_assert.success

    def test_console_output(self, executor, stub_transport, login_routes):
        stub_transport.routes = login_routes

        result = executor.execute_flow(LOGIN_FLOW)

        console = result.steps[1].directives[2]
        assert console.success
        assert console.console_output == '[\n  "admin"\n]'

    def test_failed_assertion(self, executor, stub_transport, response_factory):
        stub_transport.routes = {("GET", f"{BASE_URL}/missing"): response_factory(status=404, status_text="Not Found")}

        result = executor.execute_flow("### Missing\nGET /missing\n\n> assert status == 200\n")

        assert not result.success
        step = result.steps[0]
        assert step.error is None
        assert step.response.status == 404
        assert step.directives[0].error == "Assertion failed: expected 200, got 404"
        assert result.passed_steps == 1
        assert result.failed_directives == 1

    def test_transport_failure_fails_step_and_directives(self, executor):
        result = executor.execute_flow("### Down\nGET /down\n\n> assert status == 200\n> capture id = body.id\n")

        assert not result.success
        step = result.steps[0]
        assert step.response is None
        assert step.error.startswith("HTTP request failed")
        assert all(not d.success for d in step.directives)
        assert step.directives[0].error.startswith("Step execution failed: HTTP request failed")
        assert result.failed_steps == 1

    def test_later_steps_run_after_failure(self, executor, stub_transport, response_factory):
        stub_transport.routes = {("GET", f"{BASE_URL}/ok"): response_factory()}

        result = executor.execute_flow("### Down\nGET /down\n\n### Up\nGET /ok\n\n> assert status == 200\n")

        assert [s.error is None for s in result.steps] == [False, True]
        assert result.steps[1].directives[0].success
        assert not result.success

    def test_undefined_variable_fails_step(self, executor, stub_transport):
        result = executor.execute_flow("### Uses token\nGET /items/{{itemId}}\n")

        assert result.steps[0].error == "Variable 'itemId' is not defined"
        assert result.steps[0].request.url == "/items/{{itemId}}"
        assert stub_transport.requests == []

    def test_missing_capture_does_not_define_variable(self, executor, stub_transport, response_factory):
        stub_transport.routes = {("GET", f"{BASE_URL}/a"): response_factory(body={})}

        result = executor.execute_flow("### A\nGET /a\n\n> capture id = body.id\n\n### B\nGET /b/{{id}}\n")

        assert result.steps[0].directives[0].success
        assert "id" not in result.context.variables
        assert result.steps[1].error == "Variable 'id' is not defined"

    def test_parse_errors_fail_the_flow(self, executor, stub_transport, caplog):
        with caplog.at_level(logging.ERROR, logger="restflow.flows.executor"):
            result = executor.execute_flow("### Bad\nFETCH /x\n")

        assert not result.success
        assert result.steps == []
        assert result.errors == ["Flow parsing failed: Error parsing step: Invalid HTTP method: FETCH"]
        assert stub_transport.requests == []
        assert "Invalid HTTP method" in caplog.text

    def test_unexpected_transport_error_fails_only_its_step(self, executor, stub_transport, response_factory):
        stub_transport.routes = {
            ("GET", f"{BASE_URL}/a"): ConnectionError("refused"),
            ("GET", f"{BASE_URL}/b"): response_factory(),
        }

        result = executor.execute_flow(
            "### A\nGET /a\n\n> assert status == 200\n\n### B\nGET /b\n\n> assert status == 200\n"
        )

        assert not result.success
        assert result.errors == []
        failed, passed = result.steps
        assert failed.error == "refused"
        assert failed.response is None
        assert failed.directives[0].error == "Step execution failed: refused"
        assert passed.error is None
        assert passed.directives[0].success

    def test_callback_error_keeps_partial_result(self, executor, stub_transport, response_factory):
        stub_transport.routes = {
            ("GET", f"{BASE_URL}/a"): response_factory(),
            ("GET", f"{BASE_URL}/b"): response_factory(),
        }

        def on_step_complete(step_result):
            raise RuntimeError("boom")

        result = executor.execute_flow("### A\nGET /a\n\n### B\nGET /b\n", on_step_complete=on_step_complete)

        assert not result.success
        assert [s.step.name for s in result.steps] == ["A"]
        assert result.errors == ["Flow execution failed: boom"]

    def test_step_callback(self, executor, stub_transport, login_routes):
        stub_transport.routes = login_routes
        seen = []

        executor.execute_flow(LOGIN_FLOW, on_step_complete=lambda step: seen.append(step.step.name))

        assert seen == ["Login", "Profile"]


class TestExecuteFlowObject:
    """Tests for FlowExecutor.execute_flow_object."""

    def test_raises_with_partial_result(self, executor, stub_transport, response_factory):
        stub_transport.routes = {("GET", f"{BASE_URL}/b"): response_factory()}
        flow = parse_flow("### B\nGET /b\n").flow

        def on_step_complete(step_result):
            raise ValueError("bad state")

        with pytest.raises(FlowExecutionError, match="bad state") as exc:
            executor.execute_flow_object(flow, on_step_complete=on_step_complete)

        assert exc.value.flow_result is not None
        assert not exc.value.flow_result.success
        assert len(exc.value.flow_result.steps) == 1
        assert isinstance(exc.value.cause, ValueError)


class TestVariableSources:
    """Tests for environment, config and CLI variable precedence."""

    def test_environment_file(self, tmp_path, stub_transport, response_factory):
        env_file = tmp_path / "staging.env"
        env_file.write_text("BASE_URL=https://staging.test\nTOKEN=from-env\n", encoding="utf-8")
        stub_transport.routes = {("GET", "https://staging.test/x"): response_factory()}
        executor = FlowExecutor(http_client=stub_transport)

        result = executor.execute_flow("### X\nGET /x\nX-Token: {{TOKEN}}\n", env_file)

        assert result.success
        assert stub_transport.requests[0].headers == {"X-Token": "from-env"}

    def test_cli_variables_override_environment(self, tmp_path, stub_transport, response_factory):
        env_file = tmp_path / ".env"
        env_file.write_text("BASE_URL=https://env.test\n", encoding="utf-8")
        stub_transport.routes = {("GET", "https://cli.test/x"): response_factory()}
        executor = FlowExecutor(
            config=RestflowConfig(variables={"BASE_URL": "https://cli.test"}),
            http_client=stub_transport,
        )

        assert executor.execute_flow("### X\nGET /x\n", env_file).success

    def test_environment_file_overrides_config_base_url(self, tmp_path, stub_transport, response_factory):
        env_file = tmp_path / ".env"
        env_file.write_text("BASE_URL=https://env.test\n", encoding="utf-8")
        stub_transport.routes = {("GET", "https://env.test/x"): response_factory()}
        executor = FlowExecutor(config=RestflowConfig(base_url="https://config.test"), http_client=stub_transport)

        assert executor.execute_flow("### X\nGET /x\n", env_file).success

    def test_missing_environment_file_is_logged(self, tmp_path, stub_transport, response_factory, caplog):
        stub_transport.routes = {("GET", "https://api.test/x"): response_factory()}
        executor = FlowExecutor(config=RestflowConfig(base_url=BASE_URL), http_client=stub_transport)

        with caplog.at_level(logging.WARNING, logger="restflow.flows.executor"):
            result = executor.execute_flow("### X\nGET /x\n", tmp_path / "nope.env")

        assert result.success
        assert "Failed to load environment" in caplog.text


class TestClientLifecycle:
    """Tests for ownership of the HTTP client."""

    def test_owned_client_is_closed(self, mocker):
        client_cls = mocker.patch("restflow.flows.executor.HttpClient")
        client_cls.return_value.execute.side_effect = HttpError("HTTP request failed: refused")

        result = FlowExecutor(config=RestflowConfig(timeout=500)).execute_flow("### X\nGET http://x.test/\n")

        client_cls.assert_called_once_with(timeout=500, retries=0, follow_redirects=True, headers={})
        client_cls.return_value.close.assert_called_once()
        assert result.steps[0].error == "HTTP request failed: refused"

    def test_injected_client_is_not_closed(self, executor, stub_transport):
        executor.execute_flow("### X\nGET /x\n")

        assert not stub_transport.closed


class TestFormatConsoleValue:
    """Tests for format_console_value function."""

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("text", '"text"'),
            ({"a": 1}, '{\n  "a": 1\n}'),
            (5, "5"),
            (None, "null"),
        ],
    )
    def test_values(self, value, expected):
        assert format_console_value(value) == expected


def test_execute_flow_from_string(mocker, response_factory):
    client_cls = mocker.patch("restflow.flows.executor.HttpClient")
    client_cls.return_value.execute.return_value = response_factory(status=204)

    result = execute_flow_from_string("### Ping\nGET http://x.test/ping\n\n> assert status == 204\n")

    assert result.success


def test_execute_flow_with_environment(mocker, tmp_path, response_factory):
    env_file = tmp_path / "ci.env"
    env_file.write_text("BASE_URL=http://ci.test\n", encoding="utf-8")
    client_cls = mocker.patch("restflow.flows.executor.HttpClient")
    client_cls.return_value.execute.return_value = response_factory()

    result = execute_flow_with_environment("### Ping\nGET /ping\n", env_file)

    assert result.success
    assert client_cls.return_value.execute.call_args.args[0].url == "http://ci.test/ping"
