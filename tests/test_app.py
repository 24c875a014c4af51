# tests/test_app.py

from __future__ import annotations

import logging
from datetime import datetime

from fastapi import Request
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

from task_tracker.api.deps import get_app_settings
from task_tracker.core.config import Settings
from task_tracker.core.exceptions import ValidationError, format_error
from task_tracker.core.logging_setup import setup_logging
from task_tracker.db.session import normalize_db_url
from task_tracker.main import create_app


def test_health(client: TestClient) -> None:
    resp = client.get("/api/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "success"
    assert body["message"] == "Server is running"
    datetime.fromisoformat(body["timestamp"])


def test_unknown_route_uses_error_envelope(client: TestClient) -> None:
    resp = client.get("/api/nope")

    assert resp.status_code == 404
    assert resp.json() == {"status": "error", "message": "Not Found"}


def test_wrong_method_uses_error_envelope(client: TestClient) -> None:
    resp = client.patch("/api/health")

    assert resp.status_code == 405
    assert resp.json()["status"] == "error"


def test_database_failure_is_a_500_envelope(client: TestClient, auth_headers) -> None:
    headers = auth_headers()
    # Pull the table out from under the service
    with client.app.state.db.engine.begin() as conn:
        conn.exec_driver_sql("DROP TABLE tasks")

    resp = client.get("/api/tasks", headers=headers)

    assert resp.status_code == 500
    body = resp.json()
    assert body["status"] == "error"
    assert body["message"] == "Database operation failed"
    # DEBUG is on in the test settings, so the raw diagnostic is included
    assert "tasks" in body["error"]


def test_diagnostics_hidden_without_debug(settings: Settings) -> None:
    app = create_app(settings.model_copy(update={"DEBUG": False}))

    @app.get("/boom")
    def boom():
        raise OperationalError("SELECT 1", {}, Exception("disk I/O error"))

    with TestClient(app) as c:
        resp = c.get("/boom")

    assert resp.status_code == 500
    assert resp.json() == {"status": "error", "message": "Database operation failed"}


def test_unexpected_error_is_a_generic_500_envelope(settings: Settings) -> None:
    app = create_app(settings.model_copy(update={"DEBUG": False}))

    @app.get("/crash")
    def crash():
        raise RuntimeError("something broke")

    with TestClient(app, raise_server_exceptions=False) as c:
        resp = c.get("/crash")

    assert resp.status_code == 500
    assert resp.json() == {"status": "error", "message": "Internal server error"}


def test_openapi_documents_error_envelope(client: TestClient) -> None:
    schema = client.get("/openapi.json").json()

    assert "ErrorResponse" in schema["components"]["schemas"]
    responses = schema["paths"]["/api/tasks"]["get"]["responses"]
    assert {"200", "401", "404", "500"} <= set(responses)


def test_app_settings_dependency_reads_app_state(client: TestClient, settings: Settings) -> None:
    request = Request({"type": "http", "app": client.app})

    assert get_app_settings(request) is settings


def test_cors_allows_configured_client(client: TestClient) -> None:
    resp = client.options(
        "/api/tasks",
        headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "GET"},
    )

    assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"


def test_settings_split_origins() -> None:
    settings = Settings(_env_file=None, CLIENT_ORIGINS="http://a.test, http://b.test,")

    assert settings.cors_origins == ["http://a.test", "http://b.test"]
    assert settings.ACCESS_TOKEN_EXPIRE_MINUTES == 7 * 24 * 60


def test_normalize_db_url() -> None:
    assert normalize_db_url("postgres://u:p@h/db") == "postgresql://u:p@h/db"
    assert normalize_db_url("") == "sqlite:///./tasks.db"
    assert normalize_db_url("sqlite://") == "sqlite://"


def test_format_error_strips_request_section() -> None:
    err = {"loc": ("body", "dueDate"), "msg": "Value error, Invalid date: 'x'"}

    assert format_error(err) == {"field": "dueDate", "message": "Invalid date: 'x'"}


def test_validation_error_message_lists_fields() -> None:
    exc = ValidationError.from_error_list(
        [{"loc": ("body", "title"), "msg": "Field required"}, {"loc": ("query", "order"), "msg": "bad"}]
    )

    assert exc.status_code == 400
    assert exc.message == "title: Field required; order: bad"
    assert [e["field"] for e in exc.errors] == ["title", "order"]


def test_setup_logging_filters_third_party_noise() -> None:
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level
    try:
        setup_logging("DEBUG")
        (handler,) = root.handlers

        def passes(name: str, level: int) -> bool:
            record = logging.LogRecord(name, level, __file__, 1, "msg", None, None)
            return handler.filter(record)

        assert root.level == logging.DEBUG
        assert passes("task_tracker.services.task_service", logging.DEBUG)
        assert not passes("sqlalchemy.engine", logging.INFO)
        assert passes("sqlalchemy.engine", logging.WARNING)
        assert not passes("py.warnings", logging.WARNING)
    finally:
        for h in list(root.handlers):
            root.removeHandler(h)
        for h in saved_handlers:
            root.addHandler(h)
        root.setLevel(saved_level)
        logging.captureWarnings(False)
