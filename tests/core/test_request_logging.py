"""Tests for app/core/request_logging.py - request id and access logging."""

import logging

import pytest
from fastapi import FastAPI, Request
from fastapi.testclient import TestClient

from app.core.logging import request_id_var
from app.core.request_logging import (
    REQUEST_ID_HEADER,
    RequestLoggingMiddleware,
    _level_for,
)


@pytest.fixture
def client() -> TestClient:
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/echo")
    async def echo(request: Request):
        return {"request_id": request.state.request_id}

    return TestClient(app)


def test_request_id_is_generated(client: TestClient):
    response = client.get("/echo")

    request_id = response.headers[REQUEST_ID_HEADER]
    assert len(request_id) == 32
    assert response.json() == {"request_id": request_id}


def test_incoming_request_id_is_propagated(client: TestClient):
    response = client.get("/echo", headers={REQUEST_ID_HEADER: "abc-123"})

    assert response.headers[REQUEST_ID_HEADER] == "abc-123"
    assert response.json() == {"request_id": "abc-123"}


def test_oversized_request_id_is_replaced(client: TestClient):
    response = client.get("/echo", headers={REQUEST_ID_HEADER: "x" * 200})

    assert response.headers[REQUEST_ID_HEADER] != "x" * 200


def test_request_is_logged_with_extras(client: TestClient, caplog):
    with caplog.at_level(logging.INFO, logger="app.request"):
        client.get("/echo?a=1", headers={REQUEST_ID_HEADER: "req-1"})

    record = next(r for r in caplog.records if r.name == "app.request")
    assert record.request_id == "req-1"
    assert record.method == "GET"
    assert record.path == "/echo"
    assert record.query == "a=1"
    assert record.status_code == 200


def test_log_levels():
    assert _level_for("/health/liveness", 200) == logging.DEBUG
    assert _level_for("/health/liveness", 500) == logging.ERROR
    assert _level_for("/users", 404) == logging.INFO
    assert _level_for("/users", None) == logging.ERROR


def test_request_id_visible_to_handler_logs():
    app = FastAPI()
    app.add_middleware(RequestLoggingMiddleware)

    @app.get("/current")
    async def current():
        return {"request_id": request_id_var.get()}

    response = TestClient(app).get("/current", headers={REQUEST_ID_HEADER: "ctx-1"})

    assert response.json() == {"request_id": "ctx-1"}
    assert request_id_var.get() is None
