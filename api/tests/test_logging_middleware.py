"""
Tests for request correlation ids.
"""
import logging

import pytest

from middleware.logging_middleware import get_logger, project_id_from_path, project_id_var, request_id_var


@pytest.mark.parametrize(
    "path,expected",
    [
        ("/api/projects/abc-123", "abc-123"),
        ("/api/projects/abc-123/canvas", "abc-123"),
        ("/api/professional-recolor", ""),
        ("/health", ""),
    ],
)
def test_project_id_from_path(path, expected):
    assert project_id_from_path(path) == expected


def test_contextual_logger_prefixes_ids(caplog):
    request_token = request_id_var.set("a1b2c3d4")
    project_token = project_id_var.set("5e6f7a8b-0000-0000-0000-000000000000")
    try:
        with caplog.at_level(logging.INFO, logger="recolor.test"):
            get_logger("recolor.test").info("Inpainting cushion")
    finally:
        request_id_var.reset(request_token)
        project_id_var.reset(project_token)

    assert caplog.records[-1].getMessage() == "[a1b2c3d4][proj:5e6f7a8b] Inpainting cushion"


def test_contextual_logger_outside_request(caplog):
    with caplog.at_level(logging.INFO, logger="recolor.test"):
        get_logger("recolor.test").info("Startup")

    assert caplog.records[-1].getMessage() == "Startup"


@pytest.mark.asyncio
async def test_project_routes_echo_request_id(client):
    response = await client.post("/api/projects", json={"name": "Ottoman"})

    assert len(response.headers["X-Request-ID"]) == 8
    assert float(response.headers["X-Process-Time"]) >= 0
