"""Fixtures for exercising the HTTP interface."""

from __future__ import annotations

import pytest

pytest.importorskip("httpx")
from fastapi.testclient import TestClient


@pytest.fixture()
def client(session, mail_gateway):
    """Return a test client whose reminder runs use the recording mail sender."""

    from main import create_app

    with TestClient(create_app()) as test_client:
        yield test_client
