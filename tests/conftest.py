"""Shared fixtures for the sentiment scraper test suite."""

from __future__ import annotations

import json
import os

# Settings are built at import time and require a provider credential.
os.environ.setdefault("SA_LLM_PROVIDER", "gemini")
os.environ.setdefault("SA_GEMINI_API_KEY", "test-gemini-key")

import pytest  # noqa: E402

from tests.helpers.fake_clients import ScriptedClient  # noqa: E402
from tests.helpers.payloads import make_payload  # noqa: E402


@pytest.fixture
def valid_payload() -> dict:
    return make_payload()


@pytest.fixture
def valid_text(valid_payload: dict) -> str:
    return json.dumps(valid_payload)


@pytest.fixture
def scripted_client(valid_text: str) -> ScriptedClient:
    return ScriptedClient(text=valid_text)
