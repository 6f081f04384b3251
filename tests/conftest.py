"""
Test configuration and fixtures.

This module sets up the test environment and provides shared fixtures for all tests.
"""

import os

import pytest

# Pin engine settings so a developer's .env or shell never leaks into tests
# Must be set BEFORE shared.config.get_settings() is first called
os.environ["NLU_ENABLED"] = "false"
os.environ["MAX_FAILED_TURNS"] = "5"
os.environ["LOG_LEVEL"] = "INFO"
os.environ["LOG_FORMAT"] = "json"
os.environ["ASSISTANT_NAME"] = "the appointment assistant"

from dialogue import DialogueFSM  # noqa: E402
from shared.config import get_settings  # noqa: E402
from tests.helpers import started_fsm  # noqa: E402


@pytest.fixture(autouse=True)
def clear_settings_cache():
    """Settings are cached process-wide; start every test from the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def fsm() -> DialogueFSM:
    """Grammar-variant FSM prompting for the person slot."""
    return started_fsm()


@pytest.fixture
def nlu_fsm() -> DialogueFSM:
    """NLU-variant FSM prompting 'What can I help you with?'."""
    return started_fsm(nlu_enabled=True)
