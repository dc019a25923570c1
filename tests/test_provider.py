"""Tests for provider detection."""

import pytest

from claudeswitch.provider import (
    BASE_URL_KEY,
    ZAI_ENV_KEYS,
    Provider,
    detect_provider,
    is_zai_key,
)


def test_empty_mapping_is_unknown():
    assert detect_provider({}) == Provider.UNKNOWN


def test_no_base_url_is_anthropic():
    assert detect_provider({"ANTHROPIC_AUTH_TOKEN": "token"}) == Provider.ANTHROPIC


def test_empty_base_url_is_anthropic():
    assert detect_provider({BASE_URL_KEY: ""}) == Provider.ANTHROPIC


def test_zai_marker_is_zai():
    assert detect_provider({BASE_URL_KEY: "https://api.z.ai/api/anthropic"}) == Provider.ZAI


def test_other_base_url_is_custom():
    assert detect_provider({BASE_URL_KEY: "https://proxy.example.com"}) == Provider.CUSTOM


@pytest.mark.parametrize("env", [
    {},
    {"X": "1"},
    {BASE_URL_KEY: ""},
    {BASE_URL_KEY: "z.ai"},
    {BASE_URL_KEY: "http://localhost:8080"},
])
def test_detection_is_total_and_pure(env):
    snapshot = dict(env)
    first = detect_provider(env)
    assert first in set(Provider)
    assert detect_provider(env) == first
    assert env == snapshot


def test_zai_key_set():
    assert isinstance(ZAI_ENV_KEYS, frozenset)
    assert len(ZAI_ENV_KEYS) == 5
    assert is_zai_key("API_TIMEOUT_MS")
    assert not is_zai_key("ANTHROPIC_AUTH_TOKEN")
