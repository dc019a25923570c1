"""Tests for token classification and masking."""

from claudeswitch.provider import Provider
from claudeswitch.tokens import (
    MASK_PLACEHOLDER,
    TokenType,
    classify_token,
    mask_token,
    validate_for_provider,
)

WEB_TOKEN = "eyJhbGciOi." + "a" * 120 + ".signature"


class TestClassifyToken:
    def test_empty_is_unknown(self):
        assert classify_token("") == TokenType.UNKNOWN

    def test_prefixed_tokens_are_api_keys(self):
        assert classify_token("sk-abc") == TokenType.API_KEY
        assert classify_token("zai-" + "x" * 300) == TokenType.API_KEY

    def test_dotted_long_token_is_web_session(self):
        assert classify_token(WEB_TOKEN) == TokenType.WEB_SESSION

    def test_very_long_token_is_web_session(self):
        assert classify_token("x" * 201) == TokenType.WEB_SESSION

    def test_short_unprefixed_token_is_api_key(self):
        assert classify_token("abcdef1234567890") == TokenType.API_KEY

    def test_mid_length_undotted_token_is_unknown(self):
        assert classify_token("x" * 150) == TokenType.UNKNOWN


class TestValidateForProvider:
    def test_web_token_for_zai_warns(self):
        warning = validate_for_provider(WEB_TOKEN, Provider.ZAI)
        assert warning is not None
        assert "web login token" in warning

    def test_api_key_for_zai_is_fine(self):
        assert validate_for_provider("sk-test1234", Provider.ZAI) is None

    def test_api_key_for_anthropic_warns(self):
        assert "API key" in validate_for_provider("sk-test1234", Provider.ANTHROPIC)

    def test_unknown_token_never_warns(self):
        assert validate_for_provider("x" * 150, Provider.ZAI) is None


class TestMaskToken:
    def test_short_tokens_use_placeholder(self):
        for token in ["", "a", "12345678"]:
            assert mask_token(token) == MASK_PLACEHOLDER
        assert len(MASK_PLACEHOLDER) == 8

    def test_long_tokens_keep_edges(self):
        assert mask_token("sk-test1234") == "sk-t...1234"
        assert mask_token("123456789") == "1234...6789"
