from enum import Enum
from typing import Mapping


class Provider(str, Enum):
    ANTHROPIC = "anthropic"
    ZAI = "zai"
    CUSTOM = "custom"
    UNKNOWN = "unknown"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    Provider.ANTHROPIC: "Anthropic",
    Provider.ZAI: "Z.AI",
    Provider.CUSTOM: "Custom",
    Provider.UNKNOWN: "Unknown",
}

AUTH_TOKEN_KEY = "ANTHROPIC_AUTH_TOKEN"
BASE_URL_KEY = "ANTHROPIC_BASE_URL"
TIMEOUT_KEY = "API_TIMEOUT_MS"
OPUS_MODEL_KEY = "ANTHROPIC_DEFAULT_OPUS_MODEL"
SONNET_MODEL_KEY = "ANTHROPIC_DEFAULT_SONNET_MODEL"
HAIKU_MODEL_KEY = "ANTHROPIC_DEFAULT_HAIKU_MODEL"

ZAI_MARKER = "z.ai"

# ANTHROPIC_AUTH_TOKEN 两边共用，不属于 Z.AI 专属键
ZAI_ENV_KEYS = frozenset({
    BASE_URL_KEY,
    TIMEOUT_KEY,
    OPUS_MODEL_KEY,
    SONNET_MODEL_KEY,
    HAIKU_MODEL_KEY,
})


def is_zai_key(key: str) -> bool:
    return key in ZAI_ENV_KEYS


def detect_provider(env: Mapping[str, str]) -> Provider:
    """根据 ANTHROPIC_BASE_URL 判断当前配置属于哪个提供商"""
    if not env:
        return Provider.UNKNOWN

    base_url = env.get(BASE_URL_KEY, "")

    if ZAI_MARKER in base_url:
        return Provider.ZAI

    if not base_url:
        return Provider.ANTHROPIC

    return Provider.CUSTOM
