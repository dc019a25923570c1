from enum import Enum
from typing import Optional

from .provider import Provider

API_KEY_PREFIXES = ("sk-", "zai-")
MASK_PLACEHOLDER = "********"


class TokenType(str, Enum):
    API_KEY = "api_key"
    WEB_SESSION = "web_session"
    UNKNOWN = "unknown"


def classify_token(token: str) -> TokenType:
    """根据格式粗略判断凭据类型：API key 或网页登录 token"""
    if not token:
        return TokenType.UNKNOWN

    if token.startswith(API_KEY_PREFIXES):
        return TokenType.API_KEY

    # 网页登录 token 通常是带点分隔的 JWT 风格长串
    if token.count(".") >= 2 and len(token) > 100:
        return TokenType.WEB_SESSION

    if len(token) > 200:
        return TokenType.WEB_SESSION

    if len(token) < 100:
        return TokenType.API_KEY

    return TokenType.UNKNOWN


def validate_for_provider(token: str, provider: Provider) -> Optional[str]:
    """凭据类型与目标提供商不匹配时返回提示信息，只提示不阻断"""
    token_type = classify_token(token)

    if provider == Provider.ZAI and token_type == TokenType.WEB_SESSION:
        return ("Token looks like an Anthropic web login token; "
                "Z.AI typically uses API keys (sk-xxx or zai-xxx format)")

    if provider == Provider.ANTHROPIC and token_type == TokenType.API_KEY:
        return ("Token looks like an API key, not a web login token; "
                "Anthropic web login uses longer JWT-style tokens")

    return None


def mask_token(token: str) -> str:
    if len(token) <= 8:
        return MASK_PLACEHOLDER

    visible_chars = 4
    return token[:visible_chars] + "..." + token[-visible_chars:]


def describe_token_type(token_type: TokenType) -> str:
    return {
        TokenType.API_KEY: "API key",
        TokenType.WEB_SESSION: "Web login token",
        TokenType.UNKNOWN: "Unknown",
    }[token_type]
