import os
from dataclasses import dataclass, field
from typing import List, Optional


DEEPSEEK_BASE_URL = "https://api.deepseek.com"
OPENAI_BASE_URL = "https://api.openai.com/v1"
DEEPSEEK_DEFAULT_MODEL = "deepseek-chat"
OPENAI_DEFAULT_MODEL = "gpt-3.5-turbo"


def _env_str(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except Exception:
        return default


def _env_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, str(default)))
    except Exception:
        return default


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 3001
    # "deepseek" | "openai" | "mock" | None (no credentials)
    chat_provider: Optional[str] = None
    api_key: Optional[str] = None
    base_url: Optional[str] = None
    model: Optional[str] = None
    analysis_provider: str = "random"
    http_timeout_seconds: float = 60.0
    max_upload_bytes: int = 10 * 1024 * 1024
    cors_allow_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"

    @property
    def credentials_present(self) -> bool:
        return self.chat_provider is not None


def _resolve_chat_provider(mode: str):
    """Return (provider, api_key, base_url, model) for the mentor chat client.

    DEEPSEEK_API_KEY wins over OPENAI_API_KEY when both are set. OPENAI_BASE_URL
    and OPENAI_MODEL override the defaults of whichever provider is selected.
    """
    if mode in ("none", "off", "fallback"):
        return None, None, None, None
    base_override = _env_str("OPENAI_BASE_URL") or None
    model_override = _env_str("OPENAI_MODEL") or None
    if mode in ("mock", "test"):
        return "mock", None, None, model_override or "mock-mentor-1"

    deepseek_key = _env_str("DEEPSEEK_API_KEY")
    openai_key = _env_str("OPENAI_API_KEY")
    if deepseek_key:
        return (
            "deepseek",
            deepseek_key,
            base_override or DEEPSEEK_BASE_URL,
            model_override or DEEPSEEK_DEFAULT_MODEL,
        )
    if openai_key:
        return (
            "openai",
            openai_key,
            base_override or OPENAI_BASE_URL,
            model_override or OPENAI_DEFAULT_MODEL,
        )
    return None, None, None, None


def load_settings() -> Settings:
    mode = (_env_str("MENTOR_PROVIDER") or "auto").lower()
    provider, api_key, base_url, model = _resolve_chat_provider(mode)
    origins = [o.strip() for o in _env_str("CORS_ALLOW_ORIGINS", "*").split(",") if o.strip()]
    return Settings(
        host=_env_str("HOST") or "0.0.0.0",
        port=_env_int("PORT", 3001),
        chat_provider=provider,
        api_key=api_key,
        base_url=base_url,
        model=model,
        analysis_provider=(_env_str("ANALYSIS_PROVIDER") or "random").lower(),
        http_timeout_seconds=_env_float("AI_HTTP_TIMEOUT_SECONDS", 60.0),
        max_upload_bytes=_env_int("MAX_UPLOAD_BYTES", 10 * 1024 * 1024),
        cors_allow_origins=origins or ["*"],
        log_level=(_env_str("LOG_LEVEL") or "INFO").upper(),
    )
