import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

logger = logging.getLogger(__name__)

# Configurações globais de ambiente (valores padrão)
DEFAULT_PORT = 3333
DEFAULT_LOG_DIR = "./logs"
DEFAULT_TELEGRAM_API_BASE = "https://api.telegram.org"
DEFAULT_TIMEOUT_SECONDS = 10

SERVICE_NAME = "trading-webhook"

# Convenção de trigger por mensagem: o bot companheiro detecta este prefixo
WEBHOOK_PROMPT_MARKER = "WEBHOOK_PROMPT:"
TRIGGER_PATH = "/trigger"

# Prompt padrão quando o alerta não traz message/prompt
DEFAULT_PROMPT_TEMPLATE = "Run setup-check skill for {ticker} 30m"
DEFAULT_PROMPT_TICKER = "SOL"
QUOTE_CURRENCY_SUFFIXES = ("USDT",)

DEFAULT_ALERT_NAME = "TradingView Alert"
UNKNOWN_TICKER = "UNKNOWN"
PLACEHOLDER = "N/A"

METHOD_HTTP_TRIGGER = "http_trigger"
METHOD_MESSAGE_FALLBACK = "message_fallback"


def _env_bool(environ: Mapping[str, str], name: str, default: str = "false") -> bool:
    return environ.get(name, default).lower() == "true"


def _env_int(environ: Mapping[str, str], name: str, default: int) -> int:
    raw = environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Valor inválido para {name}={raw!r}, usando padrão {default}")
        return default


def _env_str(environ: Mapping[str, str], name: str, default: str = "") -> str:
    return environ.get(name, default).strip()


@dataclass(frozen=True)
class Settings:
    """Configuração imutável do processo, montada uma vez no startup."""

    port: int = DEFAULT_PORT
    debug_mode: bool = False
    telegram_bot_token: str = ""
    telegram_chat_id: str = ""
    trigger_channel_id: str = ""
    trigger_url: str = ""
    log_dir: str = DEFAULT_LOG_DIR
    telegram_api_base: str = DEFAULT_TELEGRAM_API_BASE
    telegram_parse_mode: str = ""
    telegram_timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS
    trigger_timeout_seconds: int = DEFAULT_TIMEOUT_SECONDS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        return cls(
            port=_env_int(env, "PORT", DEFAULT_PORT),
            debug_mode=_env_bool(env, "DEBUG_MODE"),
            telegram_bot_token=_env_str(env, "TELEGRAM_BOT_TOKEN"),
            telegram_chat_id=_env_str(env, "TELEGRAM_CHAT_ID"),
            trigger_channel_id=_env_str(env, "TRIGGER_CHANNEL_ID"),
            trigger_url=_env_str(env, "LOCAL_BOT_TRIGGER_URL"),
            log_dir=_env_str(env, "LOG_DIR", DEFAULT_LOG_DIR) or DEFAULT_LOG_DIR,
            telegram_api_base=_env_str(env, "TELEGRAM_API_BASE", DEFAULT_TELEGRAM_API_BASE) or DEFAULT_TELEGRAM_API_BASE,
            telegram_parse_mode=_env_str(env, "TELEGRAM_PARSE_MODE"),
            telegram_timeout_seconds=_env_int(env, "TELEGRAM_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
            trigger_timeout_seconds=_env_int(env, "TRIGGER_TIMEOUT_SECONDS", DEFAULT_TIMEOUT_SECONDS),
        )

    @property
    def telegram_configured(self) -> bool:
        return bool(self.telegram_bot_token and self.telegram_chat_id)

    @property
    def trigger_channel_configured(self) -> bool:
        return bool(self.telegram_bot_token and self.trigger_channel_id)

    @property
    def trigger_configured(self) -> bool:
        return bool(self.trigger_url)

    @property
    def trigger_endpoint(self) -> Optional[str]:
        if not self.trigger_url:
            return None
        base = self.trigger_url.rstrip('/')
        if base.endswith(TRIGGER_PATH):
            return base
        return f"{base}{TRIGGER_PATH}"
