import json
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from .constants import PLACEHOLDER, QUOTE_CURRENCY_SUFFIXES, UNKNOWN_TICKER

# Limite do trecho do ticker no nome do arquivo (NAME_MAX costuma ser 255)
MAX_FILENAME_PART = 64


def _is_meaningful(value):
    if value is None:
        return False
    return str(value).strip() != ""


def pick_first_nonempty(*candidates):
    for c in candidates:
        if _is_meaningful(c):
            return str(c).strip()
    return None


def or_placeholder(value, placeholder: str = PLACEHOLDER) -> str:
    if not _is_meaningful(value):
        return placeholder
    return str(value)


def utc_now_iso(now: Optional[datetime] = None) -> str:
    """ISO-8601 em UTC com milissegundos e sufixo Z (ex: 2025-01-02T03:04:05.678Z)."""
    now = now or datetime.now(timezone.utc)
    return now.astimezone(timezone.utc).isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def filesystem_timestamp(iso_timestamp: str) -> str:
    return re.sub(r'[:.]', '-', iso_timestamp)


def sanitize_filename_part(value) -> str:
    cleaned = re.sub(r'[^A-Za-z0-9_\-]+', '-', str(value or '').strip())[:MAX_FILENAME_PART].strip('-')
    return cleaned or UNKNOWN_TICKER


def strip_quote_suffix(ticker: str) -> str:
    ticker = str(ticker).strip()
    for suffix in QUOTE_CURRENCY_SUFFIXES:
        if ticker.upper().endswith(suffix) and len(ticker) > len(suffix):
            return ticker[: -len(suffix)]
    return ticker


def parse_alert_body(raw) -> Dict[str, Any]:
    """
    Converte o corpo recebido em dict de alerta.
    Aceita dict já decodificado ou texto; texto que não for um objeto JSON
    vira {"message": <texto>}.
    """
    if isinstance(raw, dict):
        return dict(raw)
    if isinstance(raw, bytes):
        raw = raw.decode('utf-8', errors='replace')
    text = '' if raw is None else str(raw)
    try:
        data = json.loads(text)
    except ValueError:
        return {'message': text}
    if isinstance(data, dict):
        return data
    return {'message': text}
