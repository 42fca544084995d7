import logging
from typing import Any, Dict, Optional

import requests

from .constants import Settings
from .formatters import format_analysis_message

logger = logging.getLogger(__name__)


class TelegramNotifier:
    """Cliente mínimo do Bot API do Telegram (sendMessage)."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.token = settings.telegram_bot_token
        self.chat_id = settings.telegram_chat_id
        self.trigger_channel_id = settings.trigger_channel_id
        self.timeout = settings.telegram_timeout_seconds
        self.parse_mode = settings.telegram_parse_mode or None

    def _send_url(self) -> str:
        return f"{self.settings.telegram_api_base.rstrip('/')}/bot{self.token}/sendMessage"

    def send_to_chat(self, chat_id: Optional[str], text: str) -> bool:
        """
        Envia texto para um chat. Retorna True somente quando a API responde ok.
        Nunca lança: falta de configuração, erro de rede ou ok=false viram False.
        """
        if not self.token or not chat_id:
            logger.warning("Telegram: bot token ou chat id não configurado, mensagem não enviada")
            return False

        payload: Dict[str, Any] = {
            "chat_id": chat_id,
            "text": text,
            "disable_web_page_preview": True,
        }
        if self.parse_mode:
            payload["parse_mode"] = self.parse_mode

        try:
            logger.debug(f"Telegram: enviando mensagem para chat {chat_id} ({len(text)} chars)")
            resp = requests.post(self._send_url(), json=payload, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning(f"Telegram: erro de rede ao enviar para {chat_id}: {exc}")
            return False

        try:
            data = resp.json()
        except ValueError as exc:
            logger.warning(f"Telegram: resposta inválida (status {resp.status_code}): {exc}")
            return False

        if isinstance(data, dict) and data.get('ok'):
            logger.info(f"Telegram: mensagem enviada para {chat_id}")
            return True

        description = data.get('description') if isinstance(data, dict) else data
        logger.warning(f"Telegram: falha ao enviar para {chat_id}: {description}")
        return False

    def send_message(self, text: str) -> bool:
        return self.send_to_chat(self.chat_id, text)

    def send_to_trigger_channel(self, text: str) -> bool:
        if not self.trigger_channel_id:
            logger.info("Telegram: trigger channel não configurado, ignorando")
            return False
        logger.debug(f"Telegram: enviando para trigger channel {self.trigger_channel_id}")
        return self.send_to_chat(self.trigger_channel_id, text)

    def send_alert_notification(self, alert_data: Dict[str, Any], analysis_result: Optional[Dict[str, Any]] = None) -> bool:
        return self.send_message(format_analysis_message(alert_data, analysis_result))
