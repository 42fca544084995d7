import logging
from typing import Any, Dict, List, Optional, Tuple

import requests

from .constants import (
    DEFAULT_PROMPT_TEMPLATE,
    DEFAULT_PROMPT_TICKER,
    METHOD_HTTP_TRIGGER,
    METHOD_MESSAGE_FALLBACK,
    Settings,
)
from .formatters import format_relay_notice, format_trigger_message
from .services import TelegramNotifier
from .utils import pick_first_nonempty, strip_quote_suffix

logger = logging.getLogger(__name__)


def resolve_ticker(alert_data: Dict[str, Any]) -> str:
    ticker = pick_first_nonempty(alert_data.get('ticker')) or DEFAULT_PROMPT_TICKER
    return strip_quote_suffix(ticker)


def build_prompt(alert_data: Dict[str, Any]) -> str:
    """message/prompt do alerta; senão um prompt padrão montado a partir do ticker."""
    prompt = pick_first_nonempty(alert_data.get('message'), alert_data.get('prompt'))
    if prompt:
        return prompt
    return DEFAULT_PROMPT_TEMPLATE.format(ticker=resolve_ticker(alert_data))


class RelayDispatcher:
    """
    Encaminha o alerta para o processo companheiro.

    1. Trigger HTTP direto (se configurado); em 2xx envia um aviso informativo.
    2. Fallback: mensagem com o marcador WEBHOOK_PROMPT: no chat principal
       (e no trigger channel, se houver).
    3. Se ambos falharem, relayed=False com os erros agregados.

    Nenhuma exceção escapa de relay().
    """

    def __init__(self, settings: Settings, notifier: TelegramNotifier):
        self.settings = settings
        self.notifier = notifier
        self.trigger_endpoint = settings.trigger_endpoint
        self.timeout = settings.trigger_timeout_seconds

    def trigger_http(self, prompt: str, ticker: str, alert_data: Dict[str, Any]) -> Tuple[bool, Optional[str], Any]:
        """Retorna (aceito, erro, corpo_da_resposta)."""
        if not self.trigger_endpoint:
            logger.info("Trigger: LOCAL_BOT_TRIGGER_URL não configurado, pulando trigger direto")
            return False, 'not_configured', None

        body = {'prompt': prompt, 'message': prompt, 'ticker': ticker, 'alert': alert_data}
        try:
            logger.info(f"Trigger: chamando {self.trigger_endpoint} para {ticker}")
            resp = requests.post(self.trigger_endpoint, json=body, timeout=self.timeout)
        except requests.RequestException as exc:
            logger.warning(f"Trigger: erro ao chamar bot local: {exc}")
            return False, str(exc), None

        try:
            data = resp.json()
        except ValueError:
            data = resp.text or None
        logger.debug(f"Trigger: resposta {resp.status_code}: {data}")

        if 200 <= resp.status_code < 300:
            return True, None, data
        return False, f"HTTP {resp.status_code}", data

    def send_fallback(self, prompt: str, alert_data: Dict[str, Any]) -> bool:
        message = format_trigger_message(prompt, alert_data)
        sent = self.notifier.send_message(message)
        if self.settings.trigger_channel_id:
            # broadcast no canal de trigger; conta como entregue se qualquer destino aceitou
            sent = self.notifier.send_to_trigger_channel(message) or sent
        return sent

    def relay(self, alert_data: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return self._relay(alert_data)
        except Exception as exc:
            logger.exception("Relay: erro inesperado")
            return {'relayed': False, 'error': f"unexpected: {exc}"}

    def _relay(self, alert_data: Dict[str, Any]) -> Dict[str, Any]:
        prompt = build_prompt(alert_data)
        ticker = resolve_ticker(alert_data)
        errors: List[str] = []

        accepted, error, response = self.trigger_http(prompt, ticker, alert_data)
        if accepted:
            self.notifier.send_message(format_relay_notice(prompt, ticker, alert_data))
            logger.info(f"Relay: trigger HTTP aceito para {ticker}, prompt: {prompt[:50]!r}")
            result = {'relayed': True, 'prompt': prompt, 'ticker': ticker, 'method': METHOD_HTTP_TRIGGER}
            if response is not None:
                result['trigger_response'] = response
            return result
        errors.append(f"{METHOD_HTTP_TRIGGER}: {error}")

        if self.send_fallback(prompt, alert_data):
            logger.info(f"Relay: mensagem de fallback enviada, prompt: {prompt[:50]!r}")
            return {'relayed': True, 'prompt': prompt, 'ticker': ticker, 'method': METHOD_MESSAGE_FALLBACK}
        errors.append(f"{METHOD_MESSAGE_FALLBACK}: Telegram send failed")

        logger.error(f"Relay: falha ao encaminhar alerta ({'; '.join(errors)})")
        return {
            'relayed': False,
            'prompt': prompt,
            'ticker': ticker,
            'method': METHOD_MESSAGE_FALLBACK,
            'error': '; '.join(errors),
        }
