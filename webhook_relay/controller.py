import json
import logging
import threading
from typing import Any, Dict, Optional

from flask import Flask, request

from .constants import SERVICE_NAME, Settings
from .relay import RelayDispatcher
from .services import TelegramNotifier
from .storage import AlertLogWriter
from .utils import parse_alert_body, utc_now_iso

logger = logging.getLogger(__name__)

# Análise fictícia usada pelo endpoint /test
TEST_ANALYSIS = {
    'setup': {
        'type': 'TEST SHORT',
        'entry': '3040',
        'stop': '3072',
        'tp1': '3008',
        'tp2': '2975',
        'riskReward': '1:1.91',
        'winRate': '57.1',
    },
    'indicators': {
        'jewelFast': '68.8',
        'jewelSlow': '75.2',
        'mgmMomentum': '-0.5',
        'adx': '26.7',
    },
    'recommendation': 'TEST: This is a test notification. Setup would be valid if MGM < 0.',
}

ENDPOINTS = (
    ('GET', '/', 'Health check'),
    ('GET', '/health', 'Render health check'),
    ('POST', '/webhook', 'TradingView webhook'),
    ('POST', '/test', 'Test endpoint'),
)


def run_in_background(target, *args, name: Optional[str] = None) -> threading.Thread:
    """Executa target numa thread daemon; exceções são logadas e nunca propagam."""

    def _runner():
        try:
            target(*args)
        except Exception:
            logger.exception(f"Erro no processamento em background ({name or target.__name__})")

    thread = threading.Thread(target=_runner, name=name, daemon=True)
    thread.start()
    return thread


def create_app(settings: Optional[Settings] = None,
               notifier: Optional[TelegramNotifier] = None,
               dispatcher: Optional[RelayDispatcher] = None,
               log_writer: Optional[AlertLogWriter] = None) -> Flask:
    settings = settings or Settings.from_env()
    notifier = notifier or TelegramNotifier(settings)
    dispatcher = dispatcher or RelayDispatcher(settings, notifier)
    log_writer = log_writer or AlertLogWriter(settings.log_dir)

    app = Flask(__name__)

    def process_alert(alert_data: Dict[str, Any]):
        relay_result = dispatcher.relay(alert_data)
        try:
            log_path = log_writer.persist(alert_data, relay_result)
        except OSError:
            logger.exception("Webhook: falha ao salvar log do alerta")
            return
        logger.info(f"Webhook: alerta processado (relayed={relay_result.get('relayed')}, method={relay_result.get('method')}, log={log_path})")

    @app.route('/', methods=['GET'])
    def index():
        return {
            'status': 'ok',
            'service': SERVICE_NAME,
            'timestamp': utc_now_iso(),
            'telegram_configured': settings.telegram_configured,
            'trigger_channel_configured': settings.trigger_channel_configured,
            'trigger_configured': settings.trigger_configured,
            'token_length': len(settings.telegram_bot_token),
            'chat_id_length': len(settings.telegram_chat_id),
        }, 200

    @app.route('/health', methods=['GET'])
    def health():
        return {'status': 'healthy'}, 200

    @app.route('/webhook', methods=['POST'])
    def webhook():
        raw_body = request.get_data(as_text=True)
        alert_data = parse_alert_body(raw_body)
        alert_data['receivedAt'] = utc_now_iso()
        logger.info(f"Webhook: alerta recebido: {json.dumps(alert_data)[:500]}")

        # Responde já; relay e log seguem em background
        run_in_background(process_alert, alert_data, name=f"relay-{alert_data.get('ticker', 'alert')}")
        return {'received': True, 'timestamp': alert_data['receivedAt']}, 200

    @app.route('/test', methods=['POST'])
    def test():
        body = request.get_json(silent=True)
        if not isinstance(body, dict):
            body = {}
        test_alert = {
            'ticker': body.get('ticker') or 'ETH',
            'condition': 'TEST_ALERT',
            'price': body.get('price') or '3040',
            'time': utc_now_iso(),
        }
        logger.info(f"Test: simulando alerta {test_alert}")

        sent = notifier.send_alert_notification(test_alert, TEST_ANALYSIS)
        return {'test': True, 'telegram_sent': sent, 'alert': test_alert}, 200

    logger.info(f"Servidor configurado (porta {settings.port})")
    logger.info(f"Telegram configurado: {settings.telegram_configured}")
    logger.info(f"Trigger HTTP configurado: {settings.trigger_configured}")
    logger.info("Endpoints:")
    for method, path, label in ENDPOINTS:
        logger.info(f"  - {method:<5}{path:<9}- {label}")

    return app
