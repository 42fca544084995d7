import json
import logging
import os
from typing import Any, Dict, Optional

from .constants import UNKNOWN_TICKER
from .utils import filesystem_timestamp, sanitize_filename_part, utc_now_iso

logger = logging.getLogger(__name__)


class AlertLogWriter:
    """
    Grava um arquivo JSON por alerta recebido: {timestamp, alert, analysis}.
    Nome: <timestamp sem ':' e '.'>_<ticker>_analysis.json, com sufixo -N
    quando já existe um arquivo com o mesmo nome.
    """

    def __init__(self, log_dir: str):
        self.log_dir = os.path.abspath(log_dir)
        # Garante que o diretório existe (uma vez, no startup)
        os.makedirs(self.log_dir, exist_ok=True)

    def build_filename(self, timestamp: str, ticker: Optional[str], attempt: int = 0) -> str:
        suffix = f"-{attempt}" if attempt else ""
        return f"{filesystem_timestamp(timestamp)}_{sanitize_filename_part(ticker or UNKNOWN_TICKER)}{suffix}_analysis.json"

    def persist(self, alert_data: Dict[str, Any], analysis_result: Optional[Dict[str, Any]]) -> str:
        """Grava a entrada e retorna o caminho. Erros de escrita (OSError) sobem para o chamador."""
        timestamp = utc_now_iso()
        entry = {
            'timestamp': timestamp,
            'alert': alert_data,
            'analysis': analysis_result,
        }
        content = json.dumps(entry, indent=2)

        attempt = 0
        while True:
            filepath = os.path.join(self.log_dir, self.build_filename(timestamp, alert_data.get('ticker'), attempt))
            try:
                # 'x' falha se o arquivo já existe; nunca sobrescreve outro alerta
                with open(filepath, 'x', encoding='utf-8') as f:
                    f.write(content)
                break
            except FileExistsError:
                attempt += 1

        logger.info(f"Log salvo em {filepath}")
        return filepath

    def load(self, filepath: str) -> Dict[str, Any]:
        with open(filepath, 'r', encoding='utf-8') as f:
            return json.load(f)
