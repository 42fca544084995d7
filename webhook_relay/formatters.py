from typing import Any, Dict, Optional

from .constants import DEFAULT_ALERT_NAME, UNKNOWN_TICKER, WEBHOOK_PROMPT_MARKER
from .utils import or_placeholder, pick_first_nonempty, utc_now_iso

# (chave, rótulo) dos indicadores exibidos na ordem fixa da mensagem
INDICATOR_FIELDS = (
    ('jewelFast', 'Jewel Fast'),
    ('jewelSlow', 'Jewel Slow'),
    ('mgmMomentum', 'MGM Momentum'),
    ('adx', 'ADX'),
)


def _as_mapping(value) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _is_present(value) -> bool:
    # objeto vazio conta como presente: a seção sai com N/A em cada campo
    return isinstance(value, dict) or bool(value)


def format_setup_section(setup: Dict[str, Any]):
    setup = _as_mapping(setup)
    lines = [
        "✅ *SETUP FOUND*",
        "",
        f"📈 *Type:* {or_placeholder(setup.get('type'))}",
        f"🎯 *Entry:* ${or_placeholder(setup.get('entry'))}",
        f"🛑 *Stop:* ${or_placeholder(setup.get('stop'))}",
        f"💎 *TP1:* ${or_placeholder(setup.get('tp1'))}",
        f"💎 *TP2:* ${or_placeholder(setup.get('tp2'))}",
    ]
    # TP3 só aparece quando o setup traz o terceiro alvo
    if setup.get('tp3') not in (None, ''):
        lines.append(f"💎 *TP3:* ${or_placeholder(setup.get('tp3'))}")
    lines.append(f"📊 *R:R:* {or_placeholder(setup.get('riskReward'))}")
    lines.append(f"📈 *Win Rate:* {or_placeholder(setup.get('winRate'))}%")
    return lines


def format_indicator_section(indicators: Dict[str, Any]):
    indicators = _as_mapping(indicators)
    lines = ["", "📉 *Indicators:*"]
    for key, label in INDICATOR_FIELDS:
        lines.append(f"• {label}: {or_placeholder(indicators.get(key))}")
    return lines


def format_analysis_message(alert_data: Dict[str, Any], analysis_result: Optional[Dict[str, Any]] = None, now: Optional[str] = None) -> str:
    """
    Monta a mensagem legível do alerta.

    Ordem fixa: cabeçalho -> setup (ou aviso de "no setup") -> indicadores
    -> recomendação. Sem analysis_result, apenas o aviso de análise pendente.
    Campos ausentes viram N/A; a formatação nunca falha por falta de dados.
    """
    alert_data = _as_mapping(alert_data)
    timestamp = now or utc_now_iso()

    parts = [
        f"🚨 *TRADING ALERT: {or_placeholder(alert_data.get('ticker'), UNKNOWN_TICKER)}*",
        "",
        f"📊 *Condition:* {or_placeholder(alert_data.get('condition'), 'ALERT')}",
        f"💰 *Price:* ${or_placeholder(alert_data.get('price'))}",
        f"🕐 *Time:* {timestamp}",
        "",
    ]

    if analysis_result is None:
        parts.append("⏳ Analysis pending...")
        return "\n".join(parts) + "\n"

    analysis_result = _as_mapping(analysis_result)
    if _is_present(analysis_result.get('setup')):
        parts.extend(format_setup_section(analysis_result['setup']))
    else:
        parts.append("⚠️ *NO SETUP* - Mixed signals")

    if _is_present(analysis_result.get('indicators')):
        parts.extend(format_indicator_section(analysis_result['indicators']))

    recommendation = analysis_result.get('recommendation')
    if recommendation:
        parts.extend(["", "💡 *Recommendation:*", str(recommendation)])

    return "\n".join(parts) + "\n"


def _alert_footer(alert_data: Dict[str, Any]) -> str:
    alert_name = pick_first_nonempty(alert_data.get('alert')) or DEFAULT_ALERT_NAME
    alert_time = pick_first_nonempty(alert_data.get('time')) or utc_now_iso()
    return f"📊 Alert: {alert_name}\n🕐 Time: {alert_time}"


def format_trigger_message(prompt: str, alert_data: Dict[str, Any]) -> str:
    """Mensagem de fallback com o marcador que o bot companheiro detecta."""
    return f"{WEBHOOK_PROMPT_MARKER}{prompt}\n\n---\n{_alert_footer(_as_mapping(alert_data))}"


def format_relay_notice(prompt: str, ticker: str, alert_data: Dict[str, Any]) -> str:
    # Aviso informativo: não pode conter o marcador, senão dispara a análise de novo
    return f"🤖 Analysis triggered for {ticker}\n📝 Prompt: {prompt}\n\n---\n{_alert_footer(_as_mapping(alert_data))}"
