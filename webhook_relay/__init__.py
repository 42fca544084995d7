"""Relay de alertas do TradingView -> bot companheiro (trigger HTTP / Telegram).

Este pacote contém:
- constants: variáveis de ambiente, constantes do protocolo e Settings
- utils: timestamps, placeholders e parsing do corpo recebido
- formatters: formatação das mensagens (análise, marcador, aviso)
- services: integração com o Bot API do Telegram
- relay: despacho do alerta (trigger HTTP com fallback por mensagem)
- storage: gravação de um arquivo JSON por alerta
- controller: criação do Flask app e endpoints
"""
