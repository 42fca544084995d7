import logging

from webhook_relay.constants import Settings
from webhook_relay.controller import create_app


settings = Settings.from_env()

logging.basicConfig(
    level=logging.DEBUG if settings.debug_mode else logging.INFO,
    format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
)

app = create_app(settings)

if __name__ == '__main__':
    # use_reloader=False evita iniciar o app (e os logs de startup) duas vezes
    app.run(host='0.0.0.0', port=settings.port, debug=settings.debug_mode, use_reloader=False)
