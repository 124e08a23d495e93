"""Flask entrypoint for the channel analytics API."""

from __future__ import annotations

import logging

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from web.config import AppConfig
from web.db import init_db
from web.routes.api import api_bp



def create_app() -> Flask:
    app = Flask(__name__)

    config = AppConfig.from_env()
    app.config.update(config.to_flask_config())
    app.logger.setLevel(getattr(logging, app.config["LOG_LEVEL"], logging.INFO))

    init_db(app)

    app.register_blueprint(api_bp)

    app.wsgi_app = ProxyFix(app.wsgi_app, x_proto=1, x_host=1)
    return app


app = create_app()


if __name__ == "__main__":
    app.run(host="0.0.0.0", port=8080, debug=app.config.get("APP_ENV") != "production")
