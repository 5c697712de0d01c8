"""Application factory for the contact service."""
from typing import Optional

from flask import Flask
from smokehouse.config import Config, init_app_config

from .extensions import limiter
from .errors import register_error_handlers
from .logging_config import configure_logging, setup_request_logging


SENTRY_ENVIRONMENTS = frozenset({"production", "staging"})


def sentry_skip_reason(app: Flask) -> Optional[str]:
    """Motivo para no activar Sentry, o None si debe activarse."""
    if not app.config.get("SENTRY_DSN"):
        return "SENTRY_DSN no configurado"

    runtime_env = app.config.get("APP_ENV", "production")
    if runtime_env in SENTRY_ENVIRONMENTS:
        return None
    if runtime_env == "development" and app.config.get("SENTRY_ENABLE_IN_DEV"):
        return None
    return f"entorno '{runtime_env}' no es production/staging"


def init_sentry(app: Flask) -> None:
    """
    Inicializa Sentry para los errores no controlados.

    Requiere el extra `monitoring`. Los campos del formulario son datos
    personales, así que nunca se envía PII.
    """
    reason = sentry_skip_reason(app)
    if reason:
        app.logger.info("Sentry no inicializado: %s", reason)
        return

    try:
        import sentry_sdk
        from sentry_sdk.integrations.flask import FlaskIntegration
    except ImportError:
        app.logger.warning("Sentry SDK no está instalado. Ejecuta: pip install 'smokehouse[monitoring]'")
        return

    environment = app.config.get("SENTRY_ENVIRONMENT") or app.config.get("APP_ENV", "production")
    traces_sample_rate = app.config.get("SENTRY_TRACES_SAMPLE_RATE", 0.1)
    try:
        sentry_sdk.init(
            dsn=app.config["SENTRY_DSN"],
            environment=environment,
            integrations=[FlaskIntegration()],
            traces_sample_rate=traces_sample_rate,
            send_default_pii=False,
        )
    except Exception:
        app.logger.error("Error al inicializar Sentry", exc_info=True)
        return

    app.logger.info(
        "Sentry inicializado [environment=%s, traces_sample_rate=%s]",
        environment,
        traces_sample_rate,
    )


def create_app(config_object=Config) -> Flask:
    """
    Fábrica de la aplicación Flask.
    Configura la app, el logging, los límites de peticiones y la API.
    """
    app = Flask(__name__, static_folder=None)

    app.config.from_object(config_object)
    init_app_config(app)

    # Configure structured logging early
    configure_logging(app)
    setup_request_logging(app)

    init_sentry(app)

    # Los contadores se guardan según RATELIMIT_STORAGE_URI (memory:// por defecto)
    limiter.init_app(app)

    register_error_handlers(app)

    from .routes import api as api_blueprint

    app.register_blueprint(api_blueprint, url_prefix="/api")

    return app
