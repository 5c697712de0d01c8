import logging
import os
import sys
import pathlib

import pytest

# ---------- PATH raíz del repo ----------
THIS = pathlib.Path(__file__).resolve()
ROOT = THIS.parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from smokehouse.app import create_app
from smokehouse.app.extensions import limiter
from smokehouse.app.logging_config import ContextualJsonFormatter, DevelopmentFormatter
from smokehouse.config import Config


APP_FORMATTERS = (ContextualJsonFormatter, DevelopmentFormatter)

VALID_PAYLOAD = {
    "name": "Jane Doe",
    "email": "jane@example.com",
    "message": "Great ribs!",
}


# ---------- Config de pruebas ----------
class TestConfig(Config):
    __test__ = False

    TESTING = True
    APP_ENV = "test"
    LOG_LEVEL = None  # Auto-detect per APP_ENV during tests
    LOG_JSON_ENABLED = None
    EXPOSE_ERROR_DETAILS = None
    TRUST_PROXY_HEADERS = False
    # Rate limiting - límites muy altos para tests (no queremos que interfieran)
    RATELIMIT_ENABLED = True
    RATELIMIT_STORAGE_URI = "memory://"
    RATELIMIT_GENERAL = "1000 per minute"
    RATELIMIT_CONTACT = "100 per minute"


@pytest.fixture(scope="session", autouse=True)
def _clean_env():
    """
    Limpia variables de entorno que cambiarían el comportamiento de la app.
    """
    watched = (
        "APP_ENV",
        "RATELIMIT_STORAGE_URI",
        "TRUST_PROXY_HEADERS",
        "EXPOSE_ERROR_DETAILS",
        "SENTRY_DSN",
    )
    original = {name: os.environ.get(name) for name in watched}
    for name in watched:
        os.environ.pop(name, None)

    os.environ["APP_ENV"] = "test"

    yield

    for name, value in original.items():
        if value is None:
            os.environ.pop(name, None)
        else:
            os.environ[name] = value


@pytest.fixture()
def make_app():
    """Fábrica de apps con overrides de configuración y contadores limpios."""
    loggers = [logging.getLogger(), logging.getLogger("smokehouse.app")]
    original_handlers = [list(logger.handlers) for logger in loggers]

    def _mk(**overrides):
        config = type("OverrideConfig", (TestConfig,), overrides)
        app = create_app(config)
        if app.config["RATELIMIT_ENABLED"]:
            limiter.reset()
        return app

    yield _mk

    # configure_logging añade un handler por app; se retiran al terminar
    for logger, handlers in zip(loggers, original_handlers):
        for handler in list(logger.handlers):
            if handler not in handlers and isinstance(handler.formatter, APP_FORMATTERS):
                logger.removeHandler(handler)


@pytest.fixture()
def app(make_app):
    return make_app()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def valid_payload():
    return dict(VALID_PAYLOAD)
