"""Application configuration values."""
import os
import sys
from typing import Mapping, Optional, Sequence

from dotenv import load_dotenv


# --- Cargar variables de entorno ---
load_dotenv()

_ENV_ALIASES = {
    "dev": "development",
    "development": "development",
    "prod": "production",
    "production": "production",
    "staging": "staging",
    "testing": "test",
    "tests": "test",
    "pytest": "test",
    "test": "test",
}

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

DEFAULT_MAX_CONTENT_LENGTH = 10 * 1024


def _normalize_env(value: str) -> str:
    key = value.strip().lower()
    return _ENV_ALIASES.get(key, key) or "production"


def _parse_flag(value):
    """Convierte un valor de entorno en bool, o None si no es reconocible."""
    if isinstance(value, bool):
        return value
    normalized = str(value or "").strip().lower()
    if normalized in _TRUTHY:
        return True
    if normalized in _FALSY:
        return False
    return None


def _env_int(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, str(default)))
    except ValueError:
        return default


def _env_rate(name: str, default: float) -> float:
    """Lee una proporción entre 0 y 1."""
    try:
        value = float(os.getenv(name, str(default)))
    except ValueError:
        value = default
    return max(0.0, min(1.0, value))


def detect_runtime_env(
    environ: Optional[Mapping[str, str]] = None,
    argv: Optional[Sequence[str]] = None,
) -> str:
    """
    Determina el entorno actual (production, development, staging, test).

    Orden: APP_ENV / FLASK_ENV / ENV explícitos, ejecución bajo pytest,
    FLASK_DEBUG activo y, por último, production.
    """
    environ = os.environ if environ is None else environ
    argv = sys.argv if argv is None else argv

    for name in ("APP_ENV", "FLASK_ENV", "ENV"):
        explicit = (environ.get(name) or "").strip()
        if explicit:
            return _normalize_env(explicit)

    if environ.get("PYTEST_CURRENT_TEST") or any("pytest" in arg for arg in argv):
        return "test"

    if _parse_flag(environ.get("FLASK_DEBUG")):
        return "development"

    return "production"


def init_app_config(app) -> None:
    """Deriva el entorno, los flags y los límites a partir de app.config."""
    configured_env = str(app.config.get("APP_ENV") or app.config.get("ENV") or "").strip()
    runtime_env = _normalize_env(configured_env) if configured_env else detect_runtime_env()
    app.config["APP_ENV"] = runtime_env
    app.config["ENV"] = runtime_env

    app.config.setdefault("TESTING", runtime_env == "test")
    app.config.setdefault("DEBUG", runtime_env == "development")

    # None: los detalles de errores solo se exponen en development
    expose = _parse_flag(app.config.get("EXPOSE_ERROR_DETAILS"))
    app.config["EXPOSE_ERROR_DETAILS"] = runtime_env == "development" if expose is None else expose

    app.config["TRUST_PROXY_HEADERS"] = bool(_parse_flag(app.config.get("TRUST_PROXY_HEADERS")))

    try:
        max_length = int(app.config.get("MAX_CONTENT_LENGTH") or DEFAULT_MAX_CONTENT_LENGTH)
    except (TypeError, ValueError):
        max_length = DEFAULT_MAX_CONTENT_LENGTH
    app.config["MAX_CONTENT_LENGTH"] = max(1, max_length)

    enabled = _parse_flag(app.config.get("RATELIMIT_ENABLED"))
    app.config["RATELIMIT_ENABLED"] = True if enabled is None else enabled


class Config:
    _runtime = detect_runtime_env()
    TESTING = _runtime == "test"
    ENV = _runtime
    DEBUG = _runtime == "development"

    # --- servidor de desarrollo ---
    PORT = _env_int("PORT", 3000)

    # --- límites de petición ---
    MAX_CONTENT_LENGTH = _env_int("MAX_CONTENT_LENGTH", DEFAULT_MAX_CONTENT_LENGTH)

    # Solo confiar en X-Forwarded-For / X-Real-IP detrás de un proxy conocido
    TRUST_PROXY_HEADERS = bool(_parse_flag(os.getenv("TRUST_PROXY_HEADERS")))

    # None = auto-detect (solo en development)
    EXPOSE_ERROR_DETAILS = _parse_flag(os.getenv("EXPOSE_ERROR_DETAILS"))

    # --- formulario de contacto ---
    CONTACT_SUCCESS_MESSAGE = "Thank you for your message! We will get back to you soon."

    # --- Rate Limiting Configuration ---
    RATELIMIT_ENABLED = os.getenv("RATELIMIT_ENABLED", "true")
    RATELIMIT_STORAGE_URI = os.getenv("RATELIMIT_STORAGE_URI", "memory://")
    RATELIMIT_STRATEGY = "fixed-window"
    RATELIMIT_HEADERS_ENABLED = True
    RATELIMIT_GENERAL = os.getenv("RATELIMIT_GENERAL", "100 per 15 minutes")
    RATELIMIT_GENERAL_MESSAGE = "Too many requests from this IP, please try again later."
    RATELIMIT_CONTACT = os.getenv("RATELIMIT_CONTACT", "5 per hour")

    # --- Logging Configuration ---
    LOG_LEVEL = os.getenv("LOG_LEVEL")  # None = auto-detect based on APP_ENV
    LOG_JSON_ENABLED = _parse_flag(os.getenv("LOG_JSON_ENABLED"))  # None = auto-detect

    # --- Sentry Configuration ---
    SENTRY_DSN = os.getenv("SENTRY_DSN")
    SENTRY_ENVIRONMENT = os.getenv("SENTRY_ENVIRONMENT")  # None = auto-detect from APP_ENV
    # 1.0 = 100% of transactions, 0.1 = 10% of transactions
    SENTRY_TRACES_SAMPLE_RATE = _env_rate("SENTRY_TRACES_SAMPLE_RATE", 0.1)
    SENTRY_ENABLE_IN_DEV = bool(_parse_flag(os.getenv("SENTRY_ENABLE_IN_DEV")))
