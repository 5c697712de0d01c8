"""
Logging estructurado del servicio de contacto.

- JSON (python-json-logger) en producción, para agregadores de logs.
- Texto coloreado en development y test.
- Un request_id por petición, devuelto en la cabecera X-Request-ID.

Ningún registro lleva los valores del formulario: SubmissionRedactionFilter
va colgado del logger de la app y de su handler, y sustituye por REDACTED
las claves de `extra` que podrían transportarlos y las direcciones de email
que aparezcan en el texto del mensaje.
"""

import logging
import re
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from flask import Flask, g, has_request_context, request
from pythonjsonlogger.json import JsonFormatter

from .services.request_utils import get_client_ip

REQUEST_ID_HEADER = "X-Request-ID"
REDACTED = "[redacted]"

# `name` y `message` son atributos reservados de LogRecord, de ahí los prefijos
FORM_VALUE_KEYS = frozenset(
    {"email", "contact_name", "contact_email", "contact_message", "form", "payload"}
)

_EMAIL_ADDRESS = re.compile(r"[\w.+-]+@[\w-]+(?:\.[\w-]+)+")

_DEFAULT_LEVELS = {"development": logging.DEBUG, "test": logging.WARNING}


def _request_context() -> Dict[str, Any]:
    """Campos de la petición en curso; vacío fuera de un request context."""
    if not has_request_context():
        return {}
    context = {
        "request_id": getattr(g, "request_id", None),
        "method": request.method,
        "path": request.path,
        "remote_addr": get_client_ip(request),
    }
    if request.user_agent and request.user_agent.string:
        context["user_agent"] = request.user_agent.string
    return context


def _record_time(record: logging.LogRecord) -> datetime:
    return datetime.fromtimestamp(record.created, timezone.utc)


class SubmissionRedactionFilter(logging.Filter):
    """Impide que los datos del formulario de contacto lleguen a los logs."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key in FORM_VALUE_KEYS.intersection(vars(record)):
            setattr(record, key, REDACTED)

        try:
            message = record.getMessage()
        except (TypeError, ValueError):
            # El handler informa del error de formato al emitir
            return True
        scrubbed = _EMAIL_ADDRESS.sub(REDACTED, message)
        if scrubbed != message:
            record.msg, record.args = scrubbed, ()
        return True


class ContextualJsonFormatter(JsonFormatter):
    """
    JSON formatter con timestamp, level, logger, app_env y, dentro de una
    petición, request_id, method, path, remote_addr y user_agent.
    """

    def __init__(self, *args, app_env: str = "production", **kwargs):
        super().__init__(*args, **kwargs)
        self.app_env = app_env

    def add_fields(
        self,
        log_record: Dict[str, Any],
        record: logging.LogRecord,
        message_dict: Dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record.update(
            timestamp=_record_time(record).isoformat(),
            level=record.levelname,
            logger=record.name,
            app_env=self.app_env,
        )
        log_record.update(_request_context())
        if record.exc_info:
            log_record["exception"] = self.formatException(record.exc_info)


class DevelopmentFormatter(logging.Formatter):
    """Una línea legible por registro, coloreada según el nivel."""

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname, "")
        stamp = _record_time(record).strftime("%Y-%m-%d %H:%M:%S")
        line = f"{color}[{stamp}] {record.levelname:8s}{self.RESET} {record.name:30s} | {record.getMessage()}"

        context = _request_context()
        if context:
            request_id = context["request_id"]
            prefix = f"request_id={request_id[:8]} | " if request_id else ""
            line += f" [{prefix}{context['method']} {context['path']}]"

        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def resolve_log_level(app_env: str, configured: Optional[str] = None) -> int:
    """LOG_LEVEL si es un nivel conocido; si no, el nivel por defecto del entorno."""
    if configured:
        level = logging.getLevelName(str(configured).strip().upper())
        if isinstance(level, int):
            return level
    return _DEFAULT_LEVELS.get(app_env, logging.INFO)


def _build_handler(app_env: str, level: int, json_enabled: bool) -> logging.Handler:
    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    if json_enabled:
        handler.setFormatter(ContextualJsonFormatter(fmt="%(message)s", app_env=app_env))
    else:
        handler.setFormatter(DevelopmentFormatter())
    handler.addFilter(SubmissionRedactionFilter())
    return handler


def configure_logging(app: Flask) -> None:
    """
    Configura el logging de la aplicación según APP_ENV.

    LOG_LEVEL y LOG_JSON_ENABLED se autodetectan cuando valen None. En test
    no se retiran los handlers existentes (el de caplog incluido) y los
    registros de la app se propagan al root logger.
    """
    app_env = app.config.get("APP_ENV", "production")
    level = resolve_log_level(app_env, app.config.get("LOG_LEVEL"))

    json_enabled = app.config.get("LOG_JSON_ENABLED")
    if json_enabled is None:
        json_enabled = app_env == "production"

    handler = _build_handler(app_env, level, json_enabled)
    testing = app_env == "test"
    for logger in (app.logger, logging.getLogger()):
        if not testing:
            logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(level)
    app.logger.propagate = testing

    if not any(isinstance(f, SubmissionRedactionFilter) for f in app.logger.filters):
        app.logger.addFilter(SubmissionRedactionFilter())

    if app_env == "development":
        logging.getLogger("werkzeug").setLevel(logging.WARNING)

    app.logger.info(
        "Logging configured",
        extra={
            "app_env": app_env,
            "log_level": logging.getLevelName(level),
            "json_enabled": json_enabled,
        },
    )


def _elapsed_ms() -> Optional[float]:
    started = getattr(g, "request_started", None)
    if started is None:
        return None
    return round((time.perf_counter() - started) * 1000, 2)


def setup_request_logging(app: Flask) -> None:
    """Asigna un request_id a cada petición y registra su inicio y su fin."""

    @app.before_request
    def start_request_log():
        g.request_id = str(uuid.uuid4())
        g.request_started = time.perf_counter()
        app.logger.info("Request started", extra={"event": "request.started"})

    @app.after_request
    def finish_request_log(response):
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers[REQUEST_ID_HEADER] = request_id

        elapsed = _elapsed_ms()
        if elapsed is not None:
            app.logger.info(
                "Request completed",
                extra={
                    "event": "request.completed",
                    "status_code": response.status_code,
                    "response_time_ms": elapsed,
                },
            )
        return response


def get_logger(name: str) -> logging.Logger:
    """Logger con el nombre dado (normalmente __name__)."""
    return logging.getLogger(name)
