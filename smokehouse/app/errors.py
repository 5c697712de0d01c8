"""JSON error handlers shared by every route."""
import traceback

from flask import Flask, current_app, got_request_exception, jsonify
from werkzeug.exceptions import HTTPException

GENERIC_ERROR_MESSAGE = "An error occurred processing your request"


def _expose_details() -> bool:
    return bool(current_app.config.get("EXPOSE_ERROR_DETAILS", False))


def register_error_handlers(app: Flask) -> None:
    """
    Registra los manejadores de error de la aplicación.

    - 429: mensaje fijo del límite que se superó, sin detalles internos.
    - HTTPException: se conserva el status, el mensaje se redacta en producción.
    - Cualquier otra excepción: se registra con traceback y se responde 500.
    """

    @app.errorhandler(429)
    def handle_rate_limit(error):
        limit = getattr(error, "limit", None)
        if getattr(limit, "error_message", None):
            message = error.description
        else:
            message = current_app.config.get("RATELIMIT_GENERAL_MESSAGE") or GENERIC_ERROR_MESSAGE

        current_app.logger.warning(
            "Rate limit exceeded",
            extra={
                "event": "ratelimit.exceeded",
                "limit": str(getattr(limit, "limit", "") or ""),
            },
        )
        return jsonify(success=False, message=message), 429

    @app.errorhandler(HTTPException)
    def handle_http_exception(error: HTTPException):
        status_code = error.code or 500
        message = error.description if _expose_details() else GENERIC_ERROR_MESSAGE
        if status_code >= 500:
            current_app.logger.error(
                "HTTP error %s", status_code,
                extra={"event": "exception.http", "status_code": status_code},
            )
        return jsonify(success=False, message=message), status_code

    @app.errorhandler(Exception)
    def handle_exception(error: Exception):
        """Log uncaught exceptions with full context and answer with a redacted 500."""
        current_app.logger.error(
            f"Uncaught exception: {error}",
            exc_info=error,
            extra={
                "event": "exception.uncaught",
                "exception_type": type(error).__name__,
            },
        )
        # Un manejador registrado impide que Flask emita la señal; la emitimos
        # para que los integradores (Sentry) sigan viendo el error.
        got_request_exception.send(current_app._get_current_object(), exception=error)

        payload = {"success": False, "message": GENERIC_ERROR_MESSAGE}
        if _expose_details():
            payload["message"] = str(error) or type(error).__name__
            payload["stack"] = "".join(
                traceback.format_exception(type(error), error, error.__traceback__)
            )
        return jsonify(payload), 500
