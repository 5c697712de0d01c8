"""
Cliente del formulario de contacto.

Reproduce el flujo del formulario del sitio: deshabilita el botón, envía un
único POST JSON a /api/contact y traduce la respuesta en un aviso para el
usuario. El botón se restaura siempre, sea cual sea el resultado.
"""
from dataclasses import dataclass, field
from typing import Callable, List, Optional

import requests

from .app.logging_config import get_logger

logger = get_logger(__name__)

CONTACT_PATH = "/api/contact"
PENDING_LABEL = "Sending..."
SUCCESS_NOTICE = "Thank you for your message! We will get back to you soon."
FAILURE_NOTICE = "Failed to send message. Please try again later."
NETWORK_FAILURE_NOTICE = "Sorry, there was an error sending your message. Please try again later."
VALIDATION_HEADER = "Please fix the following errors:\n"


@dataclass
class ContactForm:
    """Estado del formulario: los tres campos y el botón de envío."""

    name: str = ""
    email: str = ""
    message: str = ""
    submit_label: str = "Send Message"
    submit_disabled: bool = False

    def values(self) -> dict:
        return {"name": self.name, "email": self.email, "message": self.message}

    def reset(self) -> None:
        self.name = ""
        self.email = ""
        self.message = ""


@dataclass
class SubmissionResult:
    success: bool
    notice: str
    errors: List[dict] = field(default_factory=list)


def format_validation_errors(errors) -> str:
    """Une los errores por campo en un único aviso de varias líneas."""
    notice = VALIDATION_HEADER
    for error in errors:
        if isinstance(error, dict):
            notice += f"- {error.get('field')}: {error.get('message')}\n"
        else:
            notice += f"- {error}\n"
    return notice


class ContactFormClient:
    """
    Envía formularios de contacto al servicio.

    Args:
        base_url: URL base del servidor, p. ej. "http://localhost:3000"
        session: requests.Session a reutilizar (se crea una si no se indica)
        notify: callable que recibe el aviso a mostrar al usuario
        timeout: segundos de espera por la respuesta
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[requests.Session] = None,
        notify: Optional[Callable[[str], None]] = None,
        timeout: float = 10.0,
    ):
        self.url = base_url.rstrip("/") + CONTACT_PATH
        self.session = session or requests.Session()
        self.notify = notify
        self.timeout = timeout

    def submit(self, form: ContactForm) -> SubmissionResult:
        original_label = form.submit_label
        form.submit_disabled = True
        form.submit_label = PENDING_LABEL

        try:
            result = self._send(form)
        finally:
            form.submit_disabled = False
            form.submit_label = original_label

        if self.notify is not None:
            self.notify(result.notice)
        return result

    def _send(self, form: ContactForm) -> SubmissionResult:
        try:
            response = self.session.post(
                self.url,
                json=form.values(),
                headers={"Content-Type": "application/json"},
                timeout=self.timeout,
            )
            payload = response.json()
        except (requests.exceptions.RequestException, ValueError) as exc:
            # Los detalles internos nunca llegan al usuario
            logger.warning(
                "Error submitting contact form: %s", exc,
                extra={"event": "contact.client_failed", "error_type": type(exc).__name__},
            )
            return SubmissionResult(success=False, notice=NETWORK_FAILURE_NOTICE)

        if not isinstance(payload, dict):
            payload = {}

        if response.ok:
            form.reset()
            return SubmissionResult(success=True, notice=payload.get("message") or SUCCESS_NOTICE)

        errors = payload.get("errors")
        if isinstance(errors, list):
            return SubmissionResult(
                success=False,
                notice=format_validation_errors(errors),
                errors=errors,
            )

        return SubmissionResult(success=False, notice=payload.get("message") or FAILURE_NOTICE)
