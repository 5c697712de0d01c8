"""
Servicio de validación y normalización del formulario de contacto.

Cada campo se recorta, se valida y se sanea. Los errores de todos los campos
se acumulan en orden; una solicitud es válida por completo o se rechaza.
"""
import re
from dataclasses import dataclass
from typing import List, Optional, Tuple

import email_validator
from email_validator import EmailNotValidError, validate_email
from markupsafe import escape

NAME_MAX_LENGTH = 100
EMAIL_MAX_LENGTH = 254
MESSAGE_MAX_LENGTH = 2000

NAME_PATTERN = re.compile(r"[A-Za-z\s'-]+")

NAME_LENGTH_MESSAGE = "Name must be between 1 and 100 characters"
NAME_CHARACTERS_MESSAGE = "Name contains invalid characters"
EMAIL_INVALID_MESSAGE = "Please provide a valid email address"
EMAIL_LENGTH_MESSAGE = "Email address is too long"
MESSAGE_LENGTH_MESSAGE = "Message must be between 1 and 2000 characters"

_GMAIL_DOMAINS = {"gmail.com", "googlemail.com"}
_OUTLOOK_DOMAINS = {"outlook.com", "hotmail.com", "live.com", "msn.com", "passport.com"}
_YAHOO_DOMAINS = {"yahoo.com", "yahoo.co.uk", "yahoo.fr", "yahoo.de", "ymail.com", "rocketmail.com"}
_ICLOUD_DOMAINS = {"icloud.com", "me.com", "mac.com"}

# Dominios reservados que, con un TLD, forman direcciones sintácticamente válidas.
# "localhost" sigue rechazándose.
RESERVED_DOMAINS_ACCEPTED = ("arpa", "invalid", "local", "onion", "test")


def _accept_reserved_domains() -> None:
    for domain in RESERVED_DOMAINS_ACCEPTED:
        if domain in email_validator.SPECIAL_USE_DOMAIN_NAMES:
            email_validator.SPECIAL_USE_DOMAIN_NAMES.remove(domain)


_accept_reserved_domains()


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str

    def to_dict(self):
        return {"field": self.field, "message": self.message}


@dataclass(frozen=True)
class ContactSubmission:
    """Envío de contacto ya validado y saneado. Nunca se persiste."""

    name: str
    email: str
    message: str


def _as_text(value) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    return str(value)


def escape_markup(value) -> str:
    """
    Reemplaza los caracteres con significado en HTML (& < > " ') por entidades.

    Usa el escape de MarkupSafe, que no toca "/", "\\" ni la comilla invertida:
    ninguno de ellos abre ni cierra una etiqueta o un atributo entre comillas.

    Args:
        value: Texto a sanear

    Returns:
        Texto inerte al ser insertado en un documento HTML
    """
    return str(escape(_as_text(value)))


def normalize_email(value):
    """
    Lleva una dirección de email a su forma canónica.

    Convierte todo a minúsculas y, para los proveedores conocidos, elimina
    las variantes que entregan al mismo buzón: puntos y sufijo "+tag" en
    Gmail (googlemail.com pasa a gmail.com), sufijo "+tag" en Outlook e
    iCloud, y sufijo "-tag" en Yahoo.

    Args:
        value: Email a normalizar

    Returns:
        Email canónico, o string vacío si no hay valor
    """
    email = _as_text(value).strip().lower()
    local, sep, domain = email.rpartition("@")
    if not sep or not local:
        return email

    if domain in _GMAIL_DOMAINS:
        local = local.split("+", 1)[0].replace(".", "")
        domain = "gmail.com"
    elif domain in _OUTLOOK_DOMAINS or domain in _ICLOUD_DOMAINS:
        local = local.split("+", 1)[0]
    elif domain in _YAHOO_DOMAINS:
        local = local.rsplit("-", 1)[0]

    if not local:
        return email
    return f"{local}@{domain}"


def _check_name(raw, errors: List[FieldError]) -> str:
    name = _as_text(raw).strip()
    if not 1 <= len(name) <= NAME_MAX_LENGTH:
        errors.append(FieldError("name", NAME_LENGTH_MESSAGE))
    # El nombre vacío ya queda cubierto por la regla de longitud
    if name and not NAME_PATTERN.fullmatch(name):
        errors.append(FieldError("name", NAME_CHARACTERS_MESSAGE))
    return escape_markup(name)


def _check_email(raw, errors: List[FieldError]) -> str:
    email = _as_text(raw).strip()
    try:
        validated = validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        if len(email) > EMAIL_MAX_LENGTH:
            errors.append(FieldError("email", EMAIL_LENGTH_MESSAGE))
        else:
            errors.append(FieldError("email", EMAIL_INVALID_MESSAGE))
        return email

    email = normalize_email(validated.normalized)
    if len(email) > EMAIL_MAX_LENGTH:
        errors.append(FieldError("email", EMAIL_LENGTH_MESSAGE))
    return email


def _check_message(raw, errors: List[FieldError]) -> str:
    message = _as_text(raw).strip()
    if not 1 <= len(message) <= MESSAGE_MAX_LENGTH:
        errors.append(FieldError("message", MESSAGE_LENGTH_MESSAGE))
    return escape_markup(message)


def validate_contact_submission(name, email, message) -> Tuple[Optional[ContactSubmission], List[FieldError]]:
    """
    Valida los datos de un formulario de contacto.

    Args:
        name: Nombre del contacto
        email: Email del contacto
        message: Mensaje del contacto

    Returns:
        Tupla (envío, errores). El envío es None cuando hay al menos un error;
        la lista de errores conserva el orden name, email, message.
    """
    errors: List[FieldError] = []
    clean_name = _check_name(name, errors)
    clean_email = _check_email(email, errors)
    clean_message = _check_message(message, errors)

    if errors:
        return None, errors
    return ContactSubmission(name=clean_name, email=clean_email, message=clean_message), errors
