"""Contact form endpoint."""
from flask import current_app, jsonify, request

from . import api
from ..extensions import limiter
from ..services.validate import validate_contact_submission

CONTACT_RATE_LIMIT_MESSAGE = "Too many contact form submissions, please try again later."


def _contact_limit():
    return current_app.config.get("RATELIMIT_CONTACT", "5 per hour")


def _submitted_fields():
    """Lee el cuerpo JSON o, sin JavaScript, el formulario urlencoded."""
    if request.is_json:
        data = request.get_json(silent=True)
        return data if isinstance(data, dict) else {}
    return request.form.to_dict()


@api.post("/contact")
@limiter.limit(
    _contact_limit,
    error_message=CONTACT_RATE_LIMIT_MESSAGE,
)
def contact():
    """API endpoint para formulario de contacto (JSON)."""
    data = _submitted_fields()

    submission, errors = validate_contact_submission(
        data.get("name"),
        data.get("email"),
        data.get("message"),
    )
    if errors:
        current_app.logger.info(
            "Contact submission rejected",
            extra={
                "event": "contact.invalid",
                "fields": [error.field for error in errors],
            },
        )
        return jsonify(
            success=False,
            errors=[error.to_dict() for error in errors],
        ), 400

    # Solo longitudes: el contenido del formulario no se escribe en los logs
    current_app.logger.info(
        "Contact submission received",
        extra={
            "event": "contact.received",
            "name_length": len(submission.name),
            "message_length": len(submission.message),
        },
    )

    # TODO: enviar la notificación por correo y guardar el envío cuando exista un destino configurado
    return jsonify(
        success=True,
        message=current_app.config["CONTACT_SUCCESS_MESSAGE"],
    ), 200
