from flask import current_app
from flask_limiter import Limiter

from .services.request_utils import get_client_ip


def _general_limit():
    # Un único contador por cliente compartido por todas las rutas
    return current_app.config.get("RATELIMIT_GENERAL", "100 per 15 minutes")


# El almacenamiento de contadores lo decide RATELIMIT_STORAGE_URI en init_app
limiter = Limiter(
    key_func=get_client_ip,
    application_limits=[_general_limit],
)
