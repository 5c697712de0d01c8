"""Request-related utilities."""
from flask import current_app, has_app_context, request as flask_request


def get_client_ip(req=None):
    """
    Obtains the caller identity used to bucket rate-limit counters.

    The socket address is authoritative. X-Forwarded-For (first hop) and
    X-Real-IP are honored only when TRUST_PROXY_HEADERS is enabled, since
    any client can forge them.

    Args:
        req: Flask request object. Defaults to the global request.
    """
    req = req or flask_request
    if req is None:
        return None

    trust_proxy = has_app_context() and current_app.config.get("TRUST_PROXY_HEADERS", False)
    if trust_proxy:
        forwarded_for = req.headers.get("X-Forwarded-For", "")
        if forwarded_for:
            parts = [part.strip() for part in forwarded_for.split(",") if part.strip()]
            if parts:
                return parts[0]

        real_ip = req.headers.get("X-Real-IP")
        if real_ip:
            return real_ip.strip()

    return req.remote_addr or "127.0.0.1"
