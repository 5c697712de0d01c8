import sys

import click

from . import create_app
from .client import ContactForm, ContactFormClient

app = create_app()


@app.cli.command("send-contact")
@click.option("--name", required=True, help="Nombre del remitente.")
@click.option("--email", required=True, help="Email del remitente.")
@click.option("--message", required=True, help="Texto del mensaje.")
@click.option("--url", default=None, help="URL base del servidor (por defecto localhost:PORT).")
def send_contact(name, email, message, url):
    """Envía un formulario de contacto a un servidor en ejecución."""
    base_url = url or f"http://localhost:{app.config.get('PORT', 3000)}"
    form = ContactForm(name=name, email=email, message=message)

    result = ContactFormClient(base_url).submit(form)
    click.echo(result.notice.rstrip("\n"))
    if not result.success:
        sys.exit(1)


if __name__ == "__main__":
    port = app.config.get("PORT", 3000)
    app.logger.info(
        f"Reaper's Smokehouse server running on port {port}",
        extra={"event": "server.started", "port": port, "app_env": app.config.get("APP_ENV")},
    )
    app.run(port=port, debug=app.config.get("DEBUG", False))
