"""
ASGI entrypoint: expose `app` for process managers / deployments.

- En production, un process manager (ex: gunicorn/uvicorn-workers) importe `logistics.asgi:app`
  pour servir l’application FastAPI en mode ASGI.
- Toute la configuration de FastAPI est centralisée dans logistics.app_setup.factory,
  ce fichier ne fait qu’exposer l’instance `app`.
"""

from logistics.app import app

__all__ = ["app"]
