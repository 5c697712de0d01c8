"""
Routes package - API endpoints.
"""
from flask import Blueprint

# Blueprint único para la API
api = Blueprint("api", __name__)

# Importar módulos de rutas después de crear el blueprint para evitar circular imports
from . import contact

__all__ = ["api"]
