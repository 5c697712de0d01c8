"""
Services package - reusable business logic and utilities.

Helpers shared by the blueprints, independent of any route.
"""

__all__ = [
    "request_utils",
    "validate",
]
