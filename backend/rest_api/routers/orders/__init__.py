"""
Orders router - checkout and payment confirmation.
"""

from .routes import router

__all__ = ["router"]
