"""
Payment router - client-triggered verification.
"""

from .routes import router

__all__ = ["router"]
