"""
Webhook router - gateway-initiated payment notifications.
"""

from .routes import router

__all__ = ["router"]
