"""
Services module for business logic.

LAYERS:
- planning/: Pure core (pricing, meal/menu assembly, shopping list consolidation)
- payments/: Paystack integration, payment state machine, reconciliation
- domain/: Application services used by routers - USE THESE

Usage:
    from rest_api.services.domain import OrderService
    service = OrderService(db)
    order = service.get_by_number("TLR2501010042")
"""
