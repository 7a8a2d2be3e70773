"""
Domain Services - Application Layer.

Services contain business logic and orchestrate operations.
They use Repositories for data access and the pure planning/payment core.

Structure:
    Router (thin controller)
        ↓
    Service (business logic)  ← YOU ARE HERE
        ↓
    Repository (data access)
        ↓
    Model (entity)

Usage:
    from rest_api.services.domain import PlanningService

    # In router
    service = PlanningService(db)
    planning = service.get_planning(user_id)
"""

from .order_service import OrderService, order_to_output
from .planning_service import PlanningService, entry_to_output, meal_to_output

__all__ = [
    "OrderService",
    "order_to_output",
    "PlanningService",
    "entry_to_output",
    "meal_to_output",
]
