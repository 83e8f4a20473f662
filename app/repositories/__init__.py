"""
app/repositories package marker.
"""

from app.repositories.integration_repository import IntegrationRepository, to_config
from app.repositories.order_repository import OrderRepository

__all__ = [
    "IntegrationRepository",
    "OrderRepository",
    "to_config",
]
