"""
app/resolvers package marker.
"""

from app.resolvers.integration_resolver import (
    HeaderMatchCache,
    IntegrationResolver,
    best_header_match,
    is_valid_integration_key,
)
from app.resolvers.status_resolver import StatusResolver

__all__ = [
    "HeaderMatchCache",
    "IntegrationResolver",
    "StatusResolver",
    "best_header_match",
    "is_valid_integration_key",
]
