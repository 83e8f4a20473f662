"""
app/schemas/health.py

Response schema for the health endpoint.
"""

from __future__ import annotations

from pydantic import BaseModel


class HealthResponse(BaseModel):
    status: str
