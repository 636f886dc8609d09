"""
Shared API dependencies.
"""

from typing import Optional

from fastapi import Header

from pawfeed.core.config import settings


def get_feeder_id(x_feeder_id: Optional[str] = Header(None, description="Feeder to act on"), ) -> str:
    """Feeder the request acts on: the ``X-Feeder-Id`` header or the configured default."""
    return x_feeder_id or settings.DEFAULT_FEEDER_ID
