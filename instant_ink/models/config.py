"""
Persisted configuration model for instant-ink.
"""
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from instant_ink.constants import NetworkConstants


class PersistedConfig(BaseModel):
    """Defaults stored in config.json between invocations."""
    printer_url: str = Field("", description="Normalized status document URL; empty when unset")
    timeout_seconds: int = Field(
        NetworkConstants.CONNECTION_TIMEOUT_SECONDS,
        gt=0,
        description="Request timeout in seconds"
    )
    last_updated: Optional[datetime] = Field(None, description="When the file was last written")
