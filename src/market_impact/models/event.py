"""Event Pydantic model (input to analysis producers)."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict


class Event(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str = ""
    event_type: str | None = None
    description: str | None = None
    country: str | None = None
    city: str | None = None
    affected_organizations: list[str] | dict[str, Any] | str | None = None
    severity: str | None = None
