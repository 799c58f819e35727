"""
Event log entries emitted by contracts.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class Event(BaseModel):
    """One log entry: emitting contract, event name, named arguments."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    address: str = Field(..., description="Emitting contract")
    name: str = Field(..., description="Event name, e.g. TokenRetrieved")
    args: dict[str, Any] = Field(default_factory=dict)


__all__ = ["Event"]
