"""Calling-principal context for a mint or transfer."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field


@runtime_checkable
class PrincipalContext(Protocol):
    """Anything that can name the principal performing the current call."""

    def current_principal(self) -> str:
        ...


class TxContext(BaseModel):
    """Execution context carrying the sender of the current operation."""

    model_config = ConfigDict(frozen=True)

    sender: str = Field(min_length=1)

    def current_principal(self) -> str:
        return self.sender
