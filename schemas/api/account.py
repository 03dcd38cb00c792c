"""Schemas for account lookup APIs."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, Field


class CheckEmailRequest(BaseModel):
    email: Optional[str] = Field(default=None, description="Address to look up among registered accounts.")


class CheckEmailResponse(BaseModel):
    exists: bool


__all__ = ["CheckEmailRequest", "CheckEmailResponse"]
