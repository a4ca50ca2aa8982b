"""Schemas for AI explanations."""

from __future__ import annotations

from pydantic import BaseModel


class ExplanationOut(BaseModel):
    explanation: str
    cached: bool
