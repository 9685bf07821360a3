"""Pydantic request schemas for the public API.

These exist only for HTTP input validation. The ledger re-validates every
payload at apply time.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


class StoryCreateRequest(BaseModel):
    title: str = Field(..., description="Story title")


class ChapterAddRequest(BaseModel):
    content: str = Field(..., description="Chapter text")


class PlotDecisionCreateRequest(BaseModel):
    option_a: str = Field(..., description="First plot option")
    option_b: str = Field(..., description="Second plot option")


class VoteCastRequest(BaseModel):
    # Raw value; the ledger parses it into a VoteOption (0/1 or "a"/"b").
    option: Any = Field(..., description="0 for option_a, 1 for option_b")
