"""Pydantic schemas for generated coaching insights."""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from rift_reviewer.core.enums import InsightSeverity


class Insight(BaseModel):
    """One coaching comment."""

    severity: InsightSeverity
    summary: str = Field(..., min_length=1, description="A few words of classification")
    analysis: str = Field(..., description="Supporting reasoning")

    model_config = ConfigDict(use_enum_values=True)


class TimelineInsight(Insight):
    """A coaching comment pinned to a moment of the match."""

    timestamp: int = Field(..., ge=0, description="Milliseconds since game start")


class InsightResponse(BaseModel):
    """Result of an insight request; generation is optional and may be skipped."""

    available: bool
    insight: Optional[Insight] = None


class TimelineInsightResponse(BaseModel):
    """Result of a timeline insight request."""

    available: bool
    insights: List[TimelineInsight] = Field(default_factory=list)
