"""
Opinion models - the judge's fair-value estimates.

These models represent the output of estimate_fair_value.py (Step 4).
"""

import enum
from typing import Optional, Literal
from pydantic import BaseModel, Field, field_validator


class JudgeOpinion(BaseModel):
    """
    The judge's view on one listing.

    `ai_probability` is a percentage (0-100) for the YES outcome.
    `should_trade` is the judge's own call and is never re-derived.
    """
    market_id: str = Field(alias="marketId")
    ai_probability: float = Field(ge=0.0, le=100.0, alias="aiProbability")
    side: Literal["YES", "NO"]
    explanation: str = ""
    should_trade: bool = Field(alias="shouldTrade")

    model_config = {"populate_by_name": True}

    @field_validator("market_id", mode="before")
    @classmethod
    def _coerce_market_id(cls, value):
        # Judges sometimes echo numeric ids back as numbers
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(int(value)) if float(value).is_integer() else str(value)
        return value

    @field_validator("side", mode="before")
    @classmethod
    def _normalise_side(cls, value):
        if isinstance(value, str):
            return value.strip().upper()
        return value


class OpinionStatus(str, enum.Enum):
    VALID = "VALID"
    UNKNOWN_ID = "UNKNOWN_ID"
    DUPLICATE_ID = "DUPLICATE_ID"
    MALFORMED = "MALFORMED"


class OpinionResult(BaseModel):
    """Tagged result of validating one entry of the judge's response."""
    status: OpinionStatus
    opinion: Optional[JudgeOpinion] = None
    market_id: Optional[str] = None
    reason: Optional[str] = None

    @property
    def is_valid(self) -> bool:
        return self.status == OpinionStatus.VALID


class JudgeEstimate(BaseModel):
    """Everything the estimator produced for one batch."""
    results: list[OpinionResult] = Field(default_factory=list)
    model: Optional[str] = None
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0

    @property
    def opinions(self) -> list[JudgeOpinion]:
        """Only the opinions that passed validation."""
        return [r.opinion for r in self.results if r.is_valid and r.opinion is not None]

    @property
    def rejected(self) -> list[OpinionResult]:
        return [r for r in self.results if not r.is_valid]
