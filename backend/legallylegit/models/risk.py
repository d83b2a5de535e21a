"""Risk Analysis Models

Normalised risk shape produced by document generation and stored with saved
documents. The level is always derived from the score through the configured
threshold table, so a higher score can never carry a lower-severity level.
"""

from pydantic import BaseModel, Field, model_validator
from typing import List, Optional, Sequence
from enum import Enum
import logging

from legallylegit import config

logger = logging.getLogger(__name__)


class RiskLevel(str, Enum):
    """Risk levels, lowest severity first"""
    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"
    CRITICAL = "Critical"

    @property
    def severity(self) -> int:
        return _SEVERITY_ORDER.index(self)


_SEVERITY_ORDER = [RiskLevel.LOW, RiskLevel.MEDIUM, RiskLevel.HIGH, RiskLevel.CRITICAL]

# Levels that must explain themselves with at least one breakdown item
LEVELS_REQUIRING_BREAKDOWN = {RiskLevel.HIGH, RiskLevel.CRITICAL}


def level_for_score(score: int, thresholds: Optional[Sequence[int]] = None) -> RiskLevel:
    """Map a 0-100 score onto a risk level.

    ``thresholds`` are inclusive upper bounds for Low, Medium and High;
    anything above the last bound is Critical.
    """
    if score < 0 or score > 100:
        raise ValueError(f"Risk score must be within 0..100, got {score}")
    bounds = thresholds or config.RISK_LEVEL_THRESHOLDS
    for level, upper in zip(_SEVERITY_ORDER, bounds):
        if score <= upper:
            return level
    return RiskLevel.CRITICAL


class RiskFactor(BaseModel):
    """One identified risk area and why it applies"""
    title: str = Field(min_length=1)
    reasoning: str = Field(min_length=1)

    model_config = {"extra": "ignore", "frozen": True}


class RiskAnalysis(BaseModel):
    """Risk assessment attached to a generated document.

    Construction re-derives ``level`` from ``score``. A model-supplied level
    that disagrees is overridden (and logged); a level outside the four
    enumerated values is rejected.
    """
    score: int = Field(ge=0, le=100, strict=True)
    level: RiskLevel
    summary: str = Field(min_length=1)
    breakdown: List[RiskFactor]

    model_config = {"extra": "ignore", "frozen": True}

    @model_validator(mode="before")
    @classmethod
    def _derive_level(cls, data):
        if not isinstance(data, dict):
            return data
        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, int) or not 0 <= score <= 100:
            return data
        claimed = data.get("level")
        valid_levels = {lvl.value for lvl in RiskLevel}
        if claimed is not None and (not isinstance(claimed, str) or claimed not in valid_levels):
            # Let enum validation reject it
            return data
        derived = level_for_score(score)
        if claimed is not None and RiskLevel(claimed) != derived:
            logger.warning(f"Risk level {claimed} inconsistent with score {score}; using {derived.value}")
        return {**data, "level": derived}

    @model_validator(mode="after")
    def _check_breakdown(self):
        if self.level in LEVELS_REQUIRING_BREAKDOWN and not self.breakdown:
            raise ValueError(f"Risk breakdown must not be empty when level is {self.level.value}")
        return self
