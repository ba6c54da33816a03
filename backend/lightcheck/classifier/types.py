"""Pydantic model mirroring light_judgment.v1.json."""

from __future__ import annotations

from pydantic import BaseModel, Field, StrictBool

from lightcheck.domain.models import ClassifierJudgment


class LightJudgmentV1(BaseModel, extra="forbid"):
    lightsOn: StrictBool
    confidence: float = Field(ge=0.0, le=1.0)
    explanation: str

    def to_domain(self) -> ClassifierJudgment:
        return ClassifierJudgment(
            lights_on=self.lightsOn,
            confidence=self.confidence,
            explanation=self.explanation.strip(),
        )
