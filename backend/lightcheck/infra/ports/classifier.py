from __future__ import annotations

from abc import ABC, abstractmethod

from lightcheck.domain.models import ClassifierJudgment


class ClassifierPort(ABC):
    @abstractmethod
    async def analyze(self, locator: str) -> ClassifierJudgment:
        """Classify one image. Any failure raises ClassifierError."""
