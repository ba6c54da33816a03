from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedImage:
    data: bytes
    mime_type: str


class ImageFetchPort(ABC):
    @abstractmethod
    async def fetch(self, locator: str) -> FetchedImage:
        """Download raw image bytes and their content type."""
