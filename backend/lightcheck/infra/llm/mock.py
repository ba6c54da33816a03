from __future__ import annotations

import hashlib
from typing import Any

from lightcheck.infra.ports.llm import LLMPort


class MockLLM(LLMPort):
    """Deterministic stand-in: the answer depends only on the image bytes."""

    provider_name = "mock"
    model_name = "mock-light-classifier"

    def generate_structured_from_media(
        self,
        *,
        prompt: str,
        schema: dict[str, Any],
        media_bytes: bytes,
        media_mime_type: str,
        system_prompt: str | None = None,
        model: str | None = None,
    ) -> dict[str, Any]:
        digest = hashlib.sha256(media_bytes).digest()
        lights_on = digest[0] % 2 == 0
        return {
            "lightsOn": lights_on,
            "confidence": round(0.5 + (digest[1] / 255) * 0.5, 4),
            "explanation": "[mock] ceiling lights appear on" if lights_on else "[mock] ceiling lights appear off",
        }
