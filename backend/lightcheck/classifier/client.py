"""Ceiling-light classifier: image retrieval plus one structured multimodal call."""

from __future__ import annotations

import asyncio
import logging

from lightcheck.classifier.validate import LIGHT_JUDGMENT_SCHEMA, load_schema, validate_light_judgment
from lightcheck.domain.errors import ClassifierError
from lightcheck.domain.models import ClassifierJudgment
from lightcheck.infra.ports.classifier import ClassifierPort
from lightcheck.infra.ports.images import ImageFetchPort
from lightcheck.infra.ports.llm import LLMPort

logger = logging.getLogger(__name__)

LIGHT_PROMPT = (
    "Analyze this image of a bus shelter. Are the lights in the ceiling turned on? "
    'Output strictly valid JSON with this structure: '
    '{ "lightsOn": boolean, "confidence": number, "explanation": "Brief reason" }'
)
_SYSTEM_PROMPT = "You inspect bus shelter photos. Return strict JSON only."


class LightClassifier(ClassifierPort):
    def __init__(self, *, fetcher: ImageFetchPort, llm: LLMPort, model: str | None = None):
        self.fetcher = fetcher
        self.llm = llm
        self.model = model

    async def analyze(self, locator: str) -> ClassifierJudgment:
        """Classify the image at ``locator``.

        Byte retrieval and model failures are not distinguished: both surface
        as a ClassifierError whose message is shown on the review card.
        """
        try:
            image = await self.fetcher.fetch(locator)
            # The LLM adapter is blocking; keep the event loop free for reviewers.
            data = await asyncio.to_thread(
                self.llm.generate_structured_from_media,
                prompt=LIGHT_PROMPT,
                schema=load_schema(LIGHT_JUDGMENT_SCHEMA),
                media_bytes=image.data,
                media_mime_type=image.mime_type,
                system_prompt=_SYSTEM_PROMPT,
                model=self.model,
            )
            return validate_light_judgment(data).to_domain()
        except ClassifierError:
            raise
        except Exception as exc:
            logger.debug("Classification failed for %s", locator, exc_info=True)
            raise ClassifierError(str(exc) or "AI analysis failed") from exc
