from __future__ import annotations

from dataclasses import dataclass

from fastapi import Request

from lightcheck.application.analysis import AnalysisQueue
from lightcheck.application.services import QueueFactory, ReviewWorkflowService
from lightcheck.application.session import ReviewSession
from lightcheck.classifier.client import LightClassifier
from lightcheck.core.config import Settings
from lightcheck.domain.errors import ConfigurationError
from lightcheck.infra.images.http import HttpImageFetcher
from lightcheck.infra.images.mock import MockImageFetcher
from lightcheck.infra.llm.gemini import GeminiLLM
from lightcheck.infra.llm.mock import MockLLM
from lightcheck.infra.ports.classifier import ClassifierPort
from lightcheck.infra.ports.queue import QueuePort
from lightcheck.infra.queue.http import HttpQueueClient
from lightcheck.infra.queue.mock import MockQueueClient


@dataclass
class ReviewContext:
    session: ReviewSession
    analysis: AnalysisQueue
    service: ReviewWorkflowService


def build_queue_factory(settings: Settings) -> QueueFactory:
    if settings.queue_backend == "mock":
        mock = MockQueueClient()

        def _mock_factory(_url: str) -> QueuePort:
            return mock

        return _mock_factory

    def _http_factory(url: str) -> QueuePort:
        return HttpQueueClient(base_url=url, timeout_seconds=settings.queue_timeout_seconds)

    return _http_factory


def build_classifier(settings: Settings) -> ClassifierPort:
    if settings.classifier_backend == "gemini":
        if not settings.gemini_api_key:
            raise ConfigurationError("GEMINI_API_KEY is required when LIGHTCHECK_CLASSIFIER_BACKEND=gemini")
        return LightClassifier(
            fetcher=HttpImageFetcher(
                relay_url=settings.image_relay_url,
                timeout_seconds=settings.image_timeout_seconds,
            ),
            llm=GeminiLLM(
                api_key=settings.gemini_api_key,
                model_name=settings.gemini_model,
                timeout_seconds=settings.llm_timeout_seconds,
            ),
        )
    return LightClassifier(fetcher=MockImageFetcher(), llm=MockLLM())


def build_review_context(
    settings: Settings,
    *,
    queue_factory: QueueFactory | None = None,
    classifier: ClassifierPort | None = None,
) -> ReviewContext:
    session = ReviewSession(queue_url=settings.queue_url, status_ttl_seconds=settings.status_ttl_seconds)
    analysis = AnalysisQueue(
        classifier=classifier or build_classifier(settings),
        session=session,
        workers=settings.analysis_workers,
    )
    service = ReviewWorkflowService(
        session=session,
        queue_factory=queue_factory or build_queue_factory(settings),
        analysis=analysis,
    )
    return ReviewContext(session=session, analysis=analysis, service=service)


def _context(request: Request) -> ReviewContext:
    return request.app.state.review


async def provide_session(request: Request) -> ReviewSession:
    return _context(request).session


async def provide_review_service(request: Request) -> ReviewWorkflowService:
    return _context(request).service
