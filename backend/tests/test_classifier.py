from __future__ import annotations

import asyncio
from typing import Any

import httpx
import pytest

from lightcheck.classifier.client import LIGHT_PROMPT, LightClassifier
from lightcheck.classifier.validate import LIGHT_JUDGMENT_SCHEMA, load_schema, validate_light_judgment
from lightcheck.domain.errors import ClassifierError, SchemaValidationError
from lightcheck.domain.models import ClassifierJudgment
from lightcheck.infra.images.http import HttpImageFetcher, build_fetch_url
from lightcheck.infra.llm.gemini import to_gemini_response_schema
from lightcheck.infra.ports.images import FetchedImage, ImageFetchPort


class StubFetcher(ImageFetchPort):
    def __init__(self, *, fail: bool = False):
        self.fail = fail
        self.locators: list[str] = []

    async def fetch(self, locator: str) -> FetchedImage:
        self.locators.append(locator)
        if self.fail:
            raise RuntimeError("Failed to fetch image: 404 Not Found")
        return FetchedImage(data=b"\xff\xd8jpeg", mime_type="image/png")


class StubLLM:
    provider_name = "gemini"
    model_name = "gemini-test"

    def __init__(self, response: Any = None, error: Exception | None = None):
        self.response = response
        self.error = error
        self.calls: list[dict[str, Any]] = []

    def generate_structured_from_media(
        self,
        *,
        prompt: str,
        schema: dict[str, Any],
        media_bytes: bytes,
        media_mime_type: str,
        system_prompt: str | None = None,
        model: str | None = None,
    ):
        self.calls.append(
            {
                "prompt": prompt,
                "schema": schema,
                "media_bytes": media_bytes,
                "media_mime_type": media_mime_type,
            }
        )
        if self.error is not None:
            raise self.error
        return self.response


def test_analyze_returns_validated_judgment():
    llm = StubLLM({"lightsOn": True, "confidence": 0.83, "explanation": " Ceiling tubes are lit. "})
    fetcher = StubFetcher()
    classifier = LightClassifier(fetcher=fetcher, llm=llm)

    judgment = asyncio.run(classifier.analyze("https://drive.test/uc?id=1"))

    assert judgment == ClassifierJudgment(lights_on=True, confidence=0.83, explanation="Ceiling tubes are lit.")
    assert fetcher.locators == ["https://drive.test/uc?id=1"]
    call = llm.calls[0]
    assert call["prompt"] == LIGHT_PROMPT
    assert call["media_bytes"] == b"\xff\xd8jpeg"
    assert call["media_mime_type"] == "image/png"
    assert call["schema"]["required"] == ["lightsOn", "confidence", "explanation"]


@pytest.mark.parametrize(
    "response",
    [
        {"lightsOn": True, "confidence": 0.9},
        {"lightsOn": "yes", "confidence": 0.9, "explanation": "x"},
        {"lightsOn": True, "confidence": 87, "explanation": "x"},
        {"lightsOn": True, "confidence": 0.9, "explanation": "x", "extra": 1},
        ["not", "an", "object"],
    ],
)
def test_schema_deviation_is_a_failure(response):
    classifier = LightClassifier(fetcher=StubFetcher(), llm=StubLLM(response))

    with pytest.raises(ClassifierError, match="validation failed"):
        asyncio.run(classifier.analyze("https://drive.test/uc?id=1"))


def test_fetch_and_model_failures_surface_as_classifier_error():
    fetch_failing = LightClassifier(fetcher=StubFetcher(fail=True), llm=StubLLM({}))
    model_failing = LightClassifier(
        fetcher=StubFetcher(),
        llm=StubLLM(error=RuntimeError("Gemini API error (429): quota")),
    )

    with pytest.raises(ClassifierError, match="404"):
        asyncio.run(fetch_failing.analyze("https://drive.test/uc?id=1"))
    with pytest.raises(ClassifierError, match="429"):
        asyncio.run(model_failing.analyze("https://drive.test/uc?id=1"))


def test_validate_light_judgment_directly():
    parsed = validate_light_judgment({"lightsOn": False, "confidence": 0, "explanation": "dark"})
    assert parsed.to_domain().lights_on is False

    with pytest.raises(SchemaValidationError):
        validate_light_judgment({"lightsOn": False, "confidence": -0.1, "explanation": "dark"})


def test_gemini_response_schema_drops_unsupported_keys():
    converted = to_gemini_response_schema(load_schema(LIGHT_JUDGMENT_SCHEMA))

    assert converted["type"] == "OBJECT"
    assert "$schema" not in converted
    assert "additionalProperties" not in converted
    assert converted["properties"]["lightsOn"]["type"] == "BOOLEAN"
    assert converted["properties"]["confidence"]["type"] == "NUMBER"
    assert converted["properties"]["explanation"]["type"] == "STRING"


def test_build_fetch_url_with_relay():
    locator = "https://drive.google.com/uc?export=download&id=abc"

    assert build_fetch_url(locator, None) == locator
    assert build_fetch_url(locator, "https://corsproxy.io/?{url}") == (
        "https://corsproxy.io/?https%3A%2F%2Fdrive.google.com%2Fuc%3Fexport%3Ddownload%26id%3Dabc"
    )
    assert build_fetch_url(locator, "https://relay.test/?u=").startswith("https://relay.test/?u=https%3A")


def test_http_image_fetcher_defaults_mime_type():
    def _handler(request: httpx.Request) -> httpx.Response:
        if request.url.path.endswith("/missing"):
            return httpx.Response(404)
        return httpx.Response(200, content=b"raw-bytes")

    fetcher = HttpImageFetcher(transport=httpx.MockTransport(_handler))

    image = asyncio.run(fetcher.fetch("https://img.test/ok"))
    assert image.data == b"raw-bytes"
    assert image.mime_type == "image/jpeg"

    with pytest.raises(RuntimeError, match="404"):
        asyncio.run(fetcher.fetch("https://img.test/missing"))


def test_http_image_fetcher_keeps_content_type():
    fetcher = HttpImageFetcher(
        transport=httpx.MockTransport(
            lambda request: httpx.Response(200, content=b"png", headers={"content-type": "image/png; charset=binary"})
        )
    )

    assert asyncio.run(fetcher.fetch("https://img.test/ok")).mime_type == "image/png"
