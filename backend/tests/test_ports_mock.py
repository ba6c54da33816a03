import asyncio

from lightcheck.infra.images.mock import MockImageFetcher
from lightcheck.infra.llm.mock import MockLLM
from lightcheck.infra.queue.mock import MockQueueClient


def test_mock_queue_serves_batches_then_runs_dry():
    queue = MockQueueClient(folders={"north": ["a.jpg", "b.jpg", "c.jpg"]}, batch_size=2)

    async def _drain():
        await queue.initialize()
        batches = []
        while True:
            batch = await queue.fetch_next_batch()
            if batch is None:
                return batches
            batches.append(batch)

    batches = asyncio.run(_drain())

    assert [(b.batch_index, b.total_batches, len(b.images)) for b in batches] == [(1, 2, 2), (2, 2, 1)]
    assert batches[0].folder_name == "north"

    asyncio.run(queue.reset())
    assert asyncio.run(queue.fetch_next_batch()) is not None
    assert queue.calls[0] == "init"


def test_mock_llm_and_fetcher_are_deterministic():
    image = asyncio.run(MockImageFetcher().fetch("https://mock.local/download/a.jpg"))
    llm = MockLLM()

    first = llm.generate_structured_from_media(
        prompt="p", schema={}, media_bytes=image.data, media_mime_type=image.mime_type
    )
    second = llm.generate_structured_from_media(
        prompt="p", schema={}, media_bytes=image.data, media_mime_type=image.mime_type
    )

    assert image.mime_type == "image/jpeg"
    assert first == second
    assert set(first) == {"lightsOn", "confidence", "explanation"}
    assert 0.5 <= first["confidence"] <= 1.0
