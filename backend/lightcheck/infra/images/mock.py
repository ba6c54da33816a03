from __future__ import annotations

from lightcheck.infra.ports.images import FetchedImage, ImageFetchPort


class MockImageFetcher(ImageFetchPort):
    """Returns the locator itself as the image payload."""

    async def fetch(self, locator: str) -> FetchedImage:
        return FetchedImage(data=locator.encode("utf-8"), mime_type="image/jpeg")
