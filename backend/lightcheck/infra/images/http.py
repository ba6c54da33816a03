from __future__ import annotations

from urllib import parse

import httpx

from lightcheck.infra.ports.images import FetchedImage, ImageFetchPort

_DEFAULT_MIME = "image/jpeg"


def build_fetch_url(locator: str, relay_url: str | None) -> str:
    """Wrap ``locator`` in the relay template, e.g. ``https://corsproxy.io/?{url}``."""
    if not relay_url:
        return locator
    encoded = parse.quote(locator, safe="")
    if "{url}" in relay_url:
        return relay_url.replace("{url}", encoded)
    return f"{relay_url}{encoded}"


class HttpImageFetcher(ImageFetchPort):
    def __init__(
        self,
        *,
        relay_url: str | None = None,
        timeout_seconds: int = 30,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.relay_url = relay_url
        self.timeout_seconds = max(3, int(timeout_seconds))
        self._transport = transport

    async def fetch(self, locator: str) -> FetchedImage:
        url = build_fetch_url(locator, self.relay_url)
        async with httpx.AsyncClient(
            transport=self._transport,
            timeout=self.timeout_seconds,
            follow_redirects=True,
        ) as client:
            response = await client.get(url)
        if not response.is_success:
            raise RuntimeError(f"Failed to fetch image: {response.status_code} {response.reason_phrase}")

        content_type = response.headers.get("content-type", "")
        mime_type = content_type.split(";", 1)[0].strip() or _DEFAULT_MIME
        return FetchedImage(data=response.content, mime_type=mime_type)
