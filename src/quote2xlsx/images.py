from __future__ import annotations
import asyncio
import base64
import binascii
import logging
import re
from io import BytesIO
from typing import Any, List, Optional, Sequence, Tuple

import httpx
from PIL import Image as PILImage

from .types import ABSENT, FAILED, RESOLVED, ImageResolver, LineItem, ResolvedImage

log = logging.getLogger(__name__)

USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"

_DATA_URI_RE = re.compile(r"^data:(?P<mime>[\w.+-]+/[\w.+-]+)?(?:;[^,]*)?;base64,(?P<payload>.*)$", re.S)

_MIME_FORMATS = {
    "image/png": "png",
    "image/jpeg": "jpeg",
    "image/jpg": "jpeg",
    "image/pjpeg": "jpeg",
    "image/gif": "gif",
}


class ImageFetchError(Exception):
    pass


def sniff_format(data: bytes, mime: Optional[str] = None) -> str:
    """Magic bytes first, then the declared MIME type. Unknown -> jpeg."""
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return "png"
    if data.startswith(b"\xff\xd8\xff"):
        return "jpeg"
    if data[:6] in (b"GIF87a", b"GIF89a"):
        return "gif"
    if mime:
        return _MIME_FORMATS.get(mime.split(";")[0].strip().lower(), "jpeg")
    return "jpeg"


def decode_payload(payload: str) -> Tuple[bytes, Optional[str]]:
    """Data URI or bare base64 -> (bytes, declared mime)."""
    payload = payload.strip()
    mime: Optional[str] = None
    m = _DATA_URI_RE.match(payload)
    if m:
        mime = m.group("mime")
        payload = m.group("payload")
    try:
        return base64.b64decode(payload, validate=False), mime
    except (binascii.Error, ValueError) as e:
        raise ImageFetchError(f"bad base64 payload: {e}") from e


def _from_resolver_answer(answer: Any) -> Optional[Tuple[bytes, Optional[str]]]:
    if answer is None:
        return None
    if isinstance(answer, (bytes, bytearray)):
        return bytes(answer), None
    if isinstance(answer, str):
        return decode_payload(answer) if answer.strip() else None
    if isinstance(answer, dict):
        if not answer.get("success") or not answer.get("data"):
            return None
        data, mime = _from_resolver_answer(answer["data"]) or (b"", None)
        return data, answer.get("contentType") or mime
    raise ImageFetchError(f"unsupported resolver answer: {type(answer).__name__}")


async def fetch_image(client: httpx.AsyncClient, url: str) -> Tuple[bytes, Optional[str]]:
    resp = await client.get(url)
    if resp.status_code >= 400:
        raise ImageFetchError(f"HTTP {resp.status_code}")
    return resp.content, resp.headers.get("content-type")


def verify_image(data: bytes) -> None:
    try:
        with PILImage.open(BytesIO(data)) as img:
            img.verify()
    except Exception as e:
        raise ImageFetchError(f"undecodable image: {e}") from e


async def resolve_one(
    index: int,
    item: LineItem,
    resolver: Optional[ImageResolver],
    client: httpx.AsyncClient,
    timeout: Optional[float] = None,
) -> ResolvedImage:
    ref = item.image_reference
    if not ref:
        return ResolvedImage(index=index, status=ABSENT)

    try:
        got = None
        if resolver is not None:
            got = _from_resolver_answer(await asyncio.wait_for(resolver(ref), timeout))
            if got is None:
                log.debug("Resolver had nothing for item #%s, trying direct fetch", index + 1)
        if got is None:
            got = await fetch_image(client, ref)

        data, mime = got
        if not data:
            raise ImageFetchError("empty body")
        verify_image(data)
    except asyncio.TimeoutError:
        log.warning("Image resolver timed out for item #%s (%s)", index + 1, item.product_code)
        return ResolvedImage(index=index, status=FAILED, reason=f"resolver timed out after {timeout}s")
    except (ImageFetchError, httpx.HTTPError) as e:
        log.warning("Image for item #%s (%s) not resolved: %s", index + 1, item.product_code, e)
        return ResolvedImage(index=index, status=FAILED, reason=str(e) or type(e).__name__)
    except Exception as e:
        # resolver is caller code; whatever it raises only costs this one image
        log.warning("Image resolver failed for item #%s (%s): %r", index + 1, item.product_code, e)
        return ResolvedImage(index=index, status=FAILED, reason=repr(e))

    fmt = sniff_format(data, mime)
    log.debug("Image for item #%s resolved (%s, %s bytes)", index + 1, fmt, len(data))
    return ResolvedImage(index=index, status=RESOLVED, data=data, format=fmt)


async def resolve_images(
    items: Sequence[LineItem],
    resolver: Optional[ImageResolver] = None,
    *,
    client: Optional[httpx.AsyncClient] = None,
    concurrency: int = 1,
    timeout: float = 10.0,
) -> List[ResolvedImage]:
    """
    Resolve every item's image. The result has one entry per item, in item order,
    whatever order the fetches finish in. Failures are recorded, never raised.
    """
    sem = asyncio.Semaphore(max(1, concurrency))
    own_client = client is None
    if own_client:
        client = httpx.AsyncClient(
            timeout=timeout,
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT},
        )

    async def run(i: int, it: LineItem) -> ResolvedImage:
        async with sem:
            return await resolve_one(i, it, resolver, client, timeout)

    try:
        results = await asyncio.gather(*(run(i, it) for i, it in enumerate(items)))
    finally:
        if own_client:
            await client.aclose()

    counts = {RESOLVED: 0, ABSENT: 0, FAILED: 0}
    for r in results:
        counts[r.status] += 1
    log.info(
        "Images: %s resolved, %s failed, %s without reference",
        counts[RESOLVED], counts[FAILED], counts[ABSENT],
    )
    return list(results)
