"""
Clip Fetcher

Loads prompt clips and the placeholder image, from HTTP(S) object storage
or from the local filesystem.

Transient failures (network errors, 408/429/5xx) are retried a few times
with exponential delay; anything else fails at once.
"""

import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, List, Optional, Sequence

import httpx

from core.media import MediaArtifact
from stitching.constants import (
    PROMPT_FETCH_ATTEMPTS,
    PROMPT_FETCH_RETRY_DELAY,
    PROMPT_FETCH_TIMEOUT,
    RETRYABLE_FETCH_STATUSES,
)
from stitching.interfaces.media_processor_interface import (
    PromptClipFetchError,
    StitchingError,
)
from stitching.utils.media_utils import format_file_size, guess_mime_type


class ClipFetchError(StitchingError):
    """A single source could not be loaded"""

    def __init__(self, message: str, transient: bool = False):
        super().__init__(message)
        self.transient = transient


class ClipFetcher:
    """
    Fetches media sources into MediaArtifacts.

    Usage:
        fetcher = ClipFetcher()
        clips = await fetcher.fetch_all(get_prompt_clip_sources())
    """

    def __init__(
        self,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = PROMPT_FETCH_TIMEOUT,
        attempts: int = PROMPT_FETCH_ATTEMPTS,
        retry_delay: float = PROMPT_FETCH_RETRY_DELAY,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        Initialize clip fetcher.

        Args:
            client: Shared httpx client, or None to open one per fetch
            timeout: Timeout of each HTTP request
            attempts: Tries per source for transient failures
            retry_delay: First delay between tries, doubled each time
            sleep: Awaitable used between tries (injectable for tests)
        """
        self.logger = logging.getLogger(__name__)
        self._client = client
        self.timeout = timeout
        self.attempts = max(1, attempts)
        self.retry_delay = retry_delay
        self._sleep = sleep

    async def fetch_all(self, sources: Sequence[str]) -> List[MediaArtifact]:
        """
        Fetch every source, in order.

        Raises:
            PromptClipFetchError: On the first source that cannot be loaded;
                nothing fetched so far is returned
        """
        clips = []
        for index, source in enumerate(sources):
            try:
                clip = await self.fetch(source)
            except ClipFetchError as e:
                self.logger.error(f"❌ Failed to fetch prompt clip {index + 1}: {e}")
                raise PromptClipFetchError(index, source, str(e)) from e

            self.logger.info(f"✅ Fetched prompt clip {index + 1} ({format_file_size(clip.size)})")
            clips.append(clip)
        return clips

    async def fetch(self, source: str) -> MediaArtifact:
        """
        Load one source, retrying transient failures.

        Raises:
            ClipFetchError: If the source cannot be loaded
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                data = await self._load(source)
                break
            except ClipFetchError as e:
                if not e.transient or attempt >= self.attempts:
                    raise
                delay = self.retry_delay * (2 ** (attempt - 1))
                self.logger.warning(
                    f"Fetch of {source} failed (attempt {attempt}/{self.attempts}), "
                    f"retrying in {delay:.1f}s: {e}",
                )
                await self._sleep(delay)

        if not data:
            raise ClipFetchError(f"{source} is empty")

        return MediaArtifact(data=data, mime_type=guess_mime_type(source))

    async def _load(self, source: str) -> bytes:
        if source.startswith(("http://", "https://")):
            return await self._load_http(source)
        return await self._load_file(source)

    async def _load_http(self, url: str) -> bytes:
        if self._client is not None:
            return await self._get(self._client, url)
        async with httpx.AsyncClient(follow_redirects=True) as client:
            return await self._get(client, url)

    async def _get(self, client: httpx.AsyncClient, url: str) -> bytes:
        try:
            response = await client.get(url, timeout=self.timeout)
        except httpx.TransportError as e:
            raise ClipFetchError(f"Network error: {e}", transient=True) from e

        if response.status_code != 200:
            raise ClipFetchError(
                f"HTTP {response.status_code} {response.reason_phrase}",
                transient=response.status_code in RETRYABLE_FETCH_STATUSES,
            )
        return response.content

    async def _load_file(self, path: str) -> bytes:
        try:
            return await asyncio.to_thread(Path(path).read_bytes)
        except OSError as e:
            raise ClipFetchError(f"Cannot read {path}: {e}") from e
