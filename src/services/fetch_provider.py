# src/services/fetch_provider.py

"""Page fetching behind an open / load-complete / close interface."""

import asyncio
import itertools
import logging
from abc import ABC, abstractmethod

from curl_cffi.requests import AsyncSession

from src.config.settings import Settings
from src.models.page_content import PageContent

logger = logging.getLogger("price_watch.fetch")

_handle_ids = itertools.count(1)


class FetchHandle:
    """One page load, owned by exactly one check cycle.

    The handle *settles* either when the page finishes loading
    (:meth:`complete`) or when it is closed, whichever comes first.
    ``handle_id`` identifies the cycle in logs and timers.
    """

    def __init__(self, url: str) -> None:
        self.handle_id: int = next(_handle_ids)
        self.url = url
        self.content: PageContent | None = None
        self.closed: bool = False
        self._settled = asyncio.Event()
        self._task: asyncio.Task[None] | None = None

    def __repr__(self) -> str:
        return f"<FetchHandle #{self.handle_id} {self.url}>"

    @property
    def loaded(self) -> bool:
        """True once the page content is available."""
        return self.content is not None

    def complete(self, content: PageContent | None) -> None:
        """Signal load complete; ``None`` means the load failed."""
        if self.closed or self._settled.is_set():
            return
        self.content = content
        self._settled.set()

    async def wait_settled(self) -> None:
        """Wait until the handle has loaded, failed or been closed."""
        await self._settled.wait()

    def release(self) -> bool:
        """Close the handle.  Returns ``False`` if it was already closed."""
        if self.closed:
            return False
        self.closed = True
        self._settled.set()
        if self._task is not None and not self._task.done():
            self._task.cancel()
        return True


class FetchProvider(ABC):
    """Opens isolated, non-interactive page loads."""

    @abstractmethod
    def open(self, url: str) -> FetchHandle:
        """Start loading *url* and return its handle immediately."""
        ...

    def close(self, handle: FetchHandle) -> None:
        """Release *handle*; safe to call any number of times."""
        if handle.release():
            logger.debug("Closed %r", handle)

    async def aclose(self) -> None:
        """Release provider-wide resources."""


class CurlFetchProvider(FetchProvider):
    """Loads pages with a browser-impersonating curl_cffi session."""

    def __init__(self) -> None:
        self.settings = Settings()
        self._session: AsyncSession | None = None

    def _get_session(self) -> AsyncSession:
        if self._session is None:
            self._session = AsyncSession(
                impersonate=self.settings.IMPERSONATE_BROWSER,
            )
        return self._session

    def open(self, url: str) -> FetchHandle:
        handle = FetchHandle(url)
        handle._task = asyncio.create_task(self._load(handle))
        logger.debug("Opened %r", handle)
        return handle

    async def _load(self, handle: FetchHandle) -> None:
        """GET the page with retries and settle the handle."""
        session = self._get_session()
        for attempt in range(self.settings.MAX_RETRIES):
            try:
                resp = await session.get(
                    handle.url,
                    headers=self.settings.DEFAULT_HEADERS,
                    timeout=self.settings.REQUEST_TIMEOUT,
                )
                if resp.status_code == 200:
                    handle.complete(
                        PageContent(url=handle.url, html=resp.text)
                    )
                    return
                logger.warning(
                    "[%d] HTTP %d for %s on attempt %d",
                    handle.handle_id,
                    resp.status_code,
                    handle.url,
                    attempt + 1,
                )
            except asyncio.CancelledError:
                raise
            except Exception as exc:
                logger.warning(
                    "[%d] Request error for %s on attempt %d: %s",
                    handle.handle_id,
                    handle.url,
                    attempt + 1,
                    exc,
                    exc_info=True,
                )
            await asyncio.sleep(
                self.settings.REQUEST_DELAY * (attempt + 1)
            )
        handle.complete(None)

    async def aclose(self) -> None:
        """Close the shared HTTP session."""
        if self._session is not None:
            await self._session.close()
            self._session = None
