"""Lazy iterator over the cursor-linked prediction list.

WHY: GET /predictions returns one page at a time with opaque ``next`` and
``previous`` cursors. Callers want a flat sequence of predictions, not a
page-and-cursor dance, and they should not pay for pages they never read.

HOW: PredictionListIterator fetches a page only when the current one is
used up, then hands out its items one by one in the order the server sent
them. The ``next`` cursor of each page is turned into query parameters for
the following request.

RULES:
- Forward-only, not restartable, single consumer
- IteratorDone once a page with a null ``next`` has been consumed
- Empty pages are skipped while a cursor remains
- A page whose ``next`` repeats the cursor that fetched it is a
  ResponseDecodeError, not another request
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional
from urllib.parse import urlsplit

import httpx

from replicate_predictions.api.errors import IteratorDone, ResponseDecodeError
from replicate_predictions.api.models import PredictionListItem, PredictionPage

if TYPE_CHECKING:
    from replicate_predictions.api.client import PredictionClient


def cursor_params(cursor: str) -> httpx.QueryParams:
    """Turn a ``next``/``previous`` cursor into query parameters.

    The server may send either a full URL or a bare query string; only the
    query part is kept, the request always goes to the list endpoint.
    """
    query = urlsplit(cursor).query if "?" in cursor else cursor
    return httpx.QueryParams(query)


class PredictionListIterator:
    """Walks prediction list pages, fetching the next one when needed.

    Use ``await iterator.next()`` until it raises IteratorDone, or simply
    ``async for item in iterator``.
    """

    def __init__(self, client: PredictionClient) -> None:
        self._client = client
        self._page: Optional[PredictionPage] = None
        self._index = 0

    @property
    def page(self) -> Optional[PredictionPage]:
        """The page currently being consumed, None before the first fetch."""
        return self._page

    @property
    def exhausted(self) -> bool:
        return self._page is not None and self._page.next is None and self._index >= len(
            self._page.results
        )

    def __aiter__(self) -> PredictionListIterator:
        return self

    async def __anext__(self) -> PredictionListItem:
        return await self.next()

    async def next(self) -> PredictionListItem:
        """Return the next item, fetching a page first when the current one is used up.

        Raises IteratorDone once the last page (``next`` is null) has been
        consumed. Empty pages are skipped while a cursor remains.
        """
        while self._page is None or self._index >= len(self._page.results):
            if self._page is not None and self._page.next is None:
                raise IteratorDone

            cursor = self._page.next if self._page is not None else None
            params = cursor_params(cursor) if cursor is not None else None
            page = await self._client.fetch_page(params)
            if cursor is not None and page.next == cursor:
                raise ResponseDecodeError(
                    "Prediction list page repeats its own cursor: {}".format(cursor)
                )
            self._page = page
            self._index = 0

        item = self._page.results[self._index]
        self._index += 1
        return item
