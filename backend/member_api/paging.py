"""Page assembly with an optional count query.

`build_page` decides from the fetched slice alone whether the total is
already known; the count query only runs when it is not.
"""

import json
import logging
from typing import Callable, List, Optional

from .schemas import Page, PageRequest

logger = logging.getLogger("member_api.paging")


def known_total(content_size: int, page_request: PageRequest) -> Optional[int]:
    """Return the total implied by a short page, or `None` if it must be counted.

    A page shorter than the limit is the last page: with offset 0 its size
    is the total, otherwise (when non-empty) offset + size is. A full page,
    or an empty page past offset 0, says nothing about the total.
    """
    if content_size >= page_request.limit:
        return None
    if page_request.offset == 0:
        return content_size
    if content_size > 0:
        return page_request.offset + content_size
    return None


def build_page(content: List, page_request: PageRequest, count_fn: Callable[[], int], page_cls=Page) -> Page:
    """Wrap `content` in a `Page`, calling `count_fn` only when needed."""
    total = known_total(len(content), page_request)
    if total is None:
        total = count_fn()
    else:
        logger.debug(
            "count_skipped %s",
            json.dumps({"offset": page_request.offset, "limit": page_request.limit, "total": total}),
        )
    return page_cls.create(content, page_request, total)
