from __future__ import annotations

from typing import List

from .contracts import ReleaseHost
from .errors import ValidationError
from .models import Release

DEFAULT_PAGE_SIZE = 100


def list_releases(host: ReleaseHost, page_size: int = DEFAULT_PAGE_SIZE) -> List[Release]:
    """Fetch every non-draft release, page by page, in host order.

    Paging stops at the first empty page or the first page shorter than
    `page_size`.
    """
    if page_size < 1:
        raise ValidationError(f"page_size must be positive: {page_size}")

    out: List[Release] = []
    page = 1
    while True:
        batch = host.list_releases(page=page, per_page=page_size)
        if batch is None:
            break
        if not isinstance(batch, list):
            raise ValidationError(f"release list page {page} is not a list: {type(batch).__name__}")
        if not batch:
            break
        for raw in batch:
            if not isinstance(raw, dict):
                raise ValidationError(f"release list page {page} contains a non-object entry")
            rel = Release.from_api(raw)
            if rel.draft:
                continue
            out.append(rel)
        if len(batch) < page_size:
            break
        page += 1
    return out
