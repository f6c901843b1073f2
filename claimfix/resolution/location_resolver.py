"""Location resolver.

Resolution order
----------------
1. ``bbox`` present → read the text inside it.  Non-empty text means the
   rectangle still points at content and is returned unchanged.  A viewer
   without ``get_text_at_location`` cannot verify, so the bbox is trusted.
   An empty read or an accessor error fails this tier.
2. ``search_text`` present → search the document, pick hit number
   ``occurrence`` (1-based), and when context strings are given confirm
   them in a strip of ``context_width`` units to the left/right of the hit.
3. Otherwise ``None``: the caller must not attempt any fix.

Context verification
--------------------
A viewer that cannot read text at a location skips the context check.
An accessor error *during* the check is logged and the hit is kept.

Raw search strings are never logged.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Literal, Mapping

from claimfix.resolution.accessor import TextLocationAccessor
from claimfix.schemas.location import BBox, Location, SearchText

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedLocation:
    type: Literal["bbox", "search_text"]
    bbox: BBox

    def to_location(self) -> Location:
        """Bbox-only location used once the ambiguity has been resolved."""
        return Location(bbox=self.bbox)


# ---------------------------------------------------------------------------
# Search-result normalisation
# ---------------------------------------------------------------------------

def normalize_search_results(results: Any) -> list[Any]:
    """Return *results* as a plain list (unknown shapes → empty list)."""
    if results is None:
        return []
    if isinstance(results, (list, tuple)):
        return list(results)
    for name in ("to_list", "toArray"):
        converter = getattr(results, name, None)
        if callable(converter):
            return list(converter())
    size = getattr(results, "size", None)
    getter = getattr(results, "get", None)
    if isinstance(size, int) and callable(getter):
        return [getter(i) for i in range(size)]
    if isinstance(results, Iterable) and not isinstance(results, (str, bytes, Mapping)):
        return list(results)
    return []


def _read(item: Any, *keys: str) -> Any:
    for key in keys:
        if isinstance(item, dict):
            value = item.get(key)
        else:
            value = getattr(item, key, None)
        if value:
            return value
    return None


def _hit_page(hit: Any) -> int:
    return int(_read(hit, "pageIndex", "page_index", "page") or 0)


def _hit_to_bbox(hit: Any) -> BBox:
    rect = _read(hit, "rect") or hit
    return BBox(
        page_index=_hit_page(hit),
        left=float(_read(rect, "left", "x") or 0),
        top=float(_read(rect, "top", "y") or 0),
        width=float(_read(rect, "width") or 0),
        height=float(_read(rect, "height") or 0),
    )


# ---------------------------------------------------------------------------
# Resolver
# ---------------------------------------------------------------------------

class LocationResolver:
    """Resolve ``Location`` descriptors against a live document viewer."""

    def __init__(self, accessor: TextLocationAccessor | Any, *, context_width: float | None = None) -> None:
        if context_width is None:
            from claimfix.core.settings import get_settings

            context_width = get_settings().context_sample_width
        self.accessor = accessor
        self.context_width = context_width

    async def resolve_location(self, location: Location) -> ResolvedLocation | None:
        if location.bbox is not None and await self._verify_bbox(location.bbox):
            return ResolvedLocation(type="bbox", bbox=location.bbox)

        if location.search_text is not None:
            found = await self._find_by_search_text(location.search_text)
            if found is not None:
                return ResolvedLocation(type="search_text", bbox=found)

        logger.info("Location could not be resolved (bbox=%s, search_text=%s)",
                    location.bbox is not None, location.search_text is not None)
        return None

    async def _verify_bbox(self, bbox: BBox) -> bool:
        get_text = getattr(self.accessor, "get_text_at_location", None)
        if get_text is None:
            return True
        try:
            text = await get_text(bbox)
        except Exception as exc:
            logger.warning("Bbox verification failed on page %d: %s", bbox.page_index, type(exc).__name__)
            return False
        return bool(text)

    async def _search(self, text: str) -> list[Any] | None:
        search = getattr(self.accessor, "search", None) or getattr(self.accessor, "find_text", None)
        if search is None:
            logger.warning("Document accessor does not support text search")
            return None
        return normalize_search_results(await search(text))

    async def _find_by_search_text(self, search_text: SearchText) -> BBox | None:
        try:
            hits = await self._search(search_text.text)
        except Exception as exc:
            logger.warning("Text search failed: %s", type(exc).__name__)
            return None
        if not hits:
            return None

        index = search_text.occurrence - 1
        if index >= len(hits):
            logger.debug("Occurrence %d requested, %d hits found", search_text.occurrence, len(hits))
            return None

        bbox = _hit_to_bbox(hits[index])
        if search_text.context_before or search_text.context_after:
            if not await self._verify_context(bbox, search_text.context_before, search_text.context_after):
                return None
        return bbox

    async def _verify_context(
        self,
        bbox: BBox,
        context_before: str | None,
        context_after: str | None,
    ) -> bool:
        get_text = getattr(self.accessor, "get_text_at_location", None)
        if get_text is None:
            return True

        checks: list[tuple[BBox, str]] = []
        if context_before:
            checks.append((
                BBox(
                    page_index=bbox.page_index,
                    left=max(0.0, bbox.left - self.context_width),
                    top=bbox.top,
                    width=self.context_width,
                    height=bbox.height,
                ),
                context_before,
            ))
        if context_after:
            checks.append((
                BBox(
                    page_index=bbox.page_index,
                    left=bbox.left + bbox.width,
                    top=bbox.top,
                    width=self.context_width,
                    height=bbox.height,
                ),
                context_after,
            ))

        for sample_rect, expected in checks:
            try:
                sampled = await get_text(sample_rect)
            except Exception as exc:
                logger.warning("Context verification failed, keeping hit: %s", type(exc).__name__)
                return True
            if not sampled or expected not in sampled:
                return False
        return True
