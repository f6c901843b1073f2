"""Tests for claimfix/resolution/location_resolver.py."""
from __future__ import annotations

import asyncio
from types import SimpleNamespace

from claimfix.resolution.location_resolver import (
    LocationResolver,
    ResolvedLocation,
    normalize_search_results,
)
from claimfix.schemas.location import BBox, Location, SearchText


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class FakeAccessor:
    """Viewer read side.

    *text_at* maps a bbox to the text rendered there (a callable or a fixed
    string).  *hits* is returned verbatim from ``search``.
    """

    def __init__(self, text_at=None, hits=None, search_error=None):
        self.text_at = text_at
        self.hits = hits
        self.search_error = search_error
        self.text_requests: list[BBox] = []
        self.searches: list[str] = []

    async def get_text_at_location(self, bbox):
        self.text_requests.append(bbox)
        if callable(self.text_at):
            return self.text_at(bbox)
        return self.text_at

    async def search(self, text):
        self.searches.append(text)
        if self.search_error is not None:
            raise self.search_error
        return self.hits


class SearchOnlyAccessor:
    def __init__(self, hits):
        self.hits = hits

    async def search(self, text):
        return self.hits


class ArrayLike:
    def __init__(self, items):
        self._items = items

    def toArray(self):
        return list(self._items)


class IndexLike:
    def __init__(self, items):
        self._items = items
        self.size = len(items)

    def get(self, index):
        return self._items[index]


def _bbox(page=0, left=10.0, top=20.0, width=30.0, height=5.0) -> BBox:
    return BBox(page_index=page, left=left, top=top, width=width, height=height)


def _hit(page=2, left=300.0, top=40.0, width=60.0, height=12.0) -> dict:
    return {"pageIndex": page, "rect": {"left": left, "top": top, "width": width, "height": height}}


def _resolve(accessor, location: Location, **kwargs) -> ResolvedLocation | None:
    return asyncio.run(LocationResolver(accessor, context_width=200, **kwargs).resolve_location(location))


def _raise(exc):
    def _fn(_bbox):
        raise exc
    return _fn


# ===========================================================================
# bbox tier
# ===========================================================================

class TestBBoxTier:
    def test_verified_bbox_returned_unchanged(self):
        bbox = _bbox()
        result = _resolve(FakeAccessor(text_at="Claim Number"), Location(bbox=bbox))

        assert result == ResolvedLocation(type="bbox", bbox=bbox)

    def test_empty_text_fails_bbox(self):
        assert _resolve(FakeAccessor(text_at=""), Location(bbox=_bbox())) is None

    def test_none_text_fails_bbox(self):
        assert _resolve(FakeAccessor(text_at=None), Location(bbox=_bbox())) is None

    def test_accessor_error_fails_bbox(self):
        accessor = FakeAccessor(text_at=_raise(RuntimeError("viewer gone")))
        assert _resolve(accessor, Location(bbox=_bbox())) is None

    def test_unverifiable_bbox_trusted(self):
        bbox = _bbox()
        result = _resolve(SearchOnlyAccessor(hits=[]), Location(bbox=bbox))

        assert result == ResolvedLocation(type="bbox", bbox=bbox)

    def test_bbox_preferred_over_search(self):
        accessor = FakeAccessor(text_at="text", hits=[_hit()])
        result = _resolve(accessor, Location(bbox=_bbox(), search_text=SearchText(text="Claim")))

        assert result.type == "bbox"
        assert accessor.searches == []


# ===========================================================================
# search_text tier
# ===========================================================================

class TestSearchTier:
    def test_falls_back_when_bbox_fails(self):
        accessor = FakeAccessor(text_at="", hits=[_hit()])
        result = _resolve(accessor, Location(bbox=_bbox(), search_text=SearchText(text="CLM-1")))

        assert result.type == "search_text"
        assert result.bbox == BBox(page_index=2, left=300, top=40, width=60, height=12)
        assert accessor.searches == ["CLM-1"]

    def test_search_only_location(self):
        result = _resolve(FakeAccessor(hits=[_hit()]), Location(search_text=SearchText(text="CLM-1")))
        assert result.type == "search_text"

    def test_occurrence_selects_nth_hit(self):
        hits = [_hit(left=1), _hit(left=2), _hit(left=3)]
        location = Location(search_text=SearchText(text="x", occurrence=2))

        result = _resolve(FakeAccessor(hits=hits), location)

        assert result.bbox.left == 2

    def test_occurrence_past_end_fails(self):
        location = Location(search_text=SearchText(text="x", occurrence=3))
        assert _resolve(FakeAccessor(hits=[_hit(), _hit()]), location) is None

    def test_no_hits_fails(self):
        assert _resolve(FakeAccessor(hits=[]), Location(search_text=SearchText(text="x"))) is None

    def test_search_error_fails(self):
        accessor = FakeAccessor(search_error=RuntimeError("boom"))
        assert _resolve(accessor, Location(search_text=SearchText(text="x"))) is None

    def test_both_tiers_fail(self):
        accessor = FakeAccessor(text_at="", hits=[])
        location = Location(bbox=_bbox(), search_text=SearchText(text="x"))
        assert _resolve(accessor, location) is None

    def test_flat_hit_object(self):
        hit = SimpleNamespace(page=1, x=5.0, y=6.0, width=7.0, height=8.0)
        result = _resolve(FakeAccessor(hits=[hit]), Location(search_text=SearchText(text="x")))

        assert result.bbox == BBox(page_index=1, left=5, top=6, width=7, height=8)

    def test_index_like_results(self):
        result = _resolve(FakeAccessor(hits=IndexLike([_hit(left=9)])), Location(search_text=SearchText(text="x")))
        assert result.bbox.left == 9


# ===========================================================================
# Context verification
# ===========================================================================

class TestContext:
    @staticmethod
    def _page_text(bbox: BBox) -> str:
        # left of the hit reads the label, right of it reads the next field
        if bbox.left < 300:
            return "Claim Number:"
        return "Policy Number:"

    def test_context_before_and_after_verified(self):
        accessor = FakeAccessor(text_at=self._page_text, hits=[_hit()])
        location = Location(search_text=SearchText(
            text="CLM-1", context_before="Claim Number", context_after="Policy",
        ))

        result = _resolve(accessor, location)

        assert result.type == "search_text"
        before, after = accessor.text_requests
        assert (before.left, before.width) == (100, 200)
        assert (after.left, after.width) == (360, 200)
        assert before.page_index == after.page_index == 2

    def test_before_rect_clamped_at_zero(self):
        accessor = FakeAccessor(text_at="Claim Number:", hits=[_hit(left=50)])
        location = Location(search_text=SearchText(text="CLM-1", context_before="Claim"))

        _resolve(accessor, location)

        assert accessor.text_requests[0].left == 0

    def test_context_mismatch_fails(self):
        accessor = FakeAccessor(text_at=self._page_text, hits=[_hit()])
        location = Location(search_text=SearchText(text="CLM-1", context_before="Policy Number"))

        assert _resolve(accessor, location) is None

    def test_context_read_error_keeps_hit(self):
        accessor = FakeAccessor(text_at=_raise(RuntimeError("render failed")), hits=[_hit()])
        location = Location(search_text=SearchText(text="CLM-1", context_before="Claim Number"))

        result = _resolve(accessor, location)

        assert result is not None
        assert result.type == "search_text"
        assert result.bbox.page_index == 2

    def test_bbox_read_error_falls_back_to_search(self):
        # bbox tier fails on the read error, search tier keeps the hit
        accessor = FakeAccessor(text_at=_raise(RuntimeError("render failed")), hits=[_hit()])
        location = Location(
            bbox=_bbox(),
            search_text=SearchText(text="CLM-1", context_after="Policy"),
        )

        assert _resolve(accessor, location).type == "search_text"

    def test_context_skipped_without_text_capability(self):
        location = Location(search_text=SearchText(text="CLM-1", context_before="anything"))
        result = _resolve(SearchOnlyAccessor(hits=[_hit()]), location)

        assert result.type == "search_text"


# ===========================================================================
# normalize_search_results
# ===========================================================================

class TestNormalizeSearchResults:
    def test_none(self):
        assert normalize_search_results(None) == []

    def test_list_and_tuple(self):
        assert normalize_search_results([1, 2]) == [1, 2]
        assert normalize_search_results((1, 2)) == [1, 2]

    def test_to_array(self):
        assert normalize_search_results(ArrayLike([1, 2])) == [1, 2]

    def test_size_and_get(self):
        assert normalize_search_results(IndexLike(["a", "b", "c"])) == ["a", "b", "c"]

    def test_generator(self):
        hits = (h for h in [_hit(), _hit(page=3)])
        assert [h["pageIndex"] for h in normalize_search_results(hits)] == [2, 3]

    def test_generator_hits_resolve(self):
        accessor = SearchOnlyAccessor(hits=iter([_hit(page=4)]))
        result = _resolve(accessor, Location(search_text=SearchText(text="CLM-1")))

        assert result.bbox.page_index == 4

    def test_unknown_shape(self):
        assert normalize_search_results(object()) == []

    def test_string_is_not_a_hit_list(self):
        assert normalize_search_results("CLM-1") == []


def test_resolved_location_pins_bbox():
    bbox = _bbox()
    location = ResolvedLocation(type="search_text", bbox=bbox).to_location()

    assert location.bbox == bbox
    assert location.search_text is None
