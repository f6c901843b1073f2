"""Text-location accessor interface.

The document viewer is an external collaborator.  The resolver only needs
two read capabilities from it, both asynchronous:

``get_text_at_location(bbox)``
    Text currently rendered inside *bbox*, or ``None``/``""`` when empty.
``search(text)``
    Every hit for *text*.  Viewers return anything from a plain list to an
    immutable collection exposing ``to_list()``/``toArray()`` or
    ``size``/``get(i)``; each hit carries a page index and a rectangle,
    either nested under ``rect`` or flat.

Viewers lacking a capability simply omit the method; the resolver checks
with ``getattr`` before calling.
"""
from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from claimfix.schemas.location import BBox


@runtime_checkable
class TextLocationAccessor(Protocol):
    async def get_text_at_location(self, bbox: BBox) -> str | None: ...

    async def search(self, text: str) -> Any: ...
