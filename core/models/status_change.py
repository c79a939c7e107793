"""Side data for status changes.

Decided at the call boundary (HTTP body, job payload) and handed to
InvoiceService.set_status() fully typed. Plain status writes carry no data.
"""

from typing import Literal

from pydantic import BaseModel, Field


class StornoChange(BaseModel):
    """Reverse the whole invoice."""

    kind: Literal["storno"] = "storno"


class PartialStornoChange(BaseModel):
    """Reverse only the items with these references."""

    kind: Literal["partial_storno"] = "partial_storno"
    item_ids: frozenset[str] = Field(default_factory=frozenset)


StatusChange = StornoChange | PartialStornoChange
