"""
Printer telemetry models for instant-ink.
Pydantic models for the usage reading and the status document schema.
"""
import re
from datetime import datetime, timezone
from typing import List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

_INTEGER_TEXT = re.compile(r"^\s*([0-9]+)\s*$")


def parse_non_negative_int(text: Optional[str]) -> Optional[int]:
    """Return the integer value of ``text`` or None if it is not a plain non-negative integer."""
    if text is None:
        return None
    match = _INTEGER_TEXT.match(text)
    if match is None:
        return None
    return int(match.group(1))


class PrinterReading(BaseModel):
    """Usage and ink telemetry captured from a printer at a point in time."""
    timestamp: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="When the reading was captured (not taken from the document)"
    )
    pages_printed: int = Field(0, ge=0, description="Total impressions; 0 if unrecoverable")
    subscription_impressions: int = Field(0, ge=0, description="Plan-billed impressions; 0 if unrecoverable")
    colour_ink_level: int = Field(0, ge=0, description="Tri-colour cartridge remaining (%)")
    black_ink_level: int = Field(0, ge=0, description="Black cartridge remaining (%)")

    def to_json(self) -> str:
        """Pretty-printed JSON rendering."""
        return self.model_dump_json(indent=2)


# Status document schema. Only the consumable subtree is modelled; the
# impression counters are located by pattern search instead.

class ConsumableRecord(BaseModel):
    """One ink or toner unit from the ConsumableSubunit."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    marker_color: str = Field(..., alias="MarkerColor")
    label_code: Optional[str] = Field(None, alias="ConsumableLabelCode")
    percentage_remaining: Optional[str] = Field(None, alias="ConsumableRawPercentageLevelRemaining")


class ConsumableSubunit(BaseModel):
    """Container of consumable records."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    consumables: List[ConsumableRecord] = Field(..., alias="Consumable", min_length=1)


class ProductUsageDocument(BaseModel):
    """Top level of ProductUsageDyn.xml as far as ink levels are concerned."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    consumable_subunit: ConsumableSubunit = Field(..., alias="ConsumableSubunit")


# Impression counter captures. Firmware revisions encode the same counter in
# different element shapes; each pattern match produces one of these and
# count() is the single place the numeric payload is read.

class _CountCapture(BaseModel):
    text: str

    def count(self) -> Optional[int]:
        """Numeric payload of the captured element text."""
        return parse_non_negative_int(self.text)


class AttributedCapture(_CountCapture):
    """TotalImpressions element carrying a PEID attribute."""
    kind: Literal["attributed"] = "attributed"
    peid: str


class NestedCapture(_CountCapture):
    """TotalImpressions found by position under pudyn:PrinterSubunit."""
    kind: Literal["nested"] = "nested"


class PlainCapture(_CountCapture):
    """Element matched by name only."""
    kind: Literal["plain"] = "plain"


ImpressionCapture = Union[AttributedCapture, NestedCapture, PlainCapture]
