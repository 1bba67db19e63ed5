"""
HP product usage status extractor.

Turns the ProductUsageDyn.xml document served by HP printers into a
PrinterReading. Ink levels come from schema validation of the consumable
subtree; the two impression counters are located by pattern search because
firmware revisions move and re-prefix them. The two paths run independently
so a relocated counter never costs the ink levels, and vice versa.
"""

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass
from typing import Any, Dict, Iterator, Optional
from xml.parsers import expat

import structlog
from pydantic import ValidationError

from instant_ink.constants import MarkerColors
from instant_ink.models.printer import (
    AttributedCapture,
    ImpressionCapture,
    NestedCapture,
    PlainCapture,
    PrinterReading,
    ProductUsageDocument,
    parse_non_negative_int,
)
from instant_ink.utils.exceptions import ParsingError

logger = structlog.get_logger()

# Optional namespace prefix such as "dd:" or "dd2:"
_PREFIX = r"(?:[^:<>\s/]+:)?"

_TOTAL_IMPRESSIONS_WITH_PEID = re.compile(
    rf"<{_PREFIX}TotalImpressions\b[^>]*\bPEID\s*=\s*[\"']([^\"']*)[\"'][^>]*>"
    rf"\s*([0-9]+)\s*</{_PREFIX}TotalImpressions\s*>"
)

_TOTAL_IMPRESSIONS_IN_PRINTER_SUBUNIT = re.compile(
    rf"<pudyn:PrinterSubunit\b[^>]*>(?:(?!</pudyn:PrinterSubunit>).)*?"
    rf"<{_PREFIX}TotalImpressions\b[^>]*>\s*([0-9]+)\s*</{_PREFIX}TotalImpressions\s*>",
    re.DOTALL
)

_SUBSCRIPTION_IMPRESSIONS = re.compile(
    rf"<{_PREFIX}SubscriptionImpressions\b[^>]*>\s*([0-9]+)\s*</{_PREFIX}SubscriptionImpressions\s*>"
)


@dataclass
class InkLevels:
    """Ink levels read from the consumable subtree."""

    colour: int = 0
    """Tri-colour cartridge remaining (%)"""

    black: int = 0
    """Black cartridge remaining (%)"""


def _parse_tree(xml_text: str) -> ET.Element:
    """Build an element tree with namespace processing disabled.

    Tags keep their raw qualified form ("dd:MarkerColor"), so a prefix the
    firmware never declares is not an error.

    Raises:
        expat.ExpatError: The text is not well-formed XML.
    """
    builder = ET.TreeBuilder()
    parser = expat.ParserCreate()
    parser.buffer_text = True
    parser.StartElementHandler = builder.start
    parser.EndElementHandler = builder.end
    parser.CharacterDataHandler = builder.data
    parser.Parse(xml_text, True)
    return builder.close()


def _local_name(tag: str) -> str:
    """Strip the namespace prefix from a raw qualified tag name."""
    return tag.rsplit(":", 1)[-1]


def _children(element: ET.Element, name: str) -> Iterator[ET.Element]:
    for child in element:
        if _local_name(child.tag) == name:
            yield child


def _leaf_values(element: ET.Element) -> Dict[str, Optional[str]]:
    """Map each leaf child's local name to its stripped text (None when empty)."""
    values: Dict[str, Optional[str]] = {}
    for child in element:
        if len(child):
            continue
        text = child.text.strip() if child.text else ""
        values[_local_name(child.tag)] = text or None
    return values


def _consumable_payload(root: ET.Element) -> Dict[str, Any]:
    """Collect the consumable subtree into the shape ProductUsageDocument validates."""
    payload: Dict[str, Any] = {}
    subunit = next(_children(root, "ConsumableSubunit"), None)
    if subunit is not None:
        payload["ConsumableSubunit"] = {
            "Consumable": [_leaf_values(c) for c in _children(subunit, "Consumable")]
        }
    return payload


class UsageStatusExtractor:
    """Extracts a PrinterReading from HP ProductUsageDyn.xml text.

    Each public method takes the raw document text and holds no state, so
    the paths can be exercised and can fail independently.
    """

    def extract(self, xml_text: str) -> PrinterReading:
        """Extract a complete reading.

        Args:
            xml_text: Raw status document

        Returns:
            PrinterReading with every field populated; counters that
            could not be located are 0.

        Raises:
            ParsingError: The document is not well-formed or its consumable
                subtree does not match the schema.
        """
        pages_printed = self.extract_pages_printed(xml_text)
        subscription_impressions = self.extract_subscription_impressions(xml_text)
        ink = self.extract_ink_levels(xml_text)

        return PrinterReading(
            pages_printed=pages_printed,
            subscription_impressions=subscription_impressions,
            colour_ink_level=ink.colour,
            black_ink_level=ink.black,
        )

    # ------------------------------------------------------------------
    # Structured path
    # ------------------------------------------------------------------

    def parse_document(self, xml_text: str) -> ProductUsageDocument:
        """Validate the consumable subtree against the schema model.

        Raises:
            ParsingError: Malformed XML or missing/invalid consumable data.
        """
        try:
            root = _parse_tree(xml_text.strip())
        except expat.ExpatError as e:
            logger.error("Failed to parse XML", error=str(e))
            logger.debug("XML content", content=xml_text)
            raise ParsingError(str(e)) from e

        try:
            return ProductUsageDocument.model_validate(_consumable_payload(root))
        except ValidationError as e:
            logger.error("Status document does not match consumable schema",
                         root=_local_name(root.tag), errors=e.error_count())
            logger.debug("XML content", content=xml_text)
            raise ParsingError(
                f"unexpected document structure under <{_local_name(root.tag)}>",
                details={"errors": e.errors(include_url=False, include_input=False)}
            ) from e

    def extract_ink_levels(self, xml_text: str) -> InkLevels:
        """Read colour and black ink levels from the consumable records.

        Unknown marker colours are skipped and unparsable percentages
        count as 0; only a structural failure raises.
        """
        document = self.parse_document(xml_text)
        levels = InkLevels()

        for consumable in document.consumable_subunit.consumables:
            percentage = consumable.percentage_remaining
            if percentage is None:
                continue

            if consumable.marker_color == MarkerColors.COLOUR:
                levels.colour = self._parse_percentage(percentage, "colour")
            elif consumable.marker_color == MarkerColors.BLACK:
                levels.black = self._parse_percentage(percentage, "black")
            else:
                logger.debug("Unknown marker color",
                             marker_color=consumable.marker_color,
                             label_code=consumable.label_code)

        return levels

    def _parse_percentage(self, value: str, channel: str) -> int:
        parsed = parse_non_negative_int(value)
        if parsed is None:
            logger.warning("Could not parse ink percentage", channel=channel, value=value)
            return 0
        return parsed

    # ------------------------------------------------------------------
    # Pattern path
    # ------------------------------------------------------------------

    def find_pages_capture(self, xml_text: str) -> Optional[ImpressionCapture]:
        """Locate the TotalImpressions element, preferring the PEID-tagged one."""
        match = _TOTAL_IMPRESSIONS_WITH_PEID.search(xml_text)
        if match:
            return AttributedCapture(peid=match.group(1), text=match.group(2))

        # Firmware without the PEID attribute still nests it in the printer subunit
        match = _TOTAL_IMPRESSIONS_IN_PRINTER_SUBUNIT.search(xml_text)
        if match:
            return NestedCapture(text=match.group(1))

        return None

    def find_subscription_capture(self, xml_text: str) -> Optional[ImpressionCapture]:
        """Locate the SubscriptionImpressions element."""
        match = _SUBSCRIPTION_IMPRESSIONS.search(xml_text)
        if match:
            return PlainCapture(text=match.group(1))
        return None

    def extract_pages_printed(self, xml_text: str) -> int:
        """Total impressions, or 0 when no pattern yields an integer."""
        capture = self.find_pages_capture(xml_text)
        pages = capture.count() if capture is not None else None
        if pages is None:
            logger.warning("Could not extract pages printed from XML")
            return 0

        logger.debug("Found TotalImpressions", pages=pages, source=capture.kind)
        return pages

    def extract_subscription_impressions(self, xml_text: str) -> int:
        """Subscription impressions, or 0 when the element is missing."""
        capture = self.find_subscription_capture(xml_text)
        impressions = capture.count() if capture is not None else None
        if impressions is None:
            logger.warning("Could not extract subscription impressions from XML")
            return 0

        logger.debug("Found SubscriptionImpressions", impressions=impressions)
        return impressions
