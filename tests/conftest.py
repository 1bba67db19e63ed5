from typing import Awaitable, Callable, List

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from instant_ink.constants import NetworkConstants
from instant_ink.utils.config import clear_settings, reload_settings
from instant_ink.utils.logging_config import setup_logging

NAMESPACES = (
    'xmlns:dd="http://www.hp.com/schemas/imaging/con/dictionaries/1.0/" '
    'xmlns:pudyn="http://www.hp.com/schemas/imaging/con/ledm/productusagedyn/2007/12/11"'
)

NOMINAL_PRINTER_SUBUNIT = """
  <pudyn:PrinterSubunit>
    <dd:TotalImpressions PEID="5082">1234</dd:TotalImpressions>
    <dd:MonochromeImpressions>800</dd:MonochromeImpressions>
    <dd:ColorImpressions>434</dd:ColorImpressions>
    <dd:SubscriptionImpressions>321</dd:SubscriptionImpressions>
  </pudyn:PrinterSubunit>"""


def consumable(marker_color: str, percentage: str = None, label_code: str = None) -> str:
    """Render one pudyn:Consumable element."""
    parts = [f"<dd:MarkerColor>{marker_color}</dd:MarkerColor>"]
    if label_code is not None:
        parts.append(f"<dd:ConsumableLabelCode>{label_code}</dd:ConsumableLabelCode>")
    if percentage is not None:
        parts.append(
            "<dd:ConsumableRawPercentageLevelRemaining>"
            f"{percentage}"
            "</dd:ConsumableRawPercentageLevelRemaining>"
        )
    return "\n    <pudyn:Consumable>\n      " + "\n      ".join(parts) + "\n    </pudyn:Consumable>"


def usage_document(printer_subunit: str = NOMINAL_PRINTER_SUBUNIT, consumables: List[str] = None) -> str:
    """Render a ProductUsageDyn.xml document."""
    if consumables is None:
        consumables = [consumable("CyanMagentaYellow", "64", "CMY"), consumable("Black", "35", "K")]
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        f"<pudyn:ProductUsageDyn {NAMESPACES}>\n"
        "  <dd:Version><dd:Revision>SVN-IPG-LEDM.119</dd:Revision></dd:Version>"
        f"{printer_subunit}\n"
        "  <pudyn:ConsumableSubunit>"
        f"{''.join(consumables)}\n"
        "  </pudyn:ConsumableSubunit>\n"
        "</pudyn:ProductUsageDyn>\n"
    )


@pytest.fixture(scope="session", autouse=True)
def structured_logging() -> None:
    """Route structlog through stdlib logging so caplog sees it."""
    setup_logging("debug")


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch: pytest.MonkeyPatch):
    """Point the persisted config at a per-test directory."""
    monkeypatch.setenv("INSTANT_INK_CONFIG_DIR", str(tmp_path / "config"))
    monkeypatch.delenv("INSTANT_INK_LOW_INK_THRESHOLD", raising=False)
    monkeypatch.delenv("INSTANT_INK_LOG_LEVEL", raising=False)
    monkeypatch.setenv("NO_COLOR", "1")
    yield reload_settings()
    clear_settings()


@pytest.fixture()
def nominal_xml() -> str:
    return usage_document()


@pytest.fixture()
async def serve_status() -> Callable[[Callable[[web.Request], Awaitable[web.StreamResponse]]], Awaitable[str]]:
    """Start a local server for the status path and return its URL."""
    servers: List[TestServer] = []

    async def _serve(handler) -> str:
        app = web.Application()
        app.router.add_get(NetworkConstants.STATUS_DOCUMENT_PATH, handler)
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return str(server.make_url(NetworkConstants.STATUS_DOCUMENT_PATH))

    yield _serve

    for server in servers:
        await server.close()
