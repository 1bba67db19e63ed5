"""
HP printer integration for instant-ink.
Fetches the product usage document over HTTP and extracts a reading.
"""
import asyncio
from typing import Optional

import aiohttp
import structlog

from instant_ink.constants import NetworkConstants
from instant_ink.models.printer import PrinterReading
from instant_ink.printers.status_extractors import UsageStatusExtractor
from instant_ink.utils.exceptions import PrinterNetworkError

logger = structlog.get_logger()


class HPPrinterClient:
    """Client session for a single printer status endpoint.

    One GET per call, no retries. Use as an async context manager or call
    close() when done.
    """

    def __init__(
        self,
        printer_url: str,
        timeout_seconds: int = NetworkConstants.CONNECTION_TIMEOUT_SECONDS,
        extractor: Optional[UsageStatusExtractor] = None
    ):
        """
        Initialize HP printer client.

        Args:
            printer_url: Normalized status document URL
            timeout_seconds: Upper bound for the whole request
            extractor: Extractor for the response body
        """
        self.printer_url = printer_url
        self.timeout_seconds = timeout_seconds
        self.extractor = extractor or UsageStatusExtractor()
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self) -> "HPPrinterClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session."""
        if self.session is None:
            headers = {'User-Agent': NetworkConstants.USER_AGENT}
            timeout = aiohttp.ClientTimeout(total=self.timeout_seconds)
            self.session = aiohttp.ClientSession(headers=headers, timeout=timeout)
        return self.session

    async def close(self) -> None:
        """Close HTTP session."""
        if self.session:
            await self.session.close()
            self.session = None

    async def fetch_document(self) -> str:
        """
        Download the raw status document.

        The body is decoded as UTF-8 whatever charset the printer declares.

        Raises:
            PrinterNetworkError: Connection failure, timeout or HTTP error status.
        """
        logger.debug("Fetching data", url=self.printer_url)
        session = await self._get_session()

        try:
            async with session.get(self.printer_url) as response:
                response.raise_for_status()
                body = await response.read()
        except asyncio.TimeoutError as e:
            error_msg = f"Request timed out after {self.timeout_seconds}s"
            logger.error("Printer request timeout", url=self.printer_url, error=error_msg)
            raise PrinterNetworkError(self.printer_url, error_msg) from e
        except aiohttp.ClientResponseError as e:
            error_msg = f"HTTP {e.status}: {e.message}"
            logger.error("Printer HTTP error", url=self.printer_url, status=e.status, error=error_msg)
            raise PrinterNetworkError(self.printer_url, error_msg, details={"status": e.status}) from e
        except aiohttp.ClientError as e:
            error_msg = str(e) or type(e).__name__
            logger.error("Printer connection failed", url=self.printer_url, error=error_msg)
            raise PrinterNetworkError(self.printer_url, error_msg) from e

        xml_content = body.decode("utf-8", errors="replace")
        logger.debug("Received XML content", length=len(xml_content))
        return xml_content

    async def fetch_reading(self) -> PrinterReading:
        """
        Fetch the status document and extract a reading.

        Raises:
            PrinterNetworkError: The document could not be downloaded.
            ParsingError: The document failed structural validation.
        """
        xml_content = await self.fetch_document()
        return self.extractor.extract(xml_content)
