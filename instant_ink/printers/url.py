"""
Status document URL handling.

Users usually know only the printer's IP address or hostname; the embedded
web server always exposes the usage document at the same path.
"""
from instant_ink.constants import NetworkConstants


def normalize_printer_url(value: str) -> str:
    """
    Build the canonical status document URL from a host, IP or URL fragment.

    Examples:
        >>> normalize_printer_url("192.168.1.13")
        'http://192.168.1.13/DevMgmt/ProductUsageDyn.xml'
        >>> normalize_printer_url("https://printer.local/")
        'https://printer.local/DevMgmt/ProductUsageDyn.xml'

    Args:
        value: Host, IP address or URL supplied by the user

    Returns:
        URL of the status document. Applying the function to its own
        output returns the output unchanged.
    """
    value = value.strip()

    if NetworkConstants.STATUS_DOCUMENT_PATH in value:
        return value

    if value.startswith(NetworkConstants.SUPPORTED_SCHEMES):
        return value.rstrip("/") + NetworkConstants.STATUS_DOCUMENT_PATH

    return NetworkConstants.DEFAULT_SCHEME + value + NetworkConstants.STATUS_DOCUMENT_PATH
