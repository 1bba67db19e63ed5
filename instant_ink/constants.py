"""
Application-wide constants for instant-ink.

Constants are organized into logical groups using classes as namespaces.
"""


class NetworkConstants:
    """
    Network-related configuration constants.

    HP printers serve their status documents over plain HTTP on the LAN.
    """

    STATUS_DOCUMENT_PATH: str = "/DevMgmt/ProductUsageDyn.xml"
    """Path of the product usage document on the embedded web server"""

    DEFAULT_SCHEME: str = "http://"
    """Scheme used when the user supplies a bare host or IP"""

    SUPPORTED_SCHEMES: tuple = ("http://", "https://")
    """Schemes accepted as an explicit prefix"""

    CONNECTION_TIMEOUT_SECONDS: int = 30
    """Default request timeout for the status document"""

    USER_AGENT: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/70.0.3538.77 Safari/537.36"
    )
    """Some firmware rejects requests without a browser user agent"""


class MarkerColors:
    """Consumable colour tags reported by the printer."""

    COLOUR: str = "CyanMagentaYellow"
    """Tri-colour cartridge"""

    BLACK: str = "Black"
    """Black cartridge"""


class AlertConstants:
    """Thresholds for console alerts."""

    LOW_INK_THRESHOLD_PERCENT: int = 20
    """Warn when an ink level is at or below this percentage"""


class ConfigConstants:
    """Persisted configuration locations."""

    CONFIG_DIR_NAME: str = "hp-instant-ink"
    CONFIG_FILE_NAME: str = "config.json"
    DISPLAY_TIMEZONE: str = "Europe/Stockholm"
