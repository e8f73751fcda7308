"""Platform capability probe."""

import importlib.util
import logging
import platform
from dataclasses import dataclass
from typing import ClassVar

logger = logging.getLogger(__name__)

# Platforms with a desktop handler for opening files and mailto: links
_SHARE_PLATFORMS = ("Linux", "Darwin", "Windows")


@dataclass(frozen=True)
class PrintingInfo:
    """What the current platform can do with a document.

    can_raster: pages can be rendered to bitmaps (pypdfium2)
    can_print: a print dialog can be shown (QtPrintSupport)
    can_share: the desktop can open or mail a file
    can_list_printers: at least one printer is installed
    """
    can_raster: bool = False
    can_print: bool = False
    can_share: bool = False
    can_list_printers: bool = False

    UNAVAILABLE: ClassVar["PrintingInfo"]


PrintingInfo.UNAVAILABLE = PrintingInfo()


def _module_available(name: str) -> bool:
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        return False


def probe_printing_info() -> PrintingInfo:
    """Detect rasterization, printing and sharing support."""
    can_raster = _module_available("pypdfium2")
    can_print = _module_available("PySide6.QtPrintSupport")

    can_list_printers = False
    if can_print:
        from PySide6.QtPrintSupport import QPrinterInfo
        try:
            can_list_printers = len(QPrinterInfo.availablePrinters()) > 0
        except RuntimeError as e:
            logger.warning("Could not enumerate printers: %s", e)

    info = PrintingInfo(
        can_raster=can_raster,
        can_print=can_print,
        can_share=platform.system() in _SHARE_PLATFORMS,
        can_list_printers=can_list_printers,
    )
    logger.debug("Printing capabilities: %s", info)
    return info
