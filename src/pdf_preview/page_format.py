"""Page formats for the preview widget.

All dimensions are PostScript points (1/72 inch), the unit pypdfium2 and
Qt's page layouts use for PDF pages.
"""

import locale
from dataclasses import dataclass
from typing import Callable, Dict, Mapping, Optional

POINT = 1.0
INCH = 72.0
CM = INCH / 2.54
MM = INCH / 25.4

# Countries that use US paper sizes by default
_LETTER_COUNTRIES = ("US", "CA", "MX")


@dataclass(frozen=True)
class PageFormat:
    """Physical page size with margins."""
    width: float
    height: float
    margin_left: float = 0.0
    margin_top: float = 0.0
    margin_right: float = 0.0
    margin_bottom: float = 0.0

    def __post_init__(self):
        """Validate dimensions."""
        if not self.width > 0 or not self.height > 0:
            raise ValueError(
                f"Page width and height must be positive, "
                f"got {self.width}x{self.height}"
            )
        margins = (self.margin_left, self.margin_top,
                   self.margin_right, self.margin_bottom)
        if any(m < 0 for m in margins):
            raise ValueError(f"Page margins must not be negative, got {margins}")

    @classmethod
    def with_margin_all(cls, width: float, height: float, margin: float) -> "PageFormat":
        """Create a format with the same margin on every side."""
        return cls(width, height, margin, margin, margin, margin)

    @classmethod
    def from_pixels(
        cls,
        width_px: int,
        height_px: int,
        dpi: float,
        margin_all: float = 0.0
    ) -> "PageFormat":
        """Build a format from a raster's pixel size and its resolution.

        Args:
            width_px: Bitmap width in pixels
            height_px: Bitmap height in pixels
            dpi: Resolution the bitmap was rendered at
            margin_all: Margin applied on every side, in points
        """
        if dpi <= 0:
            raise ValueError(f"dpi must be positive, got {dpi}")
        return cls.with_margin_all(
            width_px * INCH / dpi,
            height_px * INCH / dpi,
            margin_all,
        )

    @property
    def is_landscape(self) -> bool:
        return self.width > self.height

    @property
    def landscape(self) -> "PageFormat":
        """Same page turned so that width >= height.

        Margins rotate with the paper.
        """
        if self.width >= self.height:
            return self
        return PageFormat(
            width=self.height,
            height=self.width,
            margin_left=self.margin_top,
            margin_top=self.margin_right,
            margin_right=self.margin_bottom,
            margin_bottom=self.margin_left,
        )

    @property
    def portrait(self) -> "PageFormat":
        """Same page turned so that height >= width."""
        if self.height >= self.width:
            return self
        return PageFormat(
            width=self.height,
            height=self.width,
            margin_left=self.margin_bottom,
            margin_top=self.margin_left,
            margin_right=self.margin_top,
            margin_bottom=self.margin_right,
        )

    def oriented(self, landscape: Optional[bool]) -> "PageFormat":
        """Apply an orientation override; ``None`` keeps the format as is."""
        if landscape is None:
            return self
        return self.landscape if landscape else self.portrait

    def __str__(self) -> str:
        return (
            f"PageFormat({self.width / MM:.1f}mm x {self.height / MM:.1f}mm, "
            f"margins {self.margin_left / MM:.1f}/{self.margin_top / MM:.1f}/"
            f"{self.margin_right / MM:.1f}/{self.margin_bottom / MM:.1f}mm)"
        )


A3 = PageFormat.with_margin_all(29.7 * CM, 42.0 * CM, 2.0 * CM)
A4 = PageFormat.with_margin_all(21.0 * CM, 29.7 * CM, 2.0 * CM)
A5 = PageFormat.with_margin_all(14.8 * CM, 21.0 * CM, 2.0 * CM)
A6 = PageFormat.with_margin_all(10.5 * CM, 14.8 * CM, 1.0 * CM)
LETTER = PageFormat.with_margin_all(8.5 * INCH, 11.0 * INCH, INCH)
LEGAL = PageFormat.with_margin_all(8.5 * INCH, 14.0 * INCH, INCH)

# Builds the PDF bytes of a document laid out for a page format. Previews
# and shares call it on a worker thread, printing on the GUI thread.
DocumentSource = Callable[["PageFormat"], bytes]

DEFAULT_PAGE_FORMATS: Dict[str, PageFormat] = {
    "A4": A4,
    "Letter": LETTER,
}


def _locale_country() -> Optional[str]:
    try:
        system_locale = locale.getlocale()[0]
    except ValueError:
        return None
    if not system_locale or "_" not in system_locale:
        return None
    return system_locale.split("_")[1].split(".")[0].upper()


def default_page_format(country_code: Optional[str] = None) -> PageFormat:
    """Return the default paper for a country.

    Letter for the United States, Canada and Mexico, A4 everywhere else.
    The country is taken from the process locale when not given.
    """
    if country_code is None:
        country_code = _locale_country() or "US"
    if country_code.upper() in _LETTER_COUNTRIES:
        return LETTER
    return A4


def resolve_page_format(
    initial: Optional[PageFormat],
    formats: Mapping[str, PageFormat]
) -> PageFormat:
    """Pick the starting format among the selectable ones.

    Raises:
        ValueError: If ``formats`` is empty
    """
    if not formats:
        raise ValueError("At least one page format is required")
    page_format = initial if initial is not None else default_page_format()
    if page_format not in formats.values():
        page_format = next(iter(formats.values()))
    return page_format


def format_name(page_format: PageFormat, formats: Mapping[str, PageFormat]) -> Optional[str]:
    """Reverse lookup of a format's display name."""
    for name, candidate in formats.items():
        if candidate == page_format:
            return name
    return None
