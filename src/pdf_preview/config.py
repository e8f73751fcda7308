"""Configuration classes for the PDF Preview Widget."""

from dataclasses import dataclass, fields
from pathlib import PurePath
from typing import Dict, List, Optional, Tuple

from .page_format import DEFAULT_PAGE_FORMATS, PageFormat

# left, top, right, bottom in device-independent pixels
Margins = Tuple[int, int, int, int]

DEFAULT_PREVIEW_PAGE_MARGIN: Margins = (20, 8, 20, 12)

DEFAULT_SCROLL_VIEW_STYLESHEET = """
    QScrollArea, QGraphicsView, QStackedWidget {
        background: qlineargradient(x1:0, y1:0, x2:0, y2:1,
                                    stop:0 #bdbdbd, stop:1 #eeeeee);
        border: none;
    }
"""


@dataclass
class PreviewConfig:
    """Main configuration for the preview widget.

    Combines document, action bar, sharing and display options.
    """
    # Document
    initial_page_format: Optional[PageFormat] = None  # None: locale default
    page_formats: Optional[Dict[str, PageFormat]] = None  # None: A4 and Letter
    pdf_file_name: Optional[str] = None  # Must include the extension
    pages: Optional[List[int]] = None  # Zero-based; None shows every page
    should_repaint: bool = False  # Rebuild on every host update

    # Actions
    allow_printing: bool = True
    allow_sharing: bool = True
    use_actions: bool = True
    can_change_page_format: bool = True
    can_change_orientation: bool = True

    # Printing
    dynamic_layout: bool = True  # Re-layout to the printer's paper and margins
    print_dpi: int = 300

    # Sharing
    share_extra_body: Optional[str] = None
    share_extra_subject: Optional[str] = None
    share_extra_emails: Optional[List[str]] = None

    # Display
    max_page_width: Optional[float] = None
    preview_page_margin: Margins = DEFAULT_PREVIEW_PAGE_MARGIN
    padding: Margins = (0, 0, 0, 0)
    scroll_view_stylesheet: Optional[str] = None
    page_stylesheet: Optional[str] = None
    show_error_details: bool = False
    max_zoom: float = 5.0
    refresh_delay_ms: int = 1000  # Debounce for layout changes

    def __post_init__(self):
        """Validate configuration values."""
        if self.refresh_delay_ms < 0:
            raise ValueError(
                f"refresh_delay_ms must not be negative, got {self.refresh_delay_ms}"
            )
        if self.print_dpi <= 0:
            raise ValueError(f"print_dpi must be positive, got {self.print_dpi}")
        if self.max_page_width is not None and self.max_page_width <= 0:
            raise ValueError(
                f"max_page_width must be positive, got {self.max_page_width}"
            )
        if self.max_zoom < 1:
            raise ValueError(f"max_zoom must be at least 1, got {self.max_zoom}")
        if self.page_formats is not None and not self.page_formats:
            raise ValueError("page_formats must contain at least one format")
        if self.pages is not None and any(p < 0 for p in self.pages):
            raise ValueError(f"pages must be zero-based indices, got {self.pages}")
        if self.pdf_file_name is not None:
            name = PurePath(self.pdf_file_name).name
            if not name or name != self.pdf_file_name:
                raise ValueError(
                    f"pdf_file_name must be a bare file name, got '{self.pdf_file_name}'"
                )

    @property
    def effective_page_formats(self) -> Dict[str, PageFormat]:
        """Selectable formats, falling back to A4 and Letter."""
        if self.page_formats is None:
            return dict(DEFAULT_PAGE_FORMATS)
        return dict(self.page_formats)

    @property
    def document_name(self) -> str:
        """Job name used for printing."""
        return self.pdf_file_name or "Document"

    @property
    def share_file_name(self) -> str:
        return self.pdf_file_name or "document.pdf"


class ConfigPresets:
    """Pre-configured settings for common preview use cases.

    Available Presets:
        - readonly: Preview only, no actions
        - simple: Print and share, fixed page format
        - full: Every action and format control (default)

    Examples:
        >>> widget = PdfPreviewWidget(build, preset="simple")

        >>> config = ConfigPresets.full()
        >>> config.allow_sharing = False
        >>> widget = PdfPreviewWidget(build, config=config)

        >>> ConfigPresets.list()
        ['readonly', 'simple', 'full']
    """

    @staticmethod
    def list() -> List[str]:
        """List all available preset names."""
        return ["readonly", "simple", "full"]

    @staticmethod
    def readonly() -> PreviewConfig:
        """Preview without printing, sharing or format controls.

        Use Cases:
            - Embedded document thumbnails
            - Confirmation screens
        """
        return PreviewConfig(
            allow_printing=False,
            allow_sharing=False,
            use_actions=False,
            can_change_page_format=False,
            can_change_orientation=False,
        )

    @staticmethod
    def simple() -> PreviewConfig:
        """Print and share a document laid out by the host.

        Features:
            - Print and share enabled
            - Page format fixed by the host
            - Print format derived from the rendered pages
        """
        return PreviewConfig(
            allow_printing=True,
            allow_sharing=True,
            can_change_page_format=False,
            can_change_orientation=False,
        )

    @staticmethod
    def full() -> PreviewConfig:
        """Every action and format control enabled."""
        return PreviewConfig()

    @staticmethod
    def get(preset_name: str) -> PreviewConfig:
        """Get a preset configuration by name.

        Raises:
            ValueError: If preset name is unknown
        """
        preset_map = {
            "readonly": ConfigPresets.readonly,
            "simple": ConfigPresets.simple,
            "full": ConfigPresets.full,
        }

        if preset_name not in preset_map:
            available = ", ".join(ConfigPresets.list())
            raise ValueError(
                f"Unknown preset '{preset_name}'. "
                f"Available presets: {available}"
            )

        return preset_map[preset_name]()

    @staticmethod
    def custom(base: str = "full", **overrides) -> PreviewConfig:
        """Create a custom configuration starting from a preset.

        Example:
            >>> config = ConfigPresets.custom(
            ...     base="readonly",
            ...     allow_printing=True,
            ...     use_actions=True,
            ... )

        Raises:
            ValueError: If base preset or a setting is unknown
        """
        config = ConfigPresets.get(base)

        valid = {f.name for f in fields(config)}
        for key, value in overrides.items():
            if key not in valid:
                raise ValueError(f"Unknown setting '{key}'")
            setattr(config, key, value)

        # setattr bypasses the dataclass validation
        config.__post_init__()
        return config
