"""Custom action bar buttons."""

from dataclasses import dataclass
from typing import Callable, Optional

from PySide6.QtGui import QIcon
from PySide6.QtWidgets import QWidget

from .page_format import DocumentSource, PageFormat

# (preview widget, document source, effective page format)
ActionCallback = Callable[[QWidget, DocumentSource, PageFormat], None]


@dataclass
class PreviewAction:
    """Extra button added to the preview's action bar.

    An action without ``on_pressed`` is shown disabled.
    """
    icon: Optional[QIcon] = None
    text: str = ""
    on_pressed: Optional[ActionCallback] = None
    tooltip: Optional[str] = None

    def __post_init__(self):
        if self.icon is None and not self.text:
            raise ValueError("PreviewAction needs an icon or a text")
