"""Tests for the preview widget's views and action bar."""

import pytest
from PySide6.QtCore import QEvent
from PySide6.QtWidgets import QApplication, QComboBox, QLabel, QProgressBar, QToolButton

from conftest import FULL_INFO, StaticSource, make_pdf, wait_until
from pdf_preview.actions import PreviewAction
from pdf_preview.config import PreviewConfig
from pdf_preview.page_format import A4, LETTER
from pdf_preview.printing_info import PrintingInfo
from pdf_preview.widget import PdfPreviewWidget

pytestmark = pytest.mark.usefixtures("qapp")


def failing_source(page_format):
    raise RuntimeError("template missing")


@pytest.fixture
def pdf_source(qapp):
    return StaticSource(make_pdf(2, A4))


@pytest.fixture
def make_widget(pdf_source):
    widgets = []

    def factory(source=pdf_source, **kwargs):
        kwargs.setdefault("info", FULL_INFO)
        kwargs.setdefault("config", PreviewConfig(refresh_delay_ms=0, initial_page_format=A4))
        widget = PdfPreviewWidget(source, **kwargs)
        widgets.append(widget)
        return widget

    yield factory
    for widget in widgets:
        widget.close()
        widget.deleteLater()


def error_text(widget):
    label = widget.current_view().findChild(QLabel)
    return label.text() if label is not None else None


class TestViews:

    def test_busy_until_first_page(self, make_widget):
        widget = make_widget()
        view = widget.current_view()
        assert view is not widget.page_list
        assert view.findChild(QProgressBar) is not None

    def test_pages_shown_after_refresh(self, make_widget):
        widget = make_widget()
        widget.refresh()

        assert wait_until(lambda: len(widget.page_list.page_widgets()) == 2)
        assert widget.current_view() is widget.page_list

    def test_zoom_in_and_out(self, make_widget):
        widget = make_widget()
        widget.refresh()
        assert wait_until(lambda: widget.controller.is_rastering is False
                          and widget.controller.page_count == 2)

        widget.page_list.page_widgets()[1].double_clicked.emit(1)
        assert widget.controller.zoom_index == 1
        assert widget.current_view() is widget.zoom_view
        assert widget.zoom_view.zoom == 1.0

        widget.zoom_view.double_clicked.emit()
        assert widget.controller.zoom_index is None
        assert widget.current_view() is widget.page_list

    def test_zoom_is_clamped(self, make_widget):
        widget = make_widget(config=PreviewConfig(refresh_delay_ms=0, max_zoom=3.0))
        widget.zoom_view.set_zoom(10.0)
        assert widget.zoom_view.zoom == 3.0
        widget.zoom_view.set_zoom(0.1)
        assert widget.zoom_view.zoom == 1.0

    def test_error_view(self, make_widget):
        widget = make_widget(source=failing_source)
        errors = []
        widget.error_changed.connect(lambda error: errors.append(error))

        widget.refresh()

        assert wait_until(lambda: error_text(widget) == widget.tr['unable_to_display'])
        assert len(errors) == 1

    def test_error_details(self, make_widget):
        config = PreviewConfig(refresh_delay_ms=0, show_error_details=True)
        widget = make_widget(source=failing_source, config=config)

        widget.refresh()

        assert wait_until(lambda: "template missing" in (error_text(widget) or ""))

    def test_raster_unavailable(self, make_widget):
        widget = make_widget(info=PrintingInfo.UNAVAILABLE)
        widget.refresh()
        assert error_text(widget) == widget.tr['raster_unavailable']

    def test_custom_error_view(self, make_widget):
        widget = make_widget(
            source=failing_source,
            error_view_factory=lambda parent: QLabel("Nothing to see", parent),
        )
        widget.refresh()
        assert wait_until(lambda: error_text(widget) == "Nothing to see")

    def test_layout_change_triggers_refresh(self, make_widget):
        widget = make_widget()
        widget.resize(600, 800)
        widget.show()

        assert wait_until(lambda: widget.controller.page_count == 2)
        assert widget.controller.dpi > 1.0

    def test_pixel_ratio_change_updates_layout(self, make_widget):
        widget = make_widget()
        widget.resize(600, 800)
        widget.show()
        assert wait_until(lambda: widget.controller.page_count == 2)

        calls = []
        widget.controller.update_layout = lambda width, ratio: calls.append((width, ratio))
        QApplication.sendEvent(widget, QEvent(QEvent.Type.DevicePixelRatioChange))

        assert calls == [(widget.width() - 16, widget.devicePixelRatioF())]

    def test_close_disposes_controller(self, make_widget):
        widget = make_widget()
        widget.show()
        widget.close()
        assert widget.controller.is_disposed


class TestActionBar:

    def test_readonly_has_no_action_bar(self, make_widget):
        widget = make_widget(config=None, preset="readonly")
        assert widget.action_bar is None

    def test_buttons_follow_capabilities(self, make_widget):
        info = PrintingInfo(can_raster=True, can_print=False, can_share=True)
        widget = make_widget(info=info)
        texts = [b.text() for b in widget.action_bar.findChildren(QToolButton)]

        assert widget.tr['print'] not in texts
        assert widget.tr['share'] in texts
        assert widget.tr['landscape'] in texts

    def test_print_tooltip_without_printers(self, make_widget):
        widget = make_widget()
        button = next(
            b for b in widget.action_bar.findChildren(QToolButton)
            if b.text() == widget.tr['print']
        )
        assert button.toolTip() == widget.tr['no_printers']

    def test_print_tooltip_with_printers(self, make_widget):
        info = PrintingInfo(can_raster=True, can_print=True, can_share=True, can_list_printers=True)
        widget = make_widget(info=info)
        button = next(
            b for b in widget.action_bar.findChildren(QToolButton)
            if b.text() == widget.tr['print']
        )
        assert button.toolTip() == widget.tr['print']

    def test_format_selection(self, make_widget):
        widget = make_widget()
        combo = widget.action_bar.findChild(QComboBox)
        assert combo.currentText() == "A4"

        combo.setCurrentText("Letter")

        assert widget.controller.page_format == LETTER

    def test_orientation_toggle(self, make_widget):
        widget = make_widget()
        buttons = {b.text(): b for b in widget.action_bar.findChildren(QToolButton)}

        buttons[widget.tr['landscape']].click()

        assert widget.controller.landscape is True
        assert widget.controller.computed_page_format == A4.landscape

    def test_custom_action(self, make_widget, pdf_source):
        calls = []
        action = PreviewAction(text="Save", on_pressed=lambda *args: calls.append(args))
        widget = make_widget(actions=[action])
        button = next(
            b for b in widget.action_bar.findChildren(QToolButton) if b.text() == "Save"
        )

        button.click()

        assert calls == [(widget, pdf_source, widget.controller.computed_page_format)]

    def test_action_without_callback_is_disabled(self, make_widget):
        widget = make_widget(actions=[PreviewAction(text="Later")])
        button = next(
            b for b in widget.action_bar.findChildren(QToolButton) if b.text() == "Later"
        )
        assert not button.isEnabled()

    def test_action_needs_icon_or_text(self):
        with pytest.raises(ValueError):
            PreviewAction()


def test_customize_requires_preset():
    with pytest.raises(ValueError, match="requires preset"):
        PdfPreviewWidget(failing_source, customize={"allow_printing": False})
