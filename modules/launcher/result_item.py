"""
UI component for displaying search results.
"""

import gi
from fabric.core.service import Signal
from fabric.widgets.box import Box
from fabric.widgets.eventbox import EventBox
from fabric.widgets.image import Image
from fabric.widgets.label import Label

from modules.launcher.result import Result

gi.require_version("Gtk", "3.0")

DEFAULT_ICON = "application-x-executable"


class ResultItem(EventBox):
    """
    Widget for displaying a single search result.
    """

    @Signal
    def clicked(self) -> None:
        """Emitted when result is clicked."""
        pass

    def __init__(self, result: Result, selected: bool = False, **kwargs):
        super().__init__(name="launcher-result-item", **kwargs)

        self.result = result

        main_box = Box(
            name="result-item-main",
            orientation="h",
            spacing=12,
            h_align="fill",
            v_align="center",
        )
        self.add(main_box)

        main_box.add(
            Image(
                icon_name=result.icon or DEFAULT_ICON,
                icon_size=32,
                name="result-item-icon",
            )
        )

        text_box = Box(
            name="result-item-text",
            orientation="v",
            spacing=2,
            h_expand=True,
            v_align="center",
        )
        main_box.add(text_box)

        text_box.add(
            Label(
                label=result.title,
                name="result-item-title",
                h_align="start",
                v_align="center",
                ellipsize="end",
            )
        )

        if result.subtitle:
            text_box.add(
                Label(
                    label=result.subtitle,
                    name="result-item-subtitle",
                    h_align="start",
                    v_align="center",
                    ellipsize="end",
                )
            )

        if result.plugin_name:
            text_box.add(
                Label(
                    label=f"via {result.plugin_name}",
                    name="result-item-plugin",
                    h_align="start",
                    v_align="center",
                    ellipsize="end",
                )
            )

        self.connect("button-press-event", self._on_button_press)
        self.set_selected(selected)

    def set_selected(self, selected: bool):
        """Set the selection state of this result item."""
        if selected:
            self.add_style_class("selected")
        else:
            self.remove_style_class("selected")

    def _on_button_press(self, widget, event):
        if event.button == 1:  # Left click
            self.clicked.emit()
            return True
        return False
