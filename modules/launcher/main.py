from typing import Callable, List

from fabric.widgets.box import Box
from fabric.widgets.entry import Entry
from fabric.widgets.scrolledwindow import ScrolledWindow
from fabric.widgets.window import Window
from gi.repository import Gdk, GLib
from loguru import logger

from config.data import APP_NAME_CAP
from modules.launcher.dispatcher import QueryDispatcher
from modules.launcher.result import Result
from modules.launcher.result_item import ResultItem
from services.instance import ClosePolicy
from utils.functions import run_in_thread

LAUNCHER_WIDTH = 550
LAUNCHER_HEIGHT = 260


class Launcher(Window):
    """
    Main launcher window: a search entry and the ranked results of all
    plugins.
    """

    def __init__(
        self,
        dispatcher: QueryDispatcher,
        close_policy: ClosePolicy,
        on_quit: Callable[[], None],
        max_results: int = 10,
        debounce_ms: int = 150,
        **kwargs,
    ):
        super().__init__(
            name="launcher-window",
            title=APP_NAME_CAP,
            visible=False,
            all_visible=False,
            **kwargs,
        )

        self.dispatcher = dispatcher
        self.close_policy = close_policy
        self.on_quit = on_quit
        self.max_results = max_results
        self.debounce_ms = debounce_ms

        # Current results and selection
        self.results: List[Result] = []
        self.selected_index = 0
        self.query = ""

        main_box = Box(
            name="launcher",
            orientation="v",
            spacing=0,
            h_align="center",
            v_align="center",
        )
        self.add(main_box)

        self.search_entry = Entry(
            name="launcher-search",
            placeholder="Type to search...",
            h_expand=True,
            h_align="fill",
        )
        self.search_entry.connect("changed", self._on_search_changed)
        self.search_entry.connect("activate", self._on_entry_activate)
        main_box.add(self.search_entry)

        self.results_scroll = ScrolledWindow(
            name="launcher-results-scroll",
            h_scrollbar_policy="never",
            min_content_size=(LAUNCHER_WIDTH, LAUNCHER_HEIGHT),
            max_content_size=(LAUNCHER_WIDTH, LAUNCHER_HEIGHT),
        )
        self.results_box = Box(
            name="launcher-results",
            orientation="v",
            spacing=0,
        )
        self.results_scroll.add(self.results_box)
        main_box.add(self.results_scroll)

        self.connect("key-press-event", self._on_key_press)
        self.connect("delete-event", self._on_delete)

    def show_launcher(self):
        """Show the launcher with an empty search and focus it."""
        self.search_entry.set_text("")
        self._clear_results()
        self.show_all()
        self.results_scroll.hide()
        self.present()
        self.search_entry.grab_focus()
        return False

    def close_launcher(self):
        """Close the launcher, hiding or quitting depending on the close policy."""
        self.close_policy.on_window_close(hide=self._hide_launcher, quit=self.on_quit)

    def _hide_launcher(self):
        self.hide()
        self.search_entry.set_text("")
        self._clear_results()

    def _on_delete(self, *_):
        self.close_launcher()
        return True

    def _on_search_changed(self, entry):
        self.query = entry.get_text().strip()
        if self.query:
            # Debounce search to avoid too many queries
            GLib.timeout_add(self.debounce_ms, self._perform_search, self.query)
        else:
            self._clear_results()

    def _perform_search(self, query: str) -> bool:
        # Only search if query hasn't changed
        if query == self.query:
            self._search_worker(query)
        return False  # Don't repeat timeout

    @run_in_thread
    def _search_worker(self, query: str):
        results = self.dispatcher.query(query, limit=self.max_results)
        GLib.idle_add(self._show_results, query, results)

    def _show_results(self, query: str, results: List[Result]) -> bool:
        # A newer query is pending, drop these results
        if query != self.query:
            return False

        self.results = results
        self.selected_index = 0
        self._update_results_display()
        return False

    def _update_results_display(self):
        for child in self.results_box.get_children():
            self.results_box.remove(child)

        for i, result in enumerate(self.results):
            result_item = ResultItem(result=result, selected=(i == self.selected_index))
            result_item.clicked.connect(lambda *_, idx=i: self._on_result_clicked(idx))
            self.results_box.add(result_item)

        self.results_box.show_all()
        if self.results:
            self.results_scroll.show()
        else:
            self.results_scroll.hide()

    def _update_selection(self):
        for i, child in enumerate(self.results_box.get_children()):
            if isinstance(child, ResultItem):
                child.set_selected(i == self.selected_index)

    def _clear_results(self):
        self.results = []
        self.selected_index = 0
        for child in self.results_box.get_children():
            self.results_box.remove(child)
        self.results_scroll.hide()

    def _on_key_press(self, _widget, event):
        keyval = event.keyval

        if keyval == Gdk.KEY_Escape:
            self.close_launcher()
            return True

        if keyval in (Gdk.KEY_Up, Gdk.KEY_Down) and self.results:
            step = -1 if keyval == Gdk.KEY_Up else 1
            self.selected_index = (self.selected_index + step) % len(self.results)
            self._update_selection()
            return True

        return False

    def _on_entry_activate(self, _entry):
        self._activate_selected()

    def _on_result_clicked(self, index: int):
        self.selected_index = index
        self._activate_selected()

    def _activate_selected(self):
        """Execute the currently selected result."""
        if not self.results or not 0 <= self.selected_index < len(self.results):
            return

        result = self.results[self.selected_index]
        try:
            result.execute()
        except Exception as e:
            logger.opt(exception=e).warning(f"[Launcher] Error executing result {result}: {e}")
        self.close_launcher()
