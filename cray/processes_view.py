"""Process workspace combining the summary, tree and top tabs."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from contextlib import suppress
from enum import IntEnum

from cray.models import ContainerDetail, Runtime
from cray.process_summary import ProcessSummaryView
from cray.process_tree import ProcessTreeView
from cray.top_view import TopView
from cray.widgets import Key, KeyEvent, Table, TextView, TreeView

_TABS = (("Summary", "s"), ("Tree", "g"), ("Top", "t"))


class ProcessTab(IntEnum):
    """Sub-tab of the process workspace."""

    SUMMARY = 0
    TREE = 1
    TOP = 2


_TAB_KEYS = {"s": ProcessTab.SUMMARY, "g": ProcessTab.TREE, "t": ProcessTab.TOP}


def _in_background(action: Callable[[], None]) -> threading.Thread:
    def run() -> None:
        # Failures surface on the next explicit refresh.
        with suppress(Exception):
            action()

    thread = threading.Thread(target=run, daemon=True)
    thread.start()
    return thread


class ProcessesView:
    """Hosts process summary, tree and top views behind a tab bar."""

    def __init__(self, runtime: Runtime | None = None) -> None:
        self.summary_view = ProcessSummaryView()
        self.tree_view = ProcessTreeView(runtime)
        self.top_view = TopView(runtime)
        self.active_tab = ProcessTab.SUMMARY
        self.last_refresh: float | None = None
        self._lock = threading.Lock()
        self.tab_bar = TextView()
        self._update_tab_bar()

    def set_container(self, container_id: str) -> None:
        """Set the container for the tree and top views."""
        self.top_view.set_container(container_id)
        self.tree_view.set_container(container_id)
        with self._lock:
            self.last_refresh = None

    def set_detail(self, detail: ContainerDetail | None) -> None:
        """Pass container detail to the summary and tree views."""
        self.summary_view.set_detail(detail)
        self.tree_view.set_detail(detail)

    def refresh(self) -> None:
        """Refresh the active tab; runtime errors propagate."""
        with self._lock:
            self.last_refresh = time.time()
            active = self.active_tab
        if active is ProcessTab.TREE:
            self.tree_view.refresh()
        elif active is ProcessTab.TOP:
            self.top_view.refresh()
        else:
            self.summary_view.refresh()

    def start_auto_refresh(self) -> None:
        """Start periodic refresh when the top tab is active."""
        if self.active_tab is ProcessTab.TOP:
            self.top_view.start_auto_refresh()

    def stop_auto_refresh(self) -> None:
        """Stop any periodic refresh."""
        self.top_view.stop_auto_refresh()

    def handle_input(self, event: KeyEvent | None) -> KeyEvent | None:
        """Switch tabs or pass the event to the active tab."""
        if event is None:
            return None
        if event.key is Key.CTRL_C:
            return event
        if event.key is Key.RUNE:
            tab = _TAB_KEYS.get(event.rune.lower())
            if event.rune == "[":
                tab = ProcessTab((self.active_tab + 2) % len(ProcessTab))
            elif event.rune == "]":
                tab = ProcessTab((self.active_tab + 1) % len(ProcessTab))
            if tab is not None:
                self.switch_tab(tab)
                return None
        if self.active_tab is ProcessTab.TREE:
            return self.tree_view.handle_input(event)
        if self.active_tab is ProcessTab.TOP:
            return self.top_view.handle_input(event)
        return self.summary_view.handle_input(event)

    def focus_primitive(self) -> TreeView | Table:
        """Return the focus target of the active tab."""
        if self.active_tab is ProcessTab.TREE:
            return self.tree_view.focus_primitive()
        if self.active_tab is ProcessTab.TOP:
            return self.top_view.focus_primitive()
        return self.summary_view.focus_primitive()

    def switch_tab(self, tab: ProcessTab) -> None:
        """Activate a tab, refreshing it and managing top's auto refresh."""
        self.top_view.stop_auto_refresh()
        with self._lock:
            self.active_tab = ProcessTab(tab)
        if tab is ProcessTab.SUMMARY:
            self.summary_view.refresh()
        elif tab is ProcessTab.TREE:
            _in_background(self.tree_view.refresh)
        elif tab is ProcessTab.TOP:
            self.top_view.start_auto_refresh()
            _in_background(self.top_view.refresh)
        self._update_tab_bar()

    def _update_tab_bar(self) -> None:
        text = " "
        for tab, (label, key) in zip(ProcessTab, _TABS):
            if tab is self.active_tab:
                text += f"[black:aqua] {label}({key}) [-:-] "
            else:
                text += f"[white:darkslategray] {label}({key}) [-:-] "
        self.tab_bar.text = text