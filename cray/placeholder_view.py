"""A reserved page shown until its real view exists."""

from __future__ import annotations

from cray.widgets import KeyEvent, TextView


class PlaceholderView:
    """Shows a title, a description and a hint."""

    def __init__(self, title: str, description: str, hint: str) -> None:
        self.body = TextView(f"\n [white::b]{title}[-:-:-]\n\n {description}\n [gray]{hint}[-]\n")
        self.status_bar = TextView(" [gray]Reserved page[-]")
        self.last_event: KeyEvent | None = None

    def handle_input(self, event: KeyEvent | None) -> KeyEvent | None:
        """Record the event and pass it through unhandled."""
        if event is None:
            return None
        # Nothing on this page consumes keys; the caller sees every event.
        self.last_event = event
        return event

    def focus_primitive(self) -> TextView:
        """Return the widget that takes focus."""
        return self.body