from cray.placeholder_view import PlaceholderView
from cray.widgets import Key, KeyEvent


def test_body_holds_title_description_and_hint():
    view = PlaceholderView("Logs", "Log streaming", "coming later")
    assert view.body.text == "\n [white::b]Logs[-:-:-]\n\n Log streaming\n [gray]coming later[-]\n"


def test_status_bar_text():
    view = PlaceholderView("t", "d", "h")
    assert view.status_bar.text == " [gray]Reserved page[-]"


def test_input_passes_through():
    view = PlaceholderView("t", "d", "h")
    event = KeyEvent(Key.ENTER)
    assert view.handle_input(event) is event
    assert view.handle_input(None) is None


def test_focus_is_body():
    view = PlaceholderView("t", "d", "h")
    assert view.focus_primitive() is view.body