"""
Tests for the result page HTML rendering.
"""

from moodmeter.grid import build_grid
from moodmeter.meter import LOADING_MESSAGE, MeterState, MeterView
from moodmeter.models import MoodEntry
from moodmeter.pages import LIVE_SNIPPET, render_page


def rendering_view():
    entries = [
        MoodEntry(id="1", session_id="abc123", mood="Enraged"),
        MoodEntry(id="2", session_id="abc123", mood="Serene"),
    ]
    return MeterView(
        state=MeterState.RENDERING, session_id="abc123", grid=build_grid(entries)
    )


def test_grid_page():
    html = render_page(rendering_view(), stream_url="/moods/abc123/stream")

    assert html.count('class="cell"') == 100
    assert 'data-index="0"' in html
    assert 'title="Enraged"' in html
    assert "rgba(255,0,0,1)" in html
    assert "rgba(0,128,0,1)" in html
    assert "rgba(0,0,255,0.1)" in html
    assert "new EventSource(\"/moods/abc123/stream\")" in html
    assert "liff" not in html


def test_message_page_has_no_grid():
    view = MeterView(
        state=MeterState.ERROR,
        session_id="abc123",
        message="An error occurred while fetching mood data. Please try again. <boom>",
    )
    html = render_page(view, stream_url="/moods/abc123/stream")

    assert 'class="grid"' not in html
    assert 'class="message"' in html
    assert "&lt;boom&gt;" in html
    assert "EventSource" not in html


def test_loading_page():
    view = MeterView(state=MeterState.LOADING, message=LOADING_MESSAGE)
    html = render_page(view)

    assert 'class="message loading"' in html
    assert LOADING_MESSAGE in html


def test_liff_bootstrap():
    html = render_page(rendering_view(), liff_id="1234-abcd")

    assert "static.line-scdn.net/liff" in html
    assert 'liff.init({ liffId: "1234-abcd" })' in html
    assert "liff.login()" in html


def test_empty_session_page_keeps_listening():
    view = MeterView(
        state=MeterState.NO_DATA,
        session_id="xyz",
        message="No mood data found for this session.",
    )
    html = render_page(view, stream_url="/moods/xyz/stream")

    assert view.is_message
    assert 'id="meter"' in html
    assert "No mood data found for this session." in html
    assert "new EventSource(\"/moods/xyz/stream\")" in html
    assert 'view.state !== "no_data"' in html


def test_live_script_shows_failures_in_place():
    html = render_page(rendering_view(), stream_url="/moods/abc123/stream")

    assert "window.location.reload()" not in LIVE_SNIPPET
    assert "window.location.reload()" not in html
    assert "showMessage(JSON.parse(event.data).error)" in html
    assert "meter.replaceChildren(message)" in html


def test_invalid_session_page_is_static():
    view = MeterView(
        state=MeterState.INVALID_SESSION, message="Invalid or missing session ID."
    )
    html = render_page(view, stream_url="/moods/abc123/stream")

    assert "EventSource" not in html
