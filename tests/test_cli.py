"""
Tests for the CLI output formatting.
"""

import json

from httpx_sse import ServerSentEvent

from moodmeter.cli import _handle_sse_event, format_grid, format_view
from moodmeter.grid import build_grid
from moodmeter.meter import MeterState, MeterView
from moodmeter.models import MoodEntry


def make_grid(*moods):
    return build_grid(
        [MoodEntry(id=str(i), session_id="abc123", mood=m) for i, m in enumerate(moods)]
    )


def test_format_grid():
    output = format_grid(make_grid("Happy", "Happy", "Calm", "Meh"))
    lines = output.splitlines()

    assert len(lines[0].split(" ")) == 10
    # Happy sits at row 3, column 7 with full opacity
    assert lines[3].split(" ")[7] == "@@"
    assert lines[0].split(" ")[0] == ".."
    assert "Happy             2  1.00" in output
    assert "Calm              1  0.50" in output
    assert output.index("Happy") < output.index("Calm")
    assert "(1 entries with unknown moods)" in output


def test_format_message_view():
    view = MeterView(
        state=MeterState.NO_DATA, message="No mood data found for this session."
    )
    assert format_view(view) == "No mood data found for this session."


def test_handle_sse_event(capsys):
    view = MeterView(state=MeterState.RENDERING, grid=make_grid("Calm"))
    _handle_sse_event(ServerSentEvent(data=view.model_dump_json()))
    assert "Calm" in capsys.readouterr().out

    _handle_sse_event(
        ServerSentEvent(event="error", data=json.dumps({"error": "network-lost"}))
    )
    assert "Server error: network-lost" in capsys.readouterr().out

    _handle_sse_event(ServerSentEvent(data="{not json"))
    assert "Warning" in capsys.readouterr().out
