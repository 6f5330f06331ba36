"""
Command-line interface tools for the Mood Meter service.
"""

import asyncio
import json
from collections.abc import Coroutine
from typing import Any

import httpx
import typer
from httpx_sse import ServerSentEvent, aconnect_sse

from .grid import EmotionGrid
from .meter import MeterView
from .models import MoodEntry

DEFAULT_BASE_URL = "http://localhost:8000"

# Shading from faint to full opacity
SHADES = " .:-=+*#%@"

app = typer.Typer(help="Mood Meter CLI tools")


# MARK: - CLI Entry Points


def cli_submit() -> None:
    """Entry point for mood-submit CLI command."""
    typer.run(submit)


def cli_grid() -> None:
    """Entry point for mood-grid CLI command."""
    typer.run(grid)


def cli_watch() -> None:
    """Entry point for mood-watch CLI command."""
    typer.run(watch)


# MARK: - Commands


@app.command()
def submit(
    session_id: str = typer.Argument(..., help="Session to submit the mood to"),
    mood: str = typer.Argument(..., help="Emotion label, e.g. Happy"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Mood Meter service"
    ),
) -> None:
    """Submit a mood entry for a session."""

    async def _submit() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.post(
                f"{base_url}/moods", json={"sessionID": session_id, "mood": mood}
            )
            response.raise_for_status()
            entry = MoodEntry.model_validate(response.json())
            print(f"Stored {entry.mood} for {entry.session_id} ({entry.id})")

    _run_with_error_handling(_submit(), base_url)


@app.command()
def grid(
    session_id: str = typer.Argument(..., help="Session to show"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Mood Meter service"
    ),
    json_output: bool = typer.Option(False, "--json", "-j", help="Output raw JSON"),
) -> None:
    """Show the current mood meter for a session."""

    async def _grid() -> None:
        async with httpx.AsyncClient() as client:
            response = await client.get(f"{base_url}/moods/{session_id}/grid")
            response.raise_for_status()
            result = response.json()

            if json_output:
                print(json.dumps(result, indent=2))
                return

            print(format_view(MeterView.model_validate(result)))

    _run_with_error_handling(_grid(), base_url)


@app.command()
def watch(
    session_id: str = typer.Argument(..., help="Session to watch"),
    base_url: str = typer.Option(
        DEFAULT_BASE_URL, "--url", "-u", help="Base URL of the Mood Meter service"
    ),
) -> None:
    """Stream mood meter updates for a session in real-time."""

    async def _watch() -> None:
        url = f"{base_url}/moods/{session_id}/stream"
        print(f"Streaming from {url}... (Ctrl+C to stop)")

        async with httpx.AsyncClient(timeout=None) as client:
            async with aconnect_sse(client, "GET", url) as event_source:
                async for sse in event_source.aiter_sse():
                    _handle_sse_event(sse)

    _run_with_error_handling(_watch(), base_url)


@app.command()
def serve() -> None:
    """Run the Mood Meter server."""
    from .server import main

    main()


# MARK: - Formatting


def format_grid(emotion_grid: EmotionGrid) -> str:
    """Render the grid as shaded text with a frequency legend."""
    lines = []
    for row in emotion_grid.rows:
        lines.append(
            " ".join(SHADES[min(int(cell.opacity * 10), 9)] * 2 for cell in row)
        )

    counted = [cell for cell in emotion_grid.cells if cell.frequency]
    counted.sort(key=lambda cell: (-cell.frequency, cell.index))
    lines.append("")
    for cell in counted:
        lines.append(f"{cell.label:<14} {cell.frequency:>4}  {cell.opacity:.2f}")

    if emotion_grid.unmatched:
        lines.append(f"({emotion_grid.unmatched} entries with unknown moods)")
    return "\n".join(lines)


def format_view(view: MeterView) -> str:
    if view.grid is None:
        return view.message or view.state.value
    return format_grid(view.grid)


# MARK: - Private Helpers


def _handle_sse_event(sse: ServerSentEvent) -> None:
    """Handle a single SSE event."""
    try:
        # Handle error events from server
        if sse.event == "error":
            error_data = json.loads(sse.data)
            print(f"Server error: {error_data.get('error', 'Unknown error')}")
            return

        view = MeterView.model_validate_json(sse.data)
        print(format_view(view))
        print()

    except json.JSONDecodeError as e:
        print(f"Warning: Could not parse SSE data: {sse.data} - {e}")
    except Exception as e:
        print(f"Warning: Error processing meter data: {e}")


def _run_with_error_handling(coro: Coroutine[Any, Any, Any], base_url: str) -> None:
    """Run an async coroutine with standardized error handling."""
    try:
        asyncio.run(coro)
    except KeyboardInterrupt:
        print("\nStopped")
        raise typer.Exit(0)
    except httpx.ConnectError:
        print(f"Error: Could not connect to {base_url}")
        raise typer.Exit(1)
    except httpx.HTTPStatusError as e:
        print(f"Error: HTTP {e.response.status_code}")
        raise typer.Exit(1)
    except Exception as e:
        error_msg = str(e) if str(e) else f"Unknown error of type {type(e).__name__}"
        print(f"Error: {error_msg}")
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
