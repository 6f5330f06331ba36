"""
FastAPI server for the Mood Meter service.

This module implements the HTTP API endpoints for submitting mood entries,
reading a session's mood meter as JSON or HTML, and streaming live meter
updates via Server-Sent Events.
"""

import asyncio
import json
import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.responses import HTMLResponse, JSONResponse, StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from .config import Settings, configure_logging
from .emotions import EMOTIONS, hue_for_index, position
from .errors import InvalidSessionError
from .meter import MeterView, MoodMeter
from .models import MoodEntry, MoodSubmission
from .pages import render_page
from .session import require_session
from .store import MoodStore

logger = logging.getLogger(__name__)


# API Response Schemas
class EmotionInfo(BaseModel):
    """A label on the mood meter layout."""

    index: int
    row: int
    column: int
    label: str
    hue: str


class EmotionsResponse(BaseModel):
    emotions: list[EmotionInfo]


class EntriesResponse(BaseModel):
    """Response model for a session's stored entries."""

    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(..., alias="sessionID")
    entries: list[MoodEntry]


async def meter_view(store: MoodStore, session_param: str | None) -> MeterView:
    """Open a meter for a session and return its first view."""
    meter = MoodMeter(store)
    try:
        await meter.open(session_param)
        return await meter.first_view()
    finally:
        await meter.close()


def create_app(mood_store: MoodStore, settings: Settings | None = None) -> FastAPI:
    """
    Create a FastAPI application with the given mood store.

    Args:
        mood_store: The MoodStore instance to use for the application
        settings: Service settings; defaults are used when omitted

    Returns:
        Configured FastAPI application
    """
    settings = settings or Settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
        """Lifespan context manager for FastAPI application."""
        yield
        # Shutdown - end any open streams
        await mood_store.close()

    app = FastAPI(
        title="Mood Meter",
        description="A session mood aggregation service with HTTP and SSE support",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.exception_handler(InvalidSessionError)
    async def invalid_session_handler(
        request: Request, exc: InvalidSessionError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST, content={"detail": str(exc)}
        )

    @app.get("/")
    async def root() -> dict[str, str]:
        """Health check endpoint."""
        return {"status": "ok", "service": "moodmeter"}

    @app.get("/emotions")
    async def list_emotions() -> EmotionsResponse:
        """List the mood meter layout with the hue of every label."""
        emotions = []
        for index, label in enumerate(EMOTIONS):
            row, column = position(index)
            emotions.append(
                EmotionInfo(
                    index=index,
                    row=row,
                    column=column,
                    label=label,
                    hue=hue_for_index(index).name.lower(),
                )
            )
        return EmotionsResponse(emotions=emotions)

    @app.post("/moods", status_code=status.HTTP_201_CREATED)
    async def submit_mood(submission: MoodSubmission) -> MoodEntry:
        """
        Store a mood entry and notify the session's subscribers.

        Args:
            submission: The mood submission payload

        Returns:
            The stored entry with its id and timestamp
        """
        try:
            return await mood_store.add(submission.session_id, submission.mood)
        except Exception as e:
            logger.exception("Failed to store mood entry")
            raise HTTPException(
                status_code=500, detail=f"Failed to store mood: {str(e)}"
            )

    @app.get("/moods/{session_id}")
    async def get_entries(session_id: str) -> EntriesResponse:
        """Return the entries stored for a session."""
        session_id = require_session(session_id)
        entries = await mood_store.query(session_id)
        return EntriesResponse(session_id=session_id, entries=entries)

    @app.get("/moods/{session_id}/grid")
    async def get_grid(session_id: str) -> MeterView:
        """
        Get the current mood meter view for a session.

        Returns:
            A rendering view with the grid, or a no-data/invalid view with a
            message
        """
        return await meter_view(mood_store, session_id)

    @app.get("/moods/{session_id}/stream")
    async def stream_grid(session_id: str) -> StreamingResponse:
        """
        Stream mood meter updates via Server-Sent Events.

        The connection receives the current view immediately and a new one
        whenever an entry for the session is stored.

        Returns:
            StreamingResponse with text/event-stream content type
        """

        async def event_generator() -> AsyncGenerator[str, None]:
            """Generate SSE events for meter views."""
            meter = MoodMeter(mood_store)
            try:
                await meter.open(session_id)
                async for view in meter.views():
                    yield f"data: {view.model_dump_json()}\n\n"
            except asyncio.CancelledError:
                # Client disconnected
                pass
            except Exception as e:
                # Send error event and close
                logger.exception("Mood stream for %s failed", session_id)
                error_data = json.dumps({"error": str(e)})
                yield f"event: error\ndata: {error_data}\n\n"
            finally:
                await meter.close()

        return StreamingResponse(
            event_generator(),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "Access-Control-Allow-Origin": "*",
                "Access-Control-Allow-Headers": "*",
            },
        )

    @app.get("/result", response_class=HTMLResponse)
    @app.get("/result/", response_class=HTMLResponse, include_in_schema=False)
    async def result_missing() -> str:
        """Result page without a session id."""
        view = await meter_view(mood_store, None)
        return render_page(view, liff_id=settings.liff_id)

    @app.get("/result/{session_id}", response_class=HTMLResponse)
    async def result_page(session_id: str) -> str:
        """Render the mood meter page for a session."""
        view = await meter_view(mood_store, session_id)
        stream_url = None
        if view.session_id:
            stream_url = app.url_path_for("stream_grid", session_id=view.session_id)
        return render_page(view, liff_id=settings.liff_id, stream_url=stream_url)

    return app


def create_default_app() -> FastAPI:
    """Build the application from environment settings."""
    settings = Settings()
    configure_logging(settings.log_level)
    return create_app(MoodStore(collection=settings.collection), settings)


def main() -> None:
    """Main entry point for the server."""
    import uvicorn

    settings = Settings()
    uvicorn.run(
        "moodmeter.server:create_default_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
        log_level=settings.log_level,
    )


if __name__ == "__main__":
    main()
