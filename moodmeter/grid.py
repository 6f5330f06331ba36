"""
Mood aggregation: turns a snapshot of entries into a colored emotion grid.
"""

import logging
from collections import Counter
from collections.abc import Iterable

from pydantic import BaseModel, Field

from .emotions import EMOTION_INDEX, EMOTIONS, GRID_SIZE, Hue, hue_for_index, position
from .models import MoodEntry

logger = logging.getLogger(__name__)

MIN_OPACITY = 0.1


class GridCell(BaseModel):
    """One rendered emotion on the mood meter."""

    index: int
    row: int
    column: int
    label: str
    hue: Hue
    frequency: int = Field(0, ge=0)
    opacity: float = Field(MIN_OPACITY, ge=0.0, le=1.0)

    @property
    def background(self) -> str:
        return self.hue.rgba(self.opacity)


class EmotionGrid(BaseModel):
    """The 10x10 mood meter computed from one snapshot."""

    cells: list[GridCell]
    total: int = Field(..., description="Number of entries in the snapshot")
    max_frequency: int = Field(..., ge=1)
    unmatched: int = Field(0, description="Entries with an unknown mood label")

    @property
    def rows(self) -> list[list[GridCell]]:
        return [
            self.cells[start : start + GRID_SIZE]
            for start in range(0, len(self.cells), GRID_SIZE)
        ]

    def cell(self, label: str) -> GridCell:
        return self.cells[EMOTION_INDEX[label]]

    def frequency(self, label: str) -> int:
        return self.cell(label).frequency

    def opacity(self, label: str) -> float:
        return self.cell(label).opacity


def tabulate(entries: Iterable[MoodEntry]) -> Counter[str]:
    """Count entries per mood label."""
    return Counter(entry.mood for entry in entries)


def opacity_for(frequency: int, max_frequency: int) -> float:
    if frequency <= 0:
        return MIN_OPACITY
    return frequency / max(max_frequency, 1)


def build_grid(entries: Iterable[MoodEntry]) -> EmotionGrid:
    """
    Aggregate a snapshot of mood entries into an emotion grid.

    Only labels from the fixed layout are placed on the grid; entries with
    other labels are counted in ``unmatched``.

    Args:
        entries: Mood entries for a single session

    Returns:
        The EmotionGrid with per-cell frequency, hue and opacity
    """
    counts = tabulate(entries)
    frequencies = [counts.get(label, 0) for label in EMOTIONS]
    max_frequency = max(max(frequencies), 1)

    cells = []
    for index, (label, frequency) in enumerate(zip(EMOTIONS, frequencies)):
        row, column = position(index)
        cells.append(
            GridCell(
                index=index,
                row=row,
                column=column,
                label=label,
                hue=hue_for_index(index),
                frequency=frequency,
                opacity=opacity_for(frequency, max_frequency),
            )
        )

    total = sum(counts.values())
    unmatched = total - sum(frequencies)
    if unmatched:
        unknown = sorted(label for label in counts if label not in EMOTION_INDEX)
        logger.warning(
            "Skipping %d entries with unknown moods: %s", unmatched, ", ".join(unknown)
        )

    return EmotionGrid(
        cells=cells,
        total=total,
        max_frequency=max_frequency,
        unmatched=unmatched,
    )
