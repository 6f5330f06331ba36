"""
The fixed mood meter layout: 100 emotion labels on a 10x10 grid.

Rows run from high energy (top) to low energy (bottom) and columns from
unpleasant (left) to pleasant (right). Each 5x5 quadrant has its own hue.
"""

import logging
from enum import Enum

logger = logging.getLogger(__name__)

GRID_SIZE = 10
QUADRANT_SIZE = GRID_SIZE // 2

# fmt: off
EMOTIONS: tuple[str, ...] = (
    "Enraged", "Panicked", "Stressed", "Jittery", "Shocked", "Surprised", "Upbeat", "Festive", "Exhilarated", "Ecstatic",
    "Livid", "Furious", "Frustrated", "Tense", "Stunned", "Hyper", "Cheerful", "Motivated", "Inspired", "Elated",
    "Fuming", "Frightened", "Angry", "Nervous", "Restless", "Energized", "Lively", "Excited", "Optimistic", "Enthusiastic",
    "Anxious", "Apprehensive", "Worried", "Irritated", "Annoyed", "Pleased", "Focused", "Happy", "Proud", "Thrilled",
    "Repulsed", "Troubled", "Concerned", "Uneasy", "Peeved", "Pleasant", "Joyful", "Hopeful", "Playful", "Blissful",
    "Disgusted", "Glum", "Disappointed", "Down", "Apathetic", "At Ease", "Easygoing", "Content", "Loving", "Fulfilled",
    "Pessimistic", "Morose", "Discouraged", "Sad", "Bored", "Calm", "Secure", "Satisfied", "Grateful", "Touched",
    "Alienated", "Miserable", "Lonely", "Disheartened", "Tired", "Relaxed", "Chill", "Restful", "Blessed", "Balanced",
    "Despondent", "Depressed", "Sullen", "Exhausted", "Fatigued", "Mellow", "Thoughtful", "Peaceful", "Comfortable", "Carefree",
    "Despairing", "Hopeless", "Desolate", "Spent", "Drained", "Sleepy", "Complacent", "Tranquil", "Cozy", "Serene",
)
# fmt: on

EMOTION_INDEX: dict[str, int] = {label: i for i, label in enumerate(EMOTIONS)}


class Hue(str, Enum):
    """Quadrant hues as CSS ``r,g,b`` triples."""

    RED = "255,0,0"
    YELLOW = "255,255,0"
    BLUE = "0,0,255"
    GREEN = "0,128,0"
    WHITE = "255,255,255"

    def rgba(self, opacity: float) -> str:
        return f"rgba({self.value},{opacity:g})"


# Red covers the top-left quadrant; the others are offsets of it.
RED_INDICES: frozenset[int] = frozenset(
    row * GRID_SIZE + col for row in range(QUADRANT_SIZE) for col in range(QUADRANT_SIZE)
)
_HUE_OFFSETS: tuple[tuple[Hue, int], ...] = (
    (Hue.RED, 0),
    (Hue.YELLOW, QUADRANT_SIZE),
    (Hue.BLUE, QUADRANT_SIZE * GRID_SIZE),
    (Hue.GREEN, QUADRANT_SIZE * GRID_SIZE + QUADRANT_SIZE),
)


def hue_for_index(index: int) -> Hue:
    """Return the quadrant hue for a grid position, white when unmapped."""
    for hue, offset in _HUE_OFFSETS:
        if index - offset in RED_INDICES:
            return hue

    logger.error("No hue mapped for grid index %s", index)
    return Hue.WHITE


def position(index: int) -> tuple[int, int]:
    """Return the (row, column) of a grid index."""
    return divmod(index, GRID_SIZE)
