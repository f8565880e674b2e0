import logging
from collections import deque
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)

IDLE_TEXT = "ContextKit"
IDLE_TOOLTIP = "ContextKit: Click for status"

# Recent status texts kept for inspection; older entries are dropped.
HISTORY_LIMIT = 50


class StatusReporter:
    """Process-wide activity indicator: visibility, short text and tooltip."""

    def __init__(self) -> None:
        self.visible = False
        self.text = IDLE_TEXT
        self.tooltip = IDLE_TOOLTIP
        self.history: deque[str] = deque(maxlen=HISTORY_LIMIT)

    def show(self) -> None:
        self.visible = True

    def hide(self) -> None:
        self.visible = False

    def working(self, text: str) -> None:
        self._set(text)

    def idle(self) -> None:
        self._set(IDLE_TEXT)

    @property
    def is_idle(self) -> bool:
        return self.text == IDLE_TEXT

    @contextmanager
    def busy(self, text: str) -> Iterator[None]:
        """Show ``text`` for the duration of the block; always restore idle."""
        self.working(text)
        try:
            yield
        finally:
            self.idle()

    def _set(self, text: str) -> None:
        self.text = text
        self.history.append(text)
        logger.debug("Status: %s", text)
