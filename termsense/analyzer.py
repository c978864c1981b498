from __future__ import annotations

import codecs
import logging
import time
from typing import Callable

from termsense.log_setup import TRACE
from termsense.parsing.ansi import find_server_url, strip_ansi
from termsense.parsing.models import AISuggestion, ContextType
from termsense.parsing.patterns import CATALOG, OutputPattern
from termsense.parsing.routes import extract_routes

logger = logging.getLogger(__name__)

DEFAULT_MAX_BUFFER = 5000
DEFAULT_COOLDOWN_MS = 5000

_NEVER = float("-inf")


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class RollingBuffer:
    """Keep the most recent cleaned output across successive chunks."""

    def __init__(self, max_length: int = DEFAULT_MAX_BUFFER) -> None:
        """Initialize an empty buffer.

        Args:
            max_length: Number of trailing characters retained. Older
                content is dropped from the front once this is exceeded.
        """
        self._max_length = max_length
        self._text: str = ""

    @property
    def text(self) -> str:
        return self._text

    def __len__(self) -> int:
        return len(self._text)

    def append(self, chunk: str) -> None:
        """Add a cleaned chunk and trim the front to the retained length.

        Args:
            chunk: ANSI-free output fragment.
        """
        self._text = (self._text + chunk)[-self._max_length:]
        logger.log(TRACE, "RollingBuffer append len=%d total=%d", len(chunk), len(self._text))

    def clear(self) -> None:
        self._text = ""


class CooldownGate:
    """Rate limit suggestions to one per cooldown window."""

    def __init__(self, window_ms: float = DEFAULT_COOLDOWN_MS) -> None:
        self._window = window_ms
        self._last: float = _NEVER

    @property
    def last_emission(self) -> float:
        return self._last

    def allow(self, now: float) -> bool:
        """Check whether a suggestion may be emitted at ``now``."""
        return now - self._last >= self._window

    def record(self, now: float) -> None:
        self._last = now

    def reset(self) -> None:
        """Forget the last emission so the next check always passes."""
        self._last = _NEVER


class ContextAnalyzer:
    """Classify streaming terminal output into rate-limited suggestions.

    One instance belongs to one output stream. It holds no locks: callers
    feeding it from several tasks must serialize their calls (see
    :class:`termsense.worker.AnalysisWorker`).
    """

    def __init__(
        self,
        max_buffer: int = DEFAULT_MAX_BUFFER,
        cooldown_ms: float = DEFAULT_COOLDOWN_MS,
        clock: Callable[[], float] | None = None,
        catalog: tuple[OutputPattern, ...] = CATALOG,
    ) -> None:
        """Initialize the analyzer.

        Args:
            max_buffer: Characters of cleaned output kept between calls.
            cooldown_ms: Minimum gap between two emitted suggestions.
            clock: Time source in milliseconds. Defaults to a monotonic
                clock.
            catalog: Ordered patterns to scan. Defaults to the built-in
                server → error → git catalog.
        """
        self._buffer = RollingBuffer(max_buffer)
        self._cooldown = CooldownGate(cooldown_ms)
        self._clock = clock or _monotonic_ms
        self._catalog = catalog
        # Holds back a multi-byte character split across two bytes chunks
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")

    @property
    def buffer(self) -> str:
        return self._buffer.text

    def analyze_output(self, output: str | bytes, now: float | None = None) -> AISuggestion | None:
        """Feed a chunk of raw output and return a suggestion if one fires.

        The chunk is always stripped and buffered, even while the cooldown
        is active, so context accumulates across suppressed calls. Patterns
        are matched against the whole retained buffer, which lets a phrase
        split across chunks match on the call that completes it.

        After a suggestion is emitted the buffer is cleared, so the same
        text cannot fire twice. Any other pattern present in that same
        snapshot is dropped with it.

        Args:
            output: Raw terminal output. Bytes are decoded as a UTF-8
                stream, so a character split between two chunks survives;
                invalid sequences become replacement characters.
            now: Current time in milliseconds. Defaults to the clock.

        Returns:
            The first suggestion produced in catalog order, or None when
            cooling down or when nothing matched.
        """
        if isinstance(output, bytes):
            output = self._decoder.decode(output)
        self._buffer.append(strip_ansi(output))

        if now is None:
            now = self._clock()
        if not self._cooldown.allow(now):
            logger.log(TRACE, "analyze_output suppressed by cooldown")
            return None

        text = self._buffer.text
        for entry in self._catalog:
            match = entry.pattern.search(text)
            if match is None:
                continue
            context = entry.extractor(match, text)
            if context.type == ContextType.SERVER:
                context.routes = extract_routes(text)
            suggestion = entry.builder(context, now)
            if suggestion is None:
                logger.log(TRACE, "builder declined match for %s", entry.pattern.pattern)
                continue
            self._cooldown.record(now)
            self._buffer.clear()
            logger.debug("Suggestion %s type=%s", suggestion.id, context.type.value)
            return suggestion
        return None

    def detect_server_url(self, output: str | bytes) -> str | None:
        """Find a local server URL in a single chunk.

        Independent of the buffer and cooldown: every call sees only its
        own chunk.
        """
        if isinstance(output, bytes):
            output = output.decode("utf-8", errors="replace")
        return find_server_url(strip_ansi(output))

    def clear_buffer(self) -> None:
        self._buffer.clear()

    def reset_cooldown(self) -> None:
        """Make the next call eligible to emit regardless of timing."""
        self._cooldown.reset()
