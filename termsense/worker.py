"""Message boundary between an output producer and one analyzer.

Inbound messages are ``{"type": "analyze", "data": str}``. Each one yields
zero or more outbound messages from a closed set:

- ``{"type": "suggestion", "payload": <AISuggestion dict>}``
- ``{"type": "server-url", "payload": <url>}``
- ``{"type": "error", "payload": {"message": str, "stack": str | None}}``

Faults raised while handling a message never cross the boundary as
exceptions; they become ``error`` messages.
"""

from __future__ import annotations

import asyncio
import logging
import traceback

from termsense.analyzer import ContextAnalyzer

logger = logging.getLogger(__name__)

ANALYZE = "analyze"
SUGGESTION = "suggestion"
SERVER_URL = "server-url"
ERROR = "error"


def is_analyze_message(msg: object) -> bool:
    """Check that ``msg`` is a well-formed analyze request."""
    return (
        isinstance(msg, dict)
        and msg.get("type") == ANALYZE
        and isinstance(msg.get("data"), str)
    )


def error_message(exc: BaseException) -> dict:
    """Convert an exception into an ``error`` protocol message."""
    stack = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return {
        "type": ERROR,
        "payload": {
            "message": str(exc) or "Error processing message",
            "stack": stack or None,
        },
    }


class AnalysisWorker:
    """Single consumer serializing all calls into one analyzer."""

    def __init__(self, analyzer: ContextAnalyzer) -> None:
        self._analyzer = analyzer

    @property
    def analyzer(self) -> ContextAnalyzer:
        return self._analyzer

    def handle_message(self, msg: object) -> list[dict]:
        """Process one inbound message.

        Malformed messages are ignored. A suggestion, if any, is reported
        before the server URL found in the same chunk.

        Args:
            msg: The inbound message.

        Returns:
            Outbound messages in emission order (possibly empty).
        """
        if not is_analyze_message(msg):
            logger.debug("Ignoring malformed message: %r", msg)
            return []
        data = msg["data"]
        try:
            responses = []
            suggestion = self._analyzer.analyze_output(data)
            if suggestion is not None:
                responses.append({"type": SUGGESTION, "payload": suggestion.to_dict()})
            server_url = self._analyzer.detect_server_url(data)
            if server_url:
                responses.append({"type": SERVER_URL, "payload": server_url})
            return responses
        except Exception as exc:
            logger.exception("Error analyzing chunk of len=%d", len(data))
            return [error_message(exc)]

    async def run(self, inbox: asyncio.Queue, outbox: asyncio.Queue) -> None:
        """Consume ``inbox`` until a ``None`` sentinel, posting to ``outbox``.

        Args:
            inbox: Queue of inbound messages. ``None`` stops the loop.
            outbox: Queue receiving outbound protocol messages.
        """
        while True:
            msg = await inbox.get()
            try:
                if msg is None:
                    logger.debug("AnalysisWorker received stop sentinel")
                    return
                for response in self.handle_message(msg):
                    await outbox.put(response)
            finally:
                inbox.task_done()
