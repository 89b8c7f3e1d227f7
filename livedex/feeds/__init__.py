"""Live OCR feeds - wire decoding and streaming clients."""

from livedex.feeds.client import (
    ConnectionCallbacks,
    StreamingClient,
    WebSocketConnection,
)
from livedex.feeds.protocol import (
    coerce_feed_message,
    decode_payload,
    parse_confidence,
)

__all__ = [
    "ConnectionCallbacks",
    "StreamingClient",
    "WebSocketConnection",
    "coerce_feed_message",
    "decode_payload",
    "parse_confidence",
]
