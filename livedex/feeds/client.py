"""Resilient streaming client for the OCR feeds.

One StreamingClient per feed (route, battle), built from an injected
FeedConfig and started/stopped explicitly by its owner.

State machine:
    DISCONNECTED -> CONNECTING -> OPEN
    OPEN is reported as STALE when no message arrived within the feed's
    timeout (the socket may still be technically open).

Behavior:
- connect() is a no-op while CONNECTING/OPEN or when disabled.
- Every message is decoded, cached for replay, and fanned out
  synchronously to listeners in registration order.
- On close or error the endpoint path variant flips (with/without trailing
  slash) and a reconnect is scheduled after a fixed delay. Retries never
  give up: the producer may simply not be running yet.
- force_reconnect() drops the connection and the cached payload and
  connects again right away.
- set_enabled(False) drops everything and suppresses reconnects.

Sockets and timers are injected (connection_factory, timer_factory, clock)
so the state machine can be driven without threads or a network.

Usage:
    client = StreamingClient(Config.route_feed_config())
    unsubscribe = client.subscribe(lambda payload: print(payload))
    client.start()
    ...
    client.stop()
"""

import logging
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Protocol

import websocket

from livedex.core.types import ConnectionState, FeedConfig
from livedex.feeds.protocol import decode_payload
from livedex.utilities.logging import feed_logger

logger = logging.getLogger(__name__)

Listener = Callable[[Any], None]


# =============================================================================
# INJECTION SEAMS
# =============================================================================


@dataclass(frozen=True)
class ConnectionCallbacks:
    """Callbacks a connection reports into, bound to one connect attempt."""

    on_open: Callable[[], None]
    on_message: Callable[[Any], None]
    on_close: Callable[[str], None]


class FeedConnection(Protocol):
    def close(self) -> None: ...


class Timer(Protocol):
    def start(self) -> None: ...

    def cancel(self) -> None: ...


ConnectionFactory = Callable[[str, ConnectionCallbacks], FeedConnection]
TimerFactory = Callable[[float, Callable[[], None]], Timer]


class WebSocketConnection:
    """websocket-client connection running in a daemon thread."""

    def __init__(self, url: str, callbacks: ConnectionCallbacks):
        self.url = url
        self._callbacks = callbacks
        self._app = websocket.WebSocketApp(
            url,
            on_open=lambda ws: callbacks.on_open(),
            on_message=lambda ws, message: callbacks.on_message(message),
            on_error=lambda ws, error: callbacks.on_close(f"error: {error}"),
            on_close=lambda ws, code, reason: callbacks.on_close(f"closed ({code})"),
        )
        self._thread = threading.Thread(target=self._run, name=f"feed-{url}", daemon=True)
        self._thread.start()

    def _run(self) -> None:
        try:
            self._app.run_forever()
        except Exception as e:
            logger.warning("[FEED] Socket loop for %s failed: %s", self.url, e)
        # run_forever returns once the socket is gone, however it ended
        self._callbacks.on_close("ended")

    def close(self) -> None:
        self._app.close()


def _default_timer(delay: float, callback: Callable[[], None]) -> Timer:
    timer = threading.Timer(delay, callback)
    timer.daemon = True
    return timer


# =============================================================================
# CLIENT
# =============================================================================


class StreamingClient:
    """Long-lived feed connection with reconnect, staleness and replay."""

    def __init__(
        self,
        config: FeedConfig,
        connection_factory: ConnectionFactory | None = None,
        timer_factory: TimerFactory | None = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the client.

        Args:
            config: Endpoint, timeouts and initial enabled flag
            connection_factory: Opens a connection to a URL (default: websocket-client)
            timer_factory: Creates one-shot timers (default: threading.Timer)
            clock: Monotonic seconds source used for staleness
        """
        self.config = config
        self._log = feed_logger(__name__, config.kind)
        self._connection_factory = connection_factory or WebSocketConnection
        self._timer_factory = timer_factory or _default_timer
        self._clock = clock

        self._lock = threading.RLock()
        self._state = ConnectionState.DISCONNECTED
        self._enabled = config.enabled
        self._running = False
        self._connection: FeedConnection | None = None
        self._attempt = 0
        self._path_toggle = False
        self._reconnect_timer: Timer | None = None

        self._opened_at: float | None = None
        self._last_message_at: float | None = None
        self._last_payload: Any = None

        self._listeners: dict[int, Listener] = {}
        self._next_listener_id = 0

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return self.config.kind.value

    @property
    def state(self) -> ConnectionState:
        """Connection state, with STALE derived from message age."""
        with self._lock:
            if self._state == ConnectionState.OPEN and self._is_stale_locked():
                return ConnectionState.STALE
            return self._state

    @property
    def enabled(self) -> bool:
        return self._enabled

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def current_url(self) -> str:
        base, slashed = self.config.path_variants
        return slashed if self._path_toggle else base

    @property
    def last_payload(self) -> Any:
        return self._last_payload

    @property
    def last_message_at(self) -> float | None:
        return self._last_message_at

    def is_open(self) -> bool:
        return self._state == ConnectionState.OPEN

    def is_stale(self) -> bool:
        with self._lock:
            return self._state == ConnectionState.OPEN and self._is_stale_locked()

    def _is_stale_locked(self) -> bool:
        seen = [t for t in (self._opened_at, self._last_message_at) if t is not None]
        if not seen:
            return False
        return self._clock() - max(seen) > self.config.stale_after_seconds

    def status(self) -> dict[str, Any]:
        """Snapshot for status displays."""
        with self._lock:
            age = None
            if self._last_message_at is not None:
                age = round(self._clock() - self._last_message_at, 3)
            return {
                "feed": self.name,
                "state": self.state.value,
                "enabled": self._enabled,
                "url": self.current_url,
                "last_message_age_seconds": age,
                "has_cached_payload": self._last_payload is not None,
                "listeners": len(self._listeners),
            }

    # -------------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Begin connecting; reconnects continue until stop()."""
        with self._lock:
            self._running = True
        self._log.info("[FEED] Starting (%s)", self.config.url)
        self.connect()

    def stop(self) -> None:
        """Close the connection and cancel pending reconnects."""
        with self._lock:
            self._running = False
            connection = self._teardown_locked()
        self._close_quietly(connection)
        self._log.info("[FEED] Stopped")

    def connect(self) -> None:
        """Open a connection attempt unless one is live or the feed is disabled."""
        with self._lock:
            if not self._enabled:
                return
            if self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN):
                return
            self._running = True
            self._attempt += 1
            token = self._attempt
            url = self.current_url
            self._state = ConnectionState.CONNECTING

        self._log.debug("[FEED] Connecting to %s", url)
        callbacks = ConnectionCallbacks(
            on_open=lambda: self._on_open(token),
            on_message=lambda raw: self._on_message(token, raw),
            on_close=lambda reason: self._on_close(token, reason),
        )
        try:
            connection = self._connection_factory(url, callbacks)
        except Exception as e:
            self._log.warning("[FEED] Connect to %s failed: %s", url, e)
            self._on_close(token, f"connect failed: {e}")
            return

        with self._lock:
            if token == self._attempt:
                self._connection = connection
                return
        # Attempt was superseded (closed or reset) while connecting
        self._close_quietly(connection)

    def force_reconnect(self) -> None:
        """Drop the connection and cached payload, then reconnect now."""
        with self._lock:
            connection = self._teardown_locked()
            self._path_toggle = not self._path_toggle
        self._close_quietly(connection)
        self._log.info("[FEED] Forced reconnect")
        self.connect()

    def set_enabled(self, enabled: bool) -> None:
        """Enable or disable the feed. Disabling clears state and stops retries."""
        with self._lock:
            if enabled == self._enabled:
                return
            self._enabled = enabled
            connection = None if enabled else self._teardown_locked()
            running = self._running

        if enabled:
            self._log.info("[FEED] Enabled")
            if running:
                self.connect()
        else:
            self._close_quietly(connection)
            self._log.info("[FEED] Disabled")

    def resync_if_needed(self) -> bool:
        """Force a reconnect when the feed is down or stale.

        Returns:
            True if a reconnect was forced
        """
        with self._lock:
            if not self._enabled or not self._running:
                return False
            needed = self._state != ConnectionState.OPEN or self._is_stale_locked()
        if needed:
            self.force_reconnect()
        return needed

    def _teardown_locked(self) -> FeedConnection | None:
        """Reset to DISCONNECTED and invalidate the current attempt.

        Caller holds the lock and closes the returned connection outside it.
        """
        connection = self._connection
        self._connection = None
        self._attempt += 1
        self._state = ConnectionState.DISCONNECTED
        self._opened_at = None
        self._last_message_at = None
        self._last_payload = None
        if self._reconnect_timer is not None:
            self._reconnect_timer.cancel()
            self._reconnect_timer = None
        return connection

    def _close_quietly(self, connection: FeedConnection | None) -> None:
        if connection is None:
            return
        try:
            connection.close()
        except Exception as e:
            self._log.debug("[FEED] Close failed: %s", e)

    # -------------------------------------------------------------------------
    # Connection callbacks
    # -------------------------------------------------------------------------

    def _on_open(self, token: int) -> None:
        with self._lock:
            if token != self._attempt:
                return
            self._state = ConnectionState.OPEN
            self._opened_at = self._clock()
        self._log.info("[FEED] Connected (%s)", self.current_url)

    def _on_message(self, token: int, raw: Any) -> None:
        with self._lock:
            if token != self._attempt:
                return
            self._last_message_at = self._clock()
            payload = decode_payload(raw)
            if payload is None:
                return
            self._last_payload = payload
            listeners = list(self._listeners.values())

        for listener in listeners:
            self._deliver(listener, payload)

    def _on_close(self, token: int, reason: str) -> None:
        with self._lock:
            # Error and close may both fire for one attempt; handle once
            if token != self._attempt:
                return
            self._attempt += 1
            self._connection = None
            self._state = ConnectionState.DISCONNECTED
            self._opened_at = None
            self._path_toggle = not self._path_toggle
            should_retry = self._enabled and self._running

        self._log.debug("[FEED] Connection lost: %s", reason)
        if should_retry:
            self._schedule_reconnect()

    def _schedule_reconnect(self) -> None:
        with self._lock:
            if self._reconnect_timer is not None:
                return
            timer = self._timer_factory(self.config.reconnect_delay_seconds, self._on_reconnect_timer)
            self._reconnect_timer = timer
        timer.start()

    def _on_reconnect_timer(self) -> None:
        with self._lock:
            self._reconnect_timer = None
            if not (self._enabled and self._running):
                return
        self.connect()

    # -------------------------------------------------------------------------
    # Listeners
    # -------------------------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; the cached payload is replayed immediately.

        Returns:
            Function that removes the listener (safe to call twice)
        """
        with self._lock:
            listener_id = self._next_listener_id
            self._next_listener_id += 1
            self._listeners[listener_id] = listener
            cached = self._last_payload

        if cached is not None:
            self._deliver(listener, cached)

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(listener_id, None)

        return unsubscribe

    def _deliver(self, listener: Listener, payload: Any) -> None:
        try:
            listener(payload)
        except Exception:
            self._log.exception("[FEED] Listener failed")
