"""Line-delimited JSON protocol spoken between the relay and the plugin.

Message format:
    one UTF-8 JSON object per line, terminated by "\\n"

Request payload (one per event the relay wants to write):
    {
        "type": "new",
        "event": {"id": "...", "pubkey": "...", "created_at": 1700000000,
                  "kind": 3, "tags": [], "content": "", "sig": "..."},
        "receivedAt": 1700000000,
        "sourceType": "Stream",
        "sourceInfo": "wss://relay.example.com"
    }

"event" may also arrive as a string holding the JSON object; both forms
decode to the same Event.

Response payload (exactly one per request, same order):
    {"action": "accept" | "reject", "msg": "reason, empty on accept"}
"""
from __future__ import annotations

import json
import os
import select
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, BinaryIO

from discovery_filter.domain.decisions import Verdict
from discovery_filter.domain.event import Event

LINE_TERMINATOR = b"\n"
READ_CHUNK = 64 * 1024
POLL_INTERVAL = 0.5  # seconds between stop checks while waiting for input


class RequestDecodeError(ValueError):
    """One input line could not be turned into an Event.

    Envelope and inner-event failures share this one error type.
    """


@dataclass(frozen=True, slots=True)
class PluginRequest:
    """Deserialized request: the event plus the envelope fields, kept opaque."""
    event: Event
    envelope: Mapping[str, Any] = field(default_factory=dict)


def _load_json(text: str) -> Any:
    try:
        return json.loads(text)
    except (ValueError, RecursionError) as exc:  # RecursionError: deeply nested input
        raise RequestDecodeError(str(exc)) from exc


def decode_event(payload: Any) -> Event:
    """Turn the request's "event" value into an Event.

    Tries the structured form first, then one string decode pass.
    """
    if isinstance(payload, str):
        payload = _load_json(payload)
    if not isinstance(payload, dict):
        raise RequestDecodeError(
            f"event must be a JSON object, got {type(payload).__name__}"
        )
    return Event.from_mapping(payload)


def decode_request(line: bytes) -> PluginRequest:
    """Deserialize one input line (terminator already stripped).

    Raises:
        RequestDecodeError: on invalid UTF-8 or JSON, a non-object request,
            a missing "event" field, or an event that is not an object.
    """
    try:
        text = line.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise RequestDecodeError(str(exc)) from exc
    obj = _load_json(text)
    if not isinstance(obj, dict):
        raise RequestDecodeError(
            f"request must be a JSON object, got {type(obj).__name__}"
        )
    if "event" not in obj:
        raise RequestDecodeError("request has no 'event' field")
    return PluginRequest(
        event=decode_event(obj["event"]),
        envelope=MappingProxyType({k: v for k, v in obj.items() if k != "event"}),
    )


def encode_verdict(verdict: Verdict) -> bytes:
    """Serialize to wire format: compact JSON object plus line terminator."""
    payload = json.dumps(
        {"action": verdict.action.value, "msg": verdict.msg},
        separators=(",", ":"),
    )
    return payload.encode("utf-8") + LINE_TERMINATOR


def decode_error_verdict(exc: Exception) -> Verdict:
    """The reject sent back for a line that never reached the policy."""
    return Verdict.reject(f"Plugin parsing error: {exc}")


def strip_terminator(line: bytes) -> bytes:
    """Drop one trailing "\\n" or "\\r\\n"."""
    if line.endswith(b"\r\n"):
        return line[:-2]
    if line.endswith(LINE_TERMINATOR):
        return line[:-1]
    return line


class LineReader:
    """Frames a binary stream into request lines.

    Bytes go straight from the stream into an internal buffer, so a line
    that has arrived stays there until next_line() hands it out; nothing
    outside the buffer can lose it.

    When the stream has a file descriptor, waiting uses select() with a
    timeout, so the caller's stop check runs at least every poll_interval
    seconds while no data arrives. Streams without one (in-memory buffers)
    are read with read1().
    """

    def __init__(self, stream: BinaryIO, poll_interval: float = POLL_INTERVAL) -> None:
        self._stream = stream
        self._poll_interval = poll_interval
        self._pending = bytearray()
        self._eof = False
        try:
            self._fd: int | None = stream.fileno()
        except (AttributeError, OSError):  # io.UnsupportedOperation is an OSError
            self._fd = None

    @property
    def pending(self) -> bytes:
        """Buffered bytes not yet handed out as a line."""
        return bytes(self._pending)

    def next_line(self, should_stop: Callable[[], bool]) -> bytes | None:
        """Return the next line, terminator included, or None when done.

        Complete lines already buffered are returned even once should_stop()
        is true. A final unterminated fragment is returned at end of input;
        on stop it stays in `pending`.

        Raises:
            OSError: if the stream read fails
        """
        while True:
            end = self._pending.find(LINE_TERMINATOR)
            if end >= 0:
                line = bytes(self._pending[:end + 1])
                del self._pending[:end + 1]
                return line
            if self._eof:
                if not self._pending:
                    return None
                line = bytes(self._pending)
                self._pending.clear()
                return line
            if should_stop():
                return None
            self._fill()

    def _fill(self) -> None:
        """Append whatever is available; block at most poll_interval on a descriptor."""
        if self._fd is None:
            chunk = self._stream.read1(READ_CHUNK)
        else:
            readable, _, _ = select.select([self._fd], [], [], self._poll_interval)
            if not readable:
                return
            chunk = os.read(self._fd, READ_CHUNK)
        if chunk:
            self._pending += chunk
        else:
            self._eof = True
