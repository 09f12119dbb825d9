"""Plugin loop -- one request line in, one verdict line out.

Architecture:
    Single thread, no event loop, no queue.
    Waiting for input is the only blocking step (LineReader).
    Per-line flow: read -> decode -> evaluate -> encode -> write -> flush

Ordering: verdict N always answers request N. Every line produces exactly
one verdict, including lines that fail to decode.

Shutdown:
    End of input ends the loop. A termination signal goes through
    request_shutdown(), which only sets a flag. The flag is checked between
    lines, never mid-line: every complete line already read is answered,
    then the loop stops instead of waiting for more. While idle the reader
    wakes every POLL_INTERVAL seconds to look at the flag.

Diagnostics go through logging, never to the output stream.
"""
from __future__ import annotations

import logging
import signal
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import BinaryIO

from discovery_filter.domain.decisions import Verdict
from discovery_filter.domain.event import Event
from discovery_filter.plugin.evaluator import Evaluator
from discovery_filter.plugin.protocol import (
    POLL_INTERVAL,
    LineReader,
    RequestDecodeError,
    decode_error_verdict,
    decode_request,
    encode_verdict,
    strip_terminator,
)

log = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


@dataclass(slots=True)
class LoopStats:
    """Counters for the shutdown summary."""
    processed: int = 0
    accepted: int = 0
    rejected: int = 0
    decode_errors: int = 0
    stopped_by: str | None = None  # signal name, None for end of input

    def record(self, verdict: Verdict) -> None:
        self.processed += 1
        if verdict.is_accepted():
            self.accepted += 1
        else:
            self.rejected += 1


class PluginLoop:
    """Synchronous request/response driver over two binary streams.

    Args:
        instream: where request lines come from (e.g. sys.stdin.buffer)
        outstream: where verdict lines go (e.g. sys.stdout.buffer)
        evaluator: anything with evaluate(event) -> Verdict
        poll_interval: max seconds between shutdown checks while idle
    """

    def __init__(
        self,
        instream: BinaryIO,
        outstream: BinaryIO,
        evaluator: Evaluator,
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        self._reader = LineReader(instream, poll_interval=poll_interval)
        self._out = outstream
        self._evaluator = evaluator
        self._stats = LoopStats()
        self._stop_signal: int | None = None

    @property
    def stats(self) -> LoopStats:
        return self._stats

    @property
    def stop_requested(self) -> bool:
        return self._stop_signal is not None

    def request_shutdown(self, signum: int, frame: object = None) -> None:
        """Termination hook; usable directly as a signal handler.

        Only records the request, so it is safe to run at any point,
        including right after a read has returned data.
        """
        log.info(
            "Discovery relay sync plugin received %s", signal.Signals(signum).name
        )
        self._stop_signal = signum

    @contextmanager
    def install_signal_handlers(self) -> Iterator[None]:
        """Route SIGTERM/SIGINT to request_shutdown() for the duration.

        Must be entered from the main thread.
        """
        previous = {sig: signal.signal(sig, self.request_shutdown) for sig in SHUTDOWN_SIGNALS}
        try:
            yield
        finally:
            for sig, handler in previous.items():
                signal.signal(sig, handler)

    def run(self) -> LoopStats:
        """Answer lines until end of input or a shutdown request.

        Stream errors (OSError, e.g. BrokenPipeError) propagate.
        """
        while True:
            raw = self._reader.next_line(lambda: self.stop_requested)
            if raw is None:
                break
            self._answer(strip_terminator(raw))

        if self._stop_signal is not None:
            self._stats.stopped_by = signal.Signals(self._stop_signal).name
            leftover = self._reader.pending
            if leftover:
                log.warning(
                    "Abandoning %d bytes of an unterminated line", len(leftover)
                )
        else:
            log.info("Discovery relay sync plugin shutting down")
        log.info(
            "Processed %d events: %d accepted, %d rejected (%d unparseable)",
            self._stats.processed,
            self._stats.accepted,
            self._stats.rejected,
            self._stats.decode_errors,
        )
        return self._stats

    def _answer(self, line: bytes) -> None:
        """Decode, evaluate, write and flush the verdict for one line."""
        try:
            request = decode_request(line)
        except RequestDecodeError as exc:
            log.error("Plugin error: %s", exc)
            self._stats.decode_errors += 1
            verdict = decode_error_verdict(exc)
        else:
            verdict = self._evaluate(request.event)

        self._out.write(encode_verdict(verdict))
        self._out.flush()
        self._stats.record(verdict)

    def _evaluate(self, event: Event) -> Verdict:
        try:
            return self._evaluator.evaluate(event)
        except Exception as exc:
            log.exception("Error processing event")
            return Verdict.reject(f"Plugin error: {exc}")
