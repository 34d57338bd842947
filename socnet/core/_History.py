import logging
import time
from contextlib import contextmanager
from datetime import UTC, datetime
from enum import Enum

import numpy as np

from ._helpers import GraphChange

logger = logging.getLogger(__name__)


class History:
    # Notification channel and event log

    def _utcnow_iso(self) -> str:
        return datetime.now(UTC).isoformat(timespec="microseconds").replace("+00:00", "Z")

    def _jsonify(self, x):
        # Make payloads JSON-safe & compact.

        if x is None or isinstance(x, (bool, int, float, str)):
            return x
        if isinstance(x, Enum):
            return x.value
        if isinstance(x, (set, frozenset)):
            return sorted(self._jsonify(v) for v in x)
        if isinstance(x, (list, tuple)):
            return [self._jsonify(v) for v in x]
        if isinstance(x, dict):
            return {str(k): self._jsonify(v) for k, v in x.items()}
        # NumPy scalars
        if isinstance(x, (np.generic,)):
            return x.item()
        # matrices, frames and other heavy objects -> just a tag
        t = type(x).__name__
        return f"<<{t}>>"

    def _log_event(self, op: str, **fields):
        self._event_seq += 1
        evt = {
            "seq": self._event_seq,
            "version": self._version,
            "ts_utc": self._utcnow_iso(),  # ISO-8601 with Z
            "mono_ns": time.perf_counter_ns() - self._history_clock0,
            "op": op,
        }
        for k, v in fields.items():
            evt[k] = self._jsonify(v)
        if self._history_enabled:
            self._history.append(evt)
        for callback in list(self._listeners):
            callback(evt)
        return evt

    def _mark_modified(self, change: GraphChange, **fields):
        """Record a mutation; structural changes bump the version (dirty bit)."""
        if change.structural:
            self._version += 1
            self._modified = True
        self._log_event(
            "graph_modified",
            change=change,
            directed=self.directed,
            vertices=len(self._vertices),
            **fields,
        )

    @contextmanager
    def _computation(self, name: str, total: int = 0, **fields):
        """Bracket a long-running computation with started/progress/finished events.

        Yields a ``tick(done)`` callable that reports progress; reports are
        throttled to every ``settings.progress_every`` units.
        """
        every = self.settings.progress_every
        self._log_event("computation_started", name=name, total=total, **fields)
        logger.debug("%s started (total=%s, %s)", name, total, fields)
        t0 = time.perf_counter()

        def tick(done: int):
            if done == total or done % every == 0:
                self._log_event("computation_progress", name=name, done=done, total=total)

        try:
            yield tick
        except Exception as exc:
            self._log_event("computation_finished", name=name, ok=False, error=repr(exc))
            raise
        elapsed = time.perf_counter() - t0
        logger.debug("%s finished in %.4fs", name, elapsed)
        self._log_event("computation_finished", name=name, ok=True, seconds=elapsed)

    def _metric_available(self, name: str, **fields):
        self._log_event("metric_available", metric=name, **fields)

    def subscribe(self, callback):
        """Register ``callback(event: dict)``; called synchronously for every event.

        Returns
        ---
        callable
            The callback, so this can be used as a decorator.

        """
        if callback not in self._listeners:
            self._listeners.append(callback)
        return callback

    def unsubscribe(self, callback):
        """Remove a previously registered callback (no-op when absent)."""
        if callback in self._listeners:
            self._listeners.remove(callback)

    def history(self, as_df: bool = False):
        """Return the event log (the newest ``settings.history_limit`` events).

        Parameters
        --
        as_df : bool, default False
            If True, return a Polars DF [DataFrame]; otherwise return a list of dicts.

        Returns
        ---
        list[dict] or polars.DataFrame
            Each event includes: 'seq', 'version', 'ts_utc' (UTC ISO-8601),
            'mono_ns' (monotonic nanoseconds since the log started), 'op',
            and the event payload.

        """
        if as_df:
            import polars as pl

            return pl.DataFrame(list(self._history), infer_schema_length=None)
        return list(self._history)

    def enable_history(self, flag: bool = True):
        """Enable or disable in-memory event logging (listeners are always notified)."""
        self._history_enabled = bool(flag)

    def clear_history(self):
        """Clear the in-memory event log."""
        self._history.clear()

    def mark(self, label: str):
        """Insert a manual marker into the event log."""
        self._log_event("mark", label=label)

    @property
    def version(self) -> int:
        """Structural version; bumped by every mutation that invalidates derived data."""
        return self._version

    def is_modified(self) -> bool:
        return self._modified

    def set_saved(self):
        """Acknowledge the current state (clears the modified flag only)."""
        self._modified = False
