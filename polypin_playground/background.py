"""Off-thread background image loading with an atomic swap on completion."""
from __future__ import annotations

import logging
from concurrent.futures import Executor, Future, ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Optional

from polypin_playground.errors import DecodeError, EditorError

log = logging.getLogger("polypin.background")

Decoder = Callable[[bytes], Any]
Deliver = Callable[[Callable[[], None]], None]


def _call_now(fn: Callable[[], None]) -> None:
    fn()


class BackgroundLoader:
    """Decode image files on a worker and hand finished bitmaps back.

    ``deliver`` marshals the completion callback onto the thread that owns the
    editor state; the Qt host posts it to the GUI thread. Only the most recent
    request may complete: older ones are dropped by token.
    """

    def __init__(
        self,
        decode: Decoder,
        deliver: Deliver = _call_now,
        executor: Optional[Executor] = None,
    ) -> None:
        self._decode = decode
        self._deliver = deliver
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(max_workers=1)
        self._future: Future | None = None
        self._token = 0

    def cancel(self) -> None:
        self._token += 1
        if self._future is not None and not self._future.done():
            self._future.cancel()
        self._future = None

    def shutdown(self) -> None:
        self.cancel()
        if self._owns_executor:
            self._executor.shutdown(wait=False)

    def load_file(
        self,
        path: str | Path,
        on_loaded: Callable[[Any], None],
        on_failed: Callable[[DecodeError], None],
    ) -> Future:
        image_path = Path(path)

        def task() -> Any:
            try:
                data = image_path.read_bytes()
            except OSError as exc:
                raise DecodeError(f"Cannot read {image_path.name}: {exc}") from exc
            return self._decode(data)

        return self._submit(task, on_loaded, on_failed, label=str(image_path))

    def _submit(
        self,
        task: Callable[[], Any],
        on_loaded: Callable[[Any], None],
        on_failed: Callable[[DecodeError], None],
        label: str,
    ) -> Future:
        self.cancel()
        token = self._token
        log.debug("Decoding background %s", label)
        future = self._executor.submit(task)
        self._future = future

        def _on_done(fut: Future) -> None:
            if fut.cancelled():
                return
            error: Optional[DecodeError] = None
            bitmap: Any = None
            try:
                bitmap = fut.result()
            except DecodeError as exc:
                error = exc
            except EditorError as exc:
                error = DecodeError(str(exc))
            except Exception as exc:  # noqa: BLE001 - decoder failures of any kind
                error = DecodeError(f"Unexpected decoder failure: {exc}")

            def apply() -> None:
                if token != self._token:
                    log.debug("Dropping stale background result for %s", label)
                    return
                self._future = None
                if error is not None:
                    log.warning("Background %s failed: %s", label, error)
                    on_failed(error)
                    return
                on_loaded(bitmap)

            self._deliver(apply)

        future.add_done_callback(_on_done)
        return future


__all__ = ["BackgroundLoader", "Decoder", "Deliver"]
