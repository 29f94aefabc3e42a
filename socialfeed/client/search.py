import threading
from typing import Callable, Optional
from socialfeed.client.api import ApiError, MIN_SEARCH_LENGTH

SEARCH_DELAY_SECONDS = 0.3


class SearchBox:
    """
    Debounced user search.

    Each call to ``type`` restarts the delay; only the text that is still
    current when the delay runs out is searched. Text shorter than
    ``min_length`` cancels any pending search and clears the results.
    """

    def __init__(
        self,
        search: Callable[[str], list],
        on_results: Callable[[str, list], None],
        on_error: Optional[Callable[[ApiError], None]] = None,
        delay: float = SEARCH_DELAY_SECONDS,
        min_length: int = MIN_SEARCH_LENGTH,
    ):
        self._search = search
        self._on_results = on_results
        self._on_error = on_error
        self.delay = delay
        self.min_length = min_length
        self._timer: Optional[threading.Timer] = None
        self._lock = threading.Lock()

    def type(self, text: str) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
            if len(text.strip()) < self.min_length:
                self._on_results(text, [])
                return
            self._timer = threading.Timer(self.delay, self._fire, args=(text,))
            self._timer.daemon = True
            self._timer.start()

    def _fire(self, text: str) -> None:
        try:
            results = self._search(text)
        except ApiError as e:
            if self._on_error is None:
                raise
            self._on_error(e)
            return
        self._on_results(text, results)

    def flush(self) -> None:
        """Block until the pending search, if any, has run."""
        with self._lock:
            timer = self._timer
        if timer is not None:
            timer.join()

    def cancel(self) -> None:
        with self._lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
