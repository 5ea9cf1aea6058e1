import threading

class Monitor:
    """
    Cooperative cancellation flag shared by a producer and its consumers.
    Nothing is interrupted preemptively; long running loops poll `cancelled`.
    """
    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()
