import time
from threading import Event

from cbshell.exceptions import Cancelled, TransportError


class CancellationToken(object):
    """
    Cooperative cancellation flag shared between the shell (ctrl-c handler)
    and every in-flight request. Dispatchers call check() at their
    suspension points (before connecting, between reads).
    """
    def __init__(self):
        self.__event = Event()

    def cancel(self):
        self.__event.set()

    @property
    def cancelled(self):
        return self.__event.is_set()

    def check(self):
        if self.__event.is_set():
            raise Cancelled()


class Deadline(object):
    """Absolute point in time (monotonic clock) after which a request fails"""
    def __init__(self, timeout):
        self.timeout = timeout
        self.end_time = time.monotonic() + timeout

    @classmethod
    def after(cls, timeout):
        return cls(timeout)

    def remaining(self):
        return self.end_time - time.monotonic()

    @property
    def expired(self):
        return self.remaining() <= 0

    def check(self):
        if self.expired:
            raise TransportError("deadline of %ss exceeded" % self.timeout)
