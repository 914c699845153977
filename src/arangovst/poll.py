""" Background polling. Connection pools use this to send keep-alive probes
    to idle connections, and the client uses it to refresh the host list from
    the cluster. The polled method is held through a weak reference so that
    a forgotten pool or client can still be collected; the poller notices and
    exits on its own.
"""

import logging
import threading
import time

from . import weakref


logger = logging.getLogger(__name__)


class Poller:
    """ Call the provided *method* every *period* seconds on a dedicated
        background thread. The first call happens one period after
        :func:`start`. Exceptions raised by *method* are logged and do not
        stop the cadence.
    """

    def __init__(self, method, period, name=None):

        period = float(period)
        if period <= 0:
            raise ValueError('polling period must be positive: ' + repr(period))

        self.interval = period
        self.reference = weakref.ref(method)
        self.shutdown = False

        if name is None:
            name = 'arangovst-poll-' + getattr(method, '__name__', 'method')

        self.alarm = threading.Event()
        self.thread = threading.Thread(target=self.run, name=name)
        self.thread.daemon = True


    def start(self):
        self.thread.start()
        return self


    def period(self, period):
        """ Update the polling interval to *period* seconds. The new cadence
            starts from the moment of this call.
        """

        self.interval = float(period)
        self.alarm.set()


    def run(self):

        next = time.monotonic() + self.interval

        while True:
            delay = next - time.monotonic()
            if delay > 0:
                self.alarm.wait(delay)

            if self.shutdown == True:
                break

            if self.alarm.is_set() == True:
                # The interval changed; begin an entirely new cadence.
                self.alarm.clear()
                next = time.monotonic() + self.interval
                continue

            # Keep a constant period regardless of how long the method took,
            # but never try to catch up on missed cycles.

            next += self.interval
            now = time.monotonic()
            if next < now:
                next = now + self.interval

            try:
                weakref.call(self.reference)
            except weakref.Gone:
                # The original object is gone. No further calls are possible.
                break
            except Exception:
                logger.exception('polled method raised')


    def stop(self):
        self.shutdown = True
        self.alarm.set()


# end of class Poller


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
