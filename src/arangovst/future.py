""" The :class:`Future` is the one handle every asynchronous operation in this
    package returns. It is a thin layer over :class:`concurrent.futures.Future`
    adding the composition the rest of the code needs: :func:`Future.then`
    and :func:`Future.recover` derive new futures, :func:`Future.cancel`
    propagates to whoever is producing the result, and ``await`` works from
    inside an asyncio event loop.
"""

import asyncio
import concurrent.futures
import threading

from .errors import Cancelled


class Future:
    """ A write-once result container. The optional *canceller* is invoked,
        once, when the future is cancelled before it completes; producers use
        it to forget any bookkeeping tied to the result.
    """

    def __init__(self, canceller=None):

        self._future = concurrent.futures.Future()
        self._lock = threading.Lock()
        self._canceller = canceller

        self._future.add_done_callback(self._inner_done)


    def __repr__(self):
        return '<Future ' + self._future._state.lower() + '>'


    def __await__(self):
        return asyncio.wrap_future(self._future).__await__()


    @classmethod
    def completed(cls, value):
        future = cls()
        future.set_result(value)
        return future


    @classmethod
    def failed(cls, exception):
        future = cls()
        future.set_exception(exception)
        return future


    def _settle(self, value=None, exception=None):
        """ Complete the future exactly once. Returns True if this call was
            the one that completed it.
        """

        with self._lock:
            if self._future.done():
                return False

            try:
                if exception is None:
                    self._future.set_result(value)
                else:
                    self._future.set_exception(exception)
            except concurrent.futures.InvalidStateError:
                # Cancelled through an asyncio wrapper in the meantime.
                return False

        return True


    def _inner_done(self, inner):

        # An asyncio task awaiting this future cancels the inner future
        # directly; treat that the same as a call to cancel().

        if inner.cancelled():
            self._cancelled()


    def _cancelled(self):
        canceller = self._canceller
        self._canceller = None

        if canceller is not None:
            canceller()


    def set_result(self, value):
        return self._settle(value=value)


    def set_exception(self, exception):
        return self._settle(exception=exception)


    def set_canceller(self, canceller):
        self._canceller = canceller


    def cancel(self):
        """ Fail the future with :class:`Cancelled` and signal the producer.
            Returns False if the future had already completed.
        """

        if self._settle(exception=Cancelled('cancelled by caller')) == False:
            return False

        self._cancelled()
        return True


    def cancelled(self):
        if self._future.cancelled():
            return True

        if not self._future.done():
            return False

        return isinstance(self._future.exception(), Cancelled)


    def done(self):
        return self._future.done()


    def result(self, timeout=None):
        """ Block until the result is available, for at most *timeout* seconds
            if specified. The exception the future failed with, if any, is
            raised here.
        """

        try:
            return self._future.result(timeout)
        except concurrent.futures.CancelledError:
            raise Cancelled('cancelled by caller')


    def exception(self, timeout=None):

        try:
            return self._future.exception(timeout)
        except concurrent.futures.CancelledError:
            return Cancelled('cancelled by caller')


    def add_done_callback(self, callback):
        """ Invoke *callback* with this :class:`Future` as its sole argument
            upon completion. If the future is already done the callback runs
            immediately, in the calling thread.
        """

        def _invoke(_inner):
            callback(self)

        self._future.add_done_callback(_invoke)


    def then(self, function):
        """ Return a new :class:`Future` completed with ``function(result)``
            once this one succeeds. Failures propagate unchanged. If
            *function* returns a :class:`Future` the new future follows it.
        """

        derived = Future(canceller=self.cancel)

        def _chain(future):
            exception = future.exception()
            if exception is not None:
                derived.set_exception(exception)
                return

            try:
                value = function(future.result())
            except Exception as error:
                derived.set_exception(error)
                return

            _follow(derived, value)

        self.add_done_callback(_chain)
        return derived


    def recover(self, function):
        """ Return a new :class:`Future` that, should this one fail, completes
            with ``function(exception)`` instead. Raising from *function*
            fails the new future with that exception. Successful results
            pass through untouched.
        """

        derived = Future(canceller=self.cancel)

        def _chain(future):
            exception = future.exception()
            if exception is None:
                derived.set_result(future.result())
                return

            try:
                value = function(exception)
            except Exception as error:
                derived.set_exception(error)
                return

            _follow(derived, value)

        self.add_done_callback(_chain)
        return derived


# end of class Future



def _follow(derived, value):
    """ Complete *derived* with *value*, or with the outcome of *value* when
        it is itself a :class:`Future`.
    """

    if isinstance(value, Future):
        def _copy(source):
            exception = source.exception()
            if exception is None:
                derived.set_result(source.result())
            else:
                derived.set_exception(exception)

        derived.set_canceller(value.cancel)
        value.add_done_callback(_copy)
    else:
        derived.set_result(value)



def shield(future):
    """ Return a new :class:`Future` following *future*, whose cancellation
        does not propagate back. Used where several consumers share one
        result and none of them may cancel it for the others.
    """

    follower = Future()

    def _copy(source):
        exception = source.exception()
        if exception is None:
            follower.set_result(source.result())
        else:
            follower.set_exception(exception)

    future.add_done_callback(_copy)
    return follower


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
