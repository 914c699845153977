""" Server-side query cursors. A :class:`Cursor` holds one page of results at
    a time and fetches the next page from the host that created the cursor
    when the buffer runs dry. Results are decoded into the requested type as
    each page arrives.

    A cursor that is abandoned before the server reported the last page is
    closed on the server, exactly once: explicitly through :func:`Cursor.close`,
    at the end of a ``with`` block, or when the cursor is garbage collected.
"""

import collections
import logging
import threading
import weakref
from typing import Any, List

from . import endpoints
from . import serde
from .entities import CursorEntity
from .errors import CursorClosed, CursorHostLost, DriverError, ServerError, TransportError
from .future import Future, shield
from .protocol import fields


logger = logging.getLogger(__name__)

_EMPTY = object()
_END = object()


class CursorRemote:
    """ The two operations a cursor needs from the server, both pinned to the
        host recorded in *handle*.
    """

    def __init__(self, executor, database, handle):

        self.executor = executor
        self.database = database
        self.handle = handle


    def next(self, id):
        request = endpoints.cursor_next(self.database, id)
        return self.executor.execute(request, serde.decoder(CursorEntity), self.handle, pinned=True)


    def close(self, id):
        request = endpoints.cursor_delete(self.database, id)
        closed = self.executor.execute(request, serde.void, self.handle, pinned=True)
        return closed.recover(_benign)


# end of class CursorRemote



def _benign(exception):

    # The server already discarded the cursor, most likely because it
    # expired; nothing is left to close.

    if isinstance(exception, ServerError) and exception.code == fields.NOT_FOUND:
        return None

    raise exception



class _Teardown:
    """ The part of a cursor's state its finalizer needs. It must not refer
        back to the cursor itself.
    """

    def __init__(self, remote, id, has_more):

        self.remote = remote
        self.id = id
        self.has_more = has_more
        self.closed = False
        self.lost = False
        self.lock = threading.Lock()


    def update(self, has_more):
        with self.lock:
            self.has_more = has_more


    def lose(self):
        with self.lock:
            self.lost = True


    def release(self):
        """ Mark the cursor closed. Returns the :class:`Future` of the close
            request, or None if no request was necessary.
        """

        with self.lock:
            if self.closed == True:
                return None

            self.closed = True
            needed = self.has_more and self.id is not None and self.lost == False

        if needed == False:
            return None

        return self.remote.close(self.id)


# end of class _Teardown



def _finalize(teardown):

    closing = teardown.release()

    if closing is not None:
        closing.add_done_callback(_finalized)



def _finalized(closing):

    exception = closing.exception()
    if exception is not None:
        logger.debug('closing an abandoned cursor failed: %s', exception)



class Cursor:
    """ Iterate over the results of a query, synchronously with ``for`` or
        ``next()``, or asynchronously with ``async for``. Elements are
        decoded as *type*.

        :ivar id: The server-side cursor id, None if everything fit in the
            first page.
        :ivar count: The total number of results, if the query asked for it.
        :ivar extra: Statistics and warnings reported by the server.
        :ivar cached: True if the result came from the query cache.
    """

    def __init__(self, remote, entity, type=Any, strict=False, naming=None):

        self.remote = remote
        self.type = type
        self.strict = strict
        self.naming = naming

        self.id = entity.id
        self.count = entity.count
        self.extra = entity.extra
        self.cached = entity.cached

        self._teardown = _Teardown(remote, entity.id, entity.has_more)

        try:
            items = self._decode(entity.result)
        except DriverError:
            _finalize(self._teardown)
            raise

        self._buffer = collections.deque(items)
        self._lock = threading.RLock()
        self._fetch = None
        self._error = None
        self._finalizer = weakref.finalize(self, _finalize, self._teardown)
        self._finalizer.atexit = False


    def __repr__(self):
        return '<Cursor %s>' % (self.id,)


    def __iter__(self):
        return self


    def __aiter__(self):
        return self


    def __enter__(self):
        return self


    def __exit__(self, *exception):
        self.close().result()


    async def __aenter__(self):
        return self


    async def __aexit__(self, *exception):
        await self.close()


    @property
    def closed(self):
        return self._teardown.closed


    @property
    def warnings(self):
        return self.extra.get('warnings', list())


    def _decode(self, items):
        return serde.deserialize(items, List[self.type], self.strict, self.naming)


    def has_next(self):
        """ True if another element is available, either buffered or on the
            server. Always False once the cursor is closed.
        """

        if self._teardown.closed == True:
            return False

        with self._lock:
            if len(self._buffer) > 0:
                return True
            if self._error is not None:
                raise self._error
            return self._teardown.has_more


    def _take(self):
        """ Pop one buffered element. Must be called with the lock held.
        """

        if self._teardown.closed == True:
            raise CursorClosed('cursor %s is closed' % (self.id,))

        if len(self._buffer) > 0:
            return self._buffer.popleft()

        if self._error is not None:
            raise self._error

        if self._teardown.has_more == False:
            return _END

        return _EMPTY


    def _next_page(self):
        """ Return the :class:`Future` for the page fetch in flight, starting
            one if necessary. Must be called with the lock held; concurrent
            consumers share the same fetch.
        """

        fetch = self._fetch

        if fetch is None:
            fetch = self.remote.next(self.id).then(self._page).recover(self._lost)
            if fetch.done() == False:
                self._fetch = fetch

        return fetch


    def _page(self, entity):

        items = self._decode(entity.result)

        with self._lock:
            self._fetch = None

            if self._teardown.closed == True:
                return

            self._buffer.extend(items)
            self._teardown.update(entity.has_more)

            if entity.extra:
                self.extra = entity.extra


    def _lost(self, exception):
        """ A failed page fetch fails the cursor for good. The server may
            already have moved past the page, so fetching again would skip
            it without a trace.
        """

        error = exception

        if isinstance(exception, TransportError):
            error = CursorHostLost('host %s holding cursor %s is gone' % (self.remote.handle.host, self.id))
            error.__cause__ = exception
            self._teardown.lose()

        with self._lock:
            self._fetch = None
            self._error = error

        raise error


    def __next__(self):

        while True:
            with self._lock:
                item = self._take()
                if item is _END:
                    raise StopIteration
                if item is not _EMPTY:
                    return item
                fetch = self._next_page()

            fetch.result()


    async def __anext__(self):

        while True:
            with self._lock:
                item = self._take()
                if item is _END:
                    raise StopAsyncIteration
                if item is not _EMPTY:
                    return item
                fetch = self._next_page()

            await shield(fetch)


    def next_batch(self):
        """ Return a :class:`Future` for the next batch of elements: those
            already buffered, or else the next page from the server. An
            exhausted cursor yields an empty list. Cancelling the returned
            future while a page is in flight closes the cursor.
        """

        with self._lock:
            try:
                item = self._take()
            except DriverError as exc:
                return Future.failed(exc)

            if item is _END:
                return Future.completed(list())

            if item is not _EMPTY:
                batch = [item]
                batch.extend(self._buffer)
                self._buffer.clear()
                return Future.completed(batch)

            fetch = self._next_page()

        batch = shield(fetch).then(lambda ignored: self.next_batch())
        batch.set_canceller(self.close)
        return batch


    def all(self):
        """ Return every remaining element as a list.
        """

        return list(self)


    def close(self):
        """ Close the cursor, releasing it on the server if the server still
            holds more results. Returns a :class:`Future` completing when the
            server acknowledged. Closing twice is harmless.
        """

        closing = self._teardown.release()
        self._finalizer.detach()

        with self._lock:
            self._buffer.clear()

        if closing is None:
            return Future.completed(None)

        return closing


# end of class Cursor


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
