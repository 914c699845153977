""" The request executor: the single place where a request descriptor meets
    the transport. Each call to :func:`Executor.execute` resolves a host,
    leases a connection, sends the request, and converts the response into
    either a decoded value or an exception, retrying on another host when a
    transient failure allows it.
"""

import logging
import threading
from typing import Any

from . import serde
from .config import Host
from .entities import ErrorEntity
from .errors import (
    ConnectError,
    ConnectionClosedError,
    DriverError,
    ServerError,
)
from .future import Future
from .protocol import fields
from .transport.pool import ConnectionPool
from .transport.resolver import HostResolver


logger = logging.getLogger(__name__)


class Executor:
    """ Run requests against the hosts of *configuration*. A custom *pool*
        or *resolver* may be provided; by default both are built from the
        configuration.
    """

    def __init__(self, configuration, pool=None, resolver=None):

        self.configuration = configuration

        if pool is None:
            pool = ConnectionPool(configuration)

        if resolver is None:
            resolver = HostResolver(configuration.hosts, configuration.load_balancing, pool)

        self.pool = pool
        self.resolver = resolver

        # Requests in flight are owned here until they complete, whether or
        # not the caller keeps the returned future.
        self.dispatches = set()
        self.lock = threading.Lock()


    def execute(self, request, decoder=None, handle=None, *, pinned=False, timeout=None):
        """ Send the :class:`arangovst.protocol.Request` and return a
            :class:`Future` for the decoded result. The *decoder* is a type
            descriptor or a callable applied to the response body; None
            returns the body unchanged. A *handle* binds the request to a
            host; if *pinned* is True the request never moves elsewhere. The
            *timeout* in seconds overrides the request's own and the
            configured default.
        """

        configuration = self.configuration

        if timeout is None:
            timeout = request.timeout
        if timeout is None:
            timeout = configuration.timeout

        decoder = serde.as_decoder(decoder, configuration.strict, configuration.naming)

        dispatch = _Dispatch(self, request, decoder, handle, pinned, timeout)

        with self.lock:
            self.dispatches.add(dispatch)

        dispatch.future.add_done_callback(lambda future: self._done(dispatch))
        return dispatch.start()


    def _done(self, dispatch):
        with self.lock:
            self.dispatches.discard(dispatch)


    def close(self):
        self.pool.close()


# end of class Executor



class _Dispatch:
    """ The state of one logical request across its attempts. Every step
        runs as a callback on whichever thread completed the previous one.
    """

    def __init__(self, executor, request, decoder, handle, pinned, timeout):

        self.executor = executor
        self.request = request
        self.decoder = decoder
        self.handle = handle
        self.pinned = pinned
        self.timeout = timeout

        self.attempt = 0
        self.host = None
        self.connection = None
        self.pending = None
        self.timer = None
        self.lock = threading.Lock()

        self.future = Future(canceller=self.cancel)


    def start(self):
        self.send()
        return self.future


    def cancel(self):

        with self.lock:
            pending = self.pending
            timer = self.timer
            self.pending = None
            self.timer = None

        if timer is not None:
            timer.cancel()

        if pending is not None:
            pending.cancel()


    def send(self):

        if self.future.done():
            return

        request = self.request

        try:
            host = self.executor.resolver.resolve(self.handle, request.dirty_read, self.pinned)
        except DriverError as exc:
            self.future.set_exception(exc)
            return

        self.host = host
        acquired = self.executor.pool.acquire(host)

        with self.lock:
            self.timer = None
            self.pending = acquired

        acquired.add_done_callback(self.acquired)


    def acquired(self, acquired):

        exception = acquired.exception()
        if exception is not None:
            self.failed(exception)
            return

        connection = acquired.result()

        if self.future.done():
            self.executor.pool.release(connection)
            return

        self.connection = connection
        sent = connection.send(self.request, self.timeout)

        with self.lock:
            self.pending = sent

        sent.add_done_callback(self.responded)


    def responded(self, sent):

        connection = self.connection
        self.connection = None

        if connection is not None:
            self.executor.pool.release(connection)

        exception = sent.exception()
        if exception is not None:
            self.failed(exception)
            return

        response = sent.result()

        if transient(response):
            endpoint = response.meta.get(fields.ENDPOINT)
            if endpoint:
                try:
                    leader = Host.parse(endpoint, self.host.tls)
                except DriverError:
                    logger.warning('ignoring unparseable leader endpoint %r', endpoint)
                else:
                    self.executor.resolver.set_leader(leader)

            if self.retryable(response) == True:
                self.retry('response code %d' % (response.code))
                return

        if response.ok == False:
            self.future.set_exception(server_error(response))
            return

        try:
            value = self.decoder(response.body)
        except Exception as exc:
            self.future.set_exception(exc)
            return

        self.future.set_result(value)


    def retryable(self, failure):
        """ Whether another attempt is allowed after *failure*, either an
            exception or a transient :class:`Response`. A request that
            never left the client may always be retried; anything else only
            if it is idempotent.
        """

        if self.pinned == True:
            return False

        if self.attempt >= self.executor.configuration.retries:
            return False

        if isinstance(failure, ConnectError):
            return True

        return self.request.idempotent


    def failed(self, exception):

        if isinstance(exception, ConnectionClosedError):
            if self.retryable(exception) == True:
                self.retry(str(exception))
                return

            self.executor.pool.mark_dead(self.host)

        self.future.set_exception(exception)


    def retry(self, reason):

        if self.future.done():
            return

        self.attempt += 1
        host = self.host
        configuration = self.executor.configuration

        self.executor.pool.mark_dead(host)

        handle = self.handle
        if handle is not None and handle.host == host:
            handle.clear()

        delay = configuration.retry_backoff * 2 ** (self.attempt - 1)

        logger.warning('%s %s on %s failed (%s), retry %d of %d in %.2f seconds',
                       self.request.method, self.request.path, host, reason,
                       self.attempt, configuration.retries, delay)

        if delay <= 0:
            self.send()
            return

        timer = threading.Timer(delay, self.send)
        timer.daemon = True

        with self.lock:
            self.pending = None
            self.timer = timer

        timer.start()


# end of class _Dispatch



class Executable:
    """ Base class of the database handles: something bound to an
        :class:`Executor` and a database name that turns endpoint requests
        into futures.
    """

    def __init__(self, executor, database):

        self.executor = executor
        self.database = database


    @property
    def configuration(self):
        return self.executor.configuration


    def _execute(self, request, type=None, field=None, handle=None):
        """ Execute *request*, decoding the response body as *type*. If
            *field* is specified only that key of the body is decoded.
        """

        if field is None:
            decoder = type
        else:
            if type is None:
                type = Any
            configuration = self.configuration
            decoder = serde.decoder(type, field, configuration.strict, configuration.naming)

        return self.executor.execute(request, decoder, handle)


    def _exists(self, request):
        """ Return a :class:`Future` that is True if *request* succeeds and
            False if the server answers that the target does not exist.
            Any other failure propagates.
        """

        found = self.executor.execute(request, serde.void)
        return found.then(_true).recover(_missing)


# end of class Executable



def _true(ignored):
    return True



def _missing(exception):

    if isinstance(exception, ServerError) and exception.code == fields.NOT_FOUND:
        return False

    raise exception



def transient(response):
    """ True if *response* reports a condition another host, or a later
        attempt, may not have: service unavailable, or no cluster leader.
    """

    if response.code == fields.SERVICE_UNAVAILABLE:
        return True

    body = response.body
    if response.code >= 400 and isinstance(body, dict):
        return body.get('errorNum') in fields.TRANSIENT_ERRORS

    return False



def server_error(response):
    """ Build a :class:`ServerError` from an error response.
    """

    body = response.body
    error = None

    if isinstance(body, dict):
        try:
            error = serde.deserialize(body, ErrorEntity)
        except DriverError:
            error = None

    if error is None:
        return ServerError(0, response.code, None)

    return ServerError(error.error_num, response.code, error.error_message)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
