""" One persistent connection to one server. Requests are written as chunked
    frames under a lock, so frames from different threads never interleave;
    a background thread reads responses and hands each one to the
    :class:`arangovst.future.Future` waiting on its message id. The server is
    free to answer out of order.
"""

import functools
import heapq
import itertools
import logging
import select
import socket
import ssl
import threading
import time
import weakref

from ..config import Credentials
from ..errors import (
    ConnectError,
    ConnectionClosedError,
    DriverError,
    ProtocolError,
    RequestTimeout,
    ServerError,
)
from ..future import Future
from ..protocol import fields
from ..protocol import wire


logger = logging.getLogger(__name__)

DISCONNECTED = 'Disconnected'
CONNECTING = 'Connecting'
READY = 'Ready'
CLOSING = 'Closing'
CLOSED = 'Closed'

_id_min = 1
_id_max = 0xFFFFFFFFFFFFFFFF


class Connection:
    """ A connection to a single :class:`arangovst.config.Host`. Call
        :func:`connect` once; afterwards :func:`send` may be called from any
        thread until the connection is closed, either explicitly with
        :func:`close` or because the transport failed.

        :ivar state: One of Disconnected, Connecting, Ready, Closing, Closed.
        :ivar last_used: Monotonic timestamp of the last send or receive.
    """

    # Upper bound on how long the reader sleeps before checking deadlines.
    tick = 0.05
    receive_size = 65536

    def __init__(self, host, credentials=None, connect_timeout=10.0,
                 chunk_size=fields.DEFAULT_CHUNK_SIZE, ssl_context=None):

        self.host = host
        self.state = DISCONNECTED
        self.socket = None
        self.connect_timeout = connect_timeout
        self.chunk_size = chunk_size
        self.ssl_context = ssl_context
        self.last_used = time.monotonic()

        if credentials is None:
            credentials = Credentials()

        self.credentials = credentials
        self.headers = credentials.headers()

        # The pending table holds the caller's futures weakly; if the caller
        # loses interest in a response, the late response is dropped.

        self._pending = weakref.WeakValueDictionary()
        self._pending_lock = threading.Lock()
        self._accepting = False
        self._deadlines = list()

        self._id_ticker = itertools.count(_id_min)
        self._state_lock = threading.Lock()
        self._write_lock = threading.Lock()
        self._assembler = wire.ChunkAssembler()
        self._thread = None


    def __repr__(self):
        return '<Connection %s %s>' % (self.host, self.state)


    @property
    def ready(self):
        return self.state == READY


    @property
    def in_flight(self):
        with self._pending_lock:
            return len(self._pending)


    def _id_next(self):
        """ Return the next message id. Must be called with the pending lock
            held; ids still outstanding after a wrap-around are skipped.
        """

        while True:
            id = next(self._id_ticker)

            if id >= _id_max:
                self._id_ticker = itertools.count(_id_min)
                continue

            if id not in self._pending:
                return id


    def connect(self):
        """ Open the socket, wrap it in TLS if the host asks for it, send the
            protocol preamble and authenticate. Blocks for at most
            *connect_timeout* seconds per step. Raises :class:`ConnectError`
            on transport failure, or :class:`ServerError` if the server
            rejected the credentials.
        """

        with self._state_lock:
            if self.state != DISCONNECTED:
                raise ConnectError('connection to %s is %s, cannot connect' % (self.host, self.state))
            self.state = CONNECTING

        host = self.host
        address = (host.host, host.port)

        try:
            sock = socket.create_connection(address, timeout=self.connect_timeout)
        except OSError as exc:
            self.state = CLOSED
            raise ConnectError('cannot connect to %s: %s' % (host, exc)) from exc

        try:
            sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

            if host.tls:
                context = self.ssl_context
                if context is None:
                    context = ssl.create_default_context()
                sock = context.wrap_socket(sock, server_hostname=host.host)

            sock.sendall(fields.PREAMBLE)

            if self.credentials:
                self._authenticate(sock)

            sock.settimeout(None)

        except ServerError:
            sock.close()
            self.state = CLOSED
            raise
        except (OSError, DriverError) as exc:
            sock.close()
            self.state = CLOSED
            raise ConnectError('handshake with %s failed: %s' % (host, exc)) from exc

        self.socket = sock

        with self._pending_lock:
            self._accepting = True

        with self._state_lock:
            self.state = READY

        self.last_used = time.monotonic()
        self._thread = threading.Thread(target=self.run, name='arangovst-reader-' + str(host))
        self._thread.daemon = True
        self._thread.start()

        logger.info('connected to %s', host)


    def _authenticate(self, sock):
        """ Exchange the authentication message synchronously, before the
            reader thread exists.
        """

        credentials = self.credentials

        with self._pending_lock:
            message_id = self._id_next()

        frame = wire.encode_authentication(message_id, credentials.user,
                    credentials.password, credentials.jwt, self.chunk_size)
        sock.sendall(frame)

        assembler = wire.ChunkAssembler()

        while True:
            data = sock.recv(self.receive_size)
            if not data:
                raise ConnectionClosedError('connection closed during authentication')

            messages = assembler.feed(data)
            if len(messages) > 0:
                break

        response_id, payload = messages[0]

        if response_id != message_id:
            raise ProtocolError('authentication answered with message id %d, expected %d' % (response_id, message_id))

        response = wire.response_from_payload(payload)

        if response.code >= 400:
            body = response.body if isinstance(response.body, dict) else dict()
            raise ServerError(body.get('errorNum', 0), response.code,
                              body.get('errorMessage', 'authentication failed'))


    def send(self, request, timeout=None):
        """ Send the :class:`arangovst.protocol.Request` and return a
            :class:`Future` for its :class:`arangovst.protocol.Response`.
            This method does not block waiting for the response, and it never
            raises: failures of any kind are delivered through the future.
            If *timeout* is specified the future fails with
            :class:`RequestTimeout` when no response arrived in time; the
            connection itself remains usable.
        """

        future = Future()

        with self._pending_lock:
            if self._accepting == False:
                future.set_exception(ConnectionClosedError('connection to %s is %s' % (self.host, self.state)))
                return future

            message_id = self._id_next()
            self._pending[message_id] = future

            if timeout is not None:
                heapq.heappush(self._deadlines, (time.monotonic() + timeout, message_id))

        future.set_canceller(functools.partial(self._forget, message_id))

        try:
            frame = wire.encode_request(request, message_id, self.headers, self.chunk_size)
        except DriverError as exc:
            self._forget(message_id)
            future.set_exception(exc)
            return future

        try:
            with self._write_lock:
                self.socket.sendall(frame)
        except (OSError, AttributeError) as exc:
            self._forget(message_id)
            error = ConnectionClosedError('write to %s failed: %s' % (self.host, exc))
            error.__cause__ = exc
            future.set_exception(error)
            self.close()
            return future

        self.last_used = time.monotonic()
        return future


    def _forget(self, message_id):
        with self._pending_lock:
            self._pending.pop(message_id, None)


    def _next_wait(self):

        with self._pending_lock:
            if len(self._deadlines) == 0:
                return self.tick
            remaining = self._deadlines[0][0] - time.monotonic()

        return max(0, min(self.tick, remaining))


    def _expire(self):
        """ Fail every pending request whose deadline has passed.
        """

        now = time.monotonic()
        expired = list()

        with self._pending_lock:
            deadlines = self._deadlines
            while len(deadlines) > 0 and deadlines[0][0] <= now:
                deadline, message_id = heapq.heappop(deadlines)
                future = self._pending.pop(message_id, None)
                if future is not None:
                    expired.append((message_id, future))

        for message_id, future in expired:
            future.set_exception(RequestTimeout('no response from %s for message %d' % (self.host, message_id)))


    def _readable(self, timeout):

        sock = self.socket

        if isinstance(sock, ssl.SSLSocket) and sock.pending() > 0:
            return True

        readable, _, _ = select.select((sock,), (), (), timeout)
        return len(readable) > 0


    def _rep_incoming(self, message_id, payload):
        """ Decode one complete response message and complete the matching
            pending future. Decoding errors propagate; they are fatal to the
            connection.
        """

        response = wire.response_from_payload(payload)

        with self._pending_lock:
            future = self._pending.pop(message_id, None)

        if future is None:
            # The original caller's request is gone: timed out, cancelled,
            # or simply forgotten.
            logger.debug('dropping response to unknown message id %d from %s', message_id, self.host)
            return

        self.last_used = time.monotonic()
        future.set_result(response)


    def run(self):

        error = None

        try:
            while self.state == READY:
                if self._readable(self._next_wait()) == False:
                    self._expire()
                    continue

                data = self.socket.recv(self.receive_size)

                if not data:
                    if self.state == READY:
                        raise ConnectionClosedError('connection closed by ' + str(self.host))
                    break

                # Deadlines are checked before dispatching, so a response that
                # arrives after its deadline is never delivered.

                self._expire()

                for message_id, payload in self._assembler.feed(data):
                    self._rep_incoming(message_id, payload)

        except (OSError, ValueError, DriverError) as exc:
            if self.state == READY:
                error = exc

        finally:
            self._shutdown(error)


    def close(self):
        """ Stop accepting requests and shut the socket down. The reader
            thread drains and fails every outstanding request with
            :class:`ConnectionClosedError`. Safe to call more than once, and
            from any thread.
        """

        with self._state_lock:
            state = self.state

            if state in (CLOSING, CLOSED):
                return

            if state != READY:
                self.state = CLOSED
                return

            self.state = CLOSING

        with self._pending_lock:
            self._accepting = False

        try:
            self.socket.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass

        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(1)


    def _shutdown(self, error):

        with self._state_lock:
            if self.state == CLOSED:
                return
            self.state = CLOSING

        with self._pending_lock:
            self._accepting = False
            pending = list(self._pending.items())
            self._pending.clear()
            self._deadlines = list()

        try:
            self.socket.close()
        except OSError:
            pass

        if error is None:
            logger.info('connection to %s closed', self.host)
            reason = 'connection to %s closed' % (self.host)
        else:
            logger.warning('connection to %s lost: %s', self.host, error)
            reason = 'connection to %s lost: %s' % (self.host, error)

        for message_id, future in pending:
            failure = ConnectionClosedError(reason)
            failure.__cause__ = error
            future.set_exception(failure)

        with self._state_lock:
            self.state = CLOSED


# end of class Connection


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
