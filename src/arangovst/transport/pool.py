""" Connection pooling. The :class:`ConnectionPool` keeps one
    :class:`HostPool` per host; each host pool hands out leases on its
    persistent connections, opening new ones on a worker thread as demand
    grows, and suspends callers once every connection is saturated. The
    pool also keeps the table of hosts currently considered dead.
"""

import collections
import concurrent.futures
import logging
import threading
import time

from .. import poll
from ..errors import ConnectionClosedError, DriverError, RequestTimeout
from ..future import Future
from ..protocol import Request
from . import connection as _connection


logger = logging.getLogger(__name__)


class HostPool:
    """ The connections to a single host. A lease is taken for every request
        in flight; a connection with fewer than *max_in_flight* leases can
        take another request.
    """

    def __init__(self, host, configuration, factory, workers):

        self.host = host
        self.configuration = configuration
        self.factory = factory
        self.workers = workers

        self.connections = list()
        self.transient = set()
        self.leases = dict()
        self.opening = 0
        self.waiters = collections.deque()
        self.closed = False
        self.lock = threading.Lock()


    def __repr__(self):
        return '<HostPool %s: %d connections>' % (self.host, len(self.connections))


    def _prune(self):
        """ Forget connections that are no longer usable. Must be called
            with the lock held.
        """

        alive = list()

        for connection in self.connections:
            if connection.state in (_connection.CLOSING, _connection.CLOSED):
                self.leases.pop(connection, None)
            else:
                alive.append(connection)

        self.connections = alive


    def _available(self):
        """ Return the least loaded ready connection with room for another
            request, or None. Must be called with the lock held.
        """

        limit = self.configuration.max_in_flight
        chosen = None
        chosen_leases = None

        for connection in self.connections:
            if connection.ready == False:
                continue

            leases = self.leases.get(connection, 0)
            if leases >= limit:
                continue

            if chosen is None or leases < chosen_leases:
                chosen = connection
                chosen_leases = leases

        return chosen


    def acquire(self):
        """ Return a :class:`Future` that completes with a leased
            :class:`Connection`. Every successful acquire must be paired
            with a call to :func:`release`.
        """

        future = Future()
        configuration = self.configuration

        with self.lock:
            if self.closed == True:
                future.set_exception(ConnectionClosedError('connection pool is closed'))
                return future

            self._prune()
            connection = self._available()

            if connection is not None:
                self.leases[connection] = self.leases.get(connection, 0) + 1
                action = 'lease'
            elif len(self.connections) + self.opening < configuration.max_connections:
                self.opening += 1
                action = 'open'
            elif configuration.overflow == 'new':
                action = 'transient'
            else:
                timer = threading.Timer(configuration.acquire_timeout, self._expire, (future,))
                timer.daemon = True
                self.waiters.append((future, timer))
                action = 'wait'

        if action == 'lease':
            if future.set_result(connection) == False:
                self.release(connection)
        elif action == 'open':
            self.workers.submit(self._open, future, False)
        elif action == 'transient':
            self.workers.submit(self._open, future, True)
        else:
            future.set_canceller(lambda: self._forget(future))
            timer.start()

        return future


    def _open(self, future, transient):
        """ Connect a new connection on behalf of *future*. Runs on a worker
            thread.
        """

        try:
            connection = self.factory(self.host)
            connection.connect()
        except DriverError as exc:
            with self.lock:
                if transient == False:
                    self.opening -= 1
            future.set_exception(exc)
            self._serve()
            return

        with self.lock:
            if transient == False:
                self.opening -= 1

            if self.closed == True:
                stale = True
            else:
                stale = False
                if transient == True:
                    self.transient.add(connection)
                else:
                    self.connections.append(connection)
                self.leases[connection] = 1

        if stale == True:
            connection.close()
            future.set_exception(ConnectionClosedError('connection pool is closed'))
            return

        if future.set_result(connection) == False:
            self.release(connection)
        else:
            self._serve()


    def _expire(self, future):

        if self._forget(future) == True:
            future.set_exception(RequestTimeout('no connection to %s available within %.1f seconds' % (self.host, self.configuration.acquire_timeout)))


    def _forget(self, future):
        """ Remove *future* from the waiters; returns True if it was still
            waiting.
        """

        with self.lock:
            for waiter in self.waiters:
                if waiter[0] is future:
                    self.waiters.remove(waiter)
                    break
            else:
                return False

        waiter[1].cancel()
        return True


    def _serve(self):
        """ Hand released capacity to waiting callers, opening a replacement
            connection if there is room for one.
        """

        while True:
            with self.lock:
                if len(self.waiters) == 0 or self.closed == True:
                    return

                self._prune()
                connection = self._available()

                if connection is not None:
                    future, timer = self.waiters.popleft()
                    self.leases[connection] = self.leases.get(connection, 0) + 1
                    action = 'lease'
                elif len(self.connections) + self.opening < self.configuration.max_connections:
                    future, timer = self.waiters.popleft()
                    self.opening += 1
                    action = 'open'
                else:
                    return

            timer.cancel()

            if action == 'open':
                self.workers.submit(self._open, future, False)
                return

            if future.set_result(connection) == False:
                with self.lock:
                    if connection in self.leases:
                        self.leases[connection] -= 1


    def release(self, connection):

        discard = False

        with self.lock:
            count = self.leases.get(connection)
            if count is None:
                return

            count -= 1

            if connection in self.transient and count <= 0:
                self.transient.discard(connection)
                del self.leases[connection]
                discard = True
            else:
                self.leases[connection] = max(0, count)

        if discard == True:
            connection.close()

        self._serve()


    def idle(self, interval, now):
        """ Return the connections without leases or requests in flight
            that have not been used for at least *interval* seconds.
        """

        with self.lock:
            self._prune()
            return [connection for connection in self.connections
                    if self.leases.get(connection, 0) == 0
                    and connection.in_flight == 0
                    and now - connection.last_used >= interval]


    def close(self):

        with self.lock:
            self.closed = True
            connections = self.connections + list(self.transient)
            self.connections = list()
            self.transient = set()
            self.leases = dict()
            waiters = list(self.waiters)
            self.waiters.clear()

        for future, timer in waiters:
            timer.cancel()
            future.set_exception(ConnectionClosedError('connection pool is closed'))

        for connection in connections:
            connection.close()


# end of class HostPool



class ConnectionPool:
    """ All connections of one client, grouped by host. A custom *factory*
        may be provided to create connection instances; it receives the
        :class:`arangovst.config.Host` and must return an unconnected
        :class:`Connection`. The *clock* is used for the dead host table.
    """

    def __init__(self, configuration, factory=None, clock=time.monotonic):

        self.configuration = configuration
        self.clock = clock
        self.credentials = configuration.credentials

        if factory is None:
            factory = self._connection

        self.factory = factory

        self.pools = dict()
        self.dead = dict()
        self.closed = False
        self.lock = threading.Lock()
        self.probes = set()

        self.workers = concurrent.futures.ThreadPoolExecutor(thread_name_prefix='arangovst-connect')

        interval = configuration.keepalive_interval
        if interval is None:
            self.poller = None
        else:
            self.poller = poll.Poller(self.keepalive, interval, 'arangovst-keepalive').start()


    def _connection(self, host):

        configuration = self.configuration

        if host.tls:
            context = configuration.tls_context()
        else:
            context = None

        return _connection.Connection(host, self.credentials,
                    configuration.connect_timeout, configuration.chunk_size, context)


    def _pool(self, host):

        with self.lock:
            try:
                pool = self.pools[host]
            except KeyError:
                pool = HostPool(host, self.configuration, self.factory, self.workers)
                self.pools[host] = pool

        return pool


    def acquire(self, host):
        """ Return a :class:`Future` for a leased connection to *host*.
        """

        if self.closed == True:
            return Future.failed(ConnectionClosedError('connection pool is closed'))

        return self._pool(host).acquire()


    def release(self, connection):

        with self.lock:
            pool = self.pools.get(connection.host)

        if pool is None:
            connection.close()
        else:
            pool.release(connection)


    def mark_dead(self, host, cooldown=None):
        """ Consider *host* unhealthy for *cooldown* seconds, defaulting to
            the configured dead host cool-down.
        """

        if cooldown is None:
            cooldown = self.configuration.dead_host_cooldown

        with self.lock:
            self.dead[host] = self.clock() + cooldown

        logger.warning('host %s marked dead for %.1f seconds', host, cooldown)


    def is_alive(self, host):

        with self.lock:
            try:
                until = self.dead[host]
            except KeyError:
                return True

            if self.clock() >= until:
                del self.dead[host]
                return True

        return False


    def clear_dead(self):
        with self.lock:
            self.dead.clear()


    def keepalive(self):
        """ Probe every idle connection; connections that fail the probe
            are closed and replaced on demand.
        """

        interval = self.configuration.keepalive_interval
        now = time.monotonic()

        with self.lock:
            pools = list(self.pools.values())

        request = Request(method='GET', path='/_admin/server/availability')

        for pool in pools:
            for connection in pool.idle(interval, now):
                probe = connection.send(request, self.configuration.connect_timeout)
                self.probes.add(probe)
                probe.add_done_callback(lambda probe, connection=connection: self._probed(connection, probe))


    def _probed(self, connection, probe):

        self.probes.discard(probe)
        exception = probe.exception()

        if exception is not None:
            logger.warning('keep-alive to %s failed: %s', connection.host, exception)
            connection.close()
        elif probe.result().code >= 500:
            logger.warning('keep-alive to %s answered %d', connection.host, probe.result().code)
            connection.close()


    def close(self):

        if self.poller is not None:
            self.poller.stop()

        with self.lock:
            self.closed = True
            pools = list(self.pools.values())
            self.pools = dict()

        for pool in pools:
            pool.close()

        self.workers.shutdown(wait=False)


# end of class ConnectionPool


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
