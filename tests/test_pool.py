import time

import pytest

import arangovst
import fakeserver
from arangovst.transport import connection as _connection
from arangovst.transport.pool import ConnectionPool


def configure(server, **options):
    options.setdefault('user', None)
    options.setdefault('acquire_timeout', 0.5)
    return arangovst.Configuration(hosts=[server.host], **options)


def wait_for(condition, timeout=2):

    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)

    return condition()


def test_lease(server):

    pool = ConnectionPool(configure(server))

    first = pool.acquire(server.host).result(2)
    assert first.ready == True
    pool.release(first)

    second = pool.acquire(server.host).result(2)
    assert second is first

    # Multiplexing: a connection carries several leases at once.

    third = pool.acquire(server.host).result(2)
    assert third is first

    pool.release(second)
    pool.release(third)
    pool.close()

    assert wait_for(lambda: first.state == _connection.CLOSED)


def test_growth(server):
    """ With one request per connection, each lease beyond the first opens
        another connection, up to the limit; then callers wait.
    """

    pool = ConnectionPool(configure(server, max_connections=2, max_in_flight=1))

    first = pool.acquire(server.host).result(2)
    second = pool.acquire(server.host).result(2)
    assert first is not second

    waiting = pool.acquire(server.host)
    time.sleep(0.05)
    assert waiting.done() == False

    pool.release(first)
    assert waiting.result(2) is first

    pool.release(second)
    pool.release(first)
    pool.close()


def test_acquire_timeout(server):

    pool = ConnectionPool(configure(server, max_in_flight=1, acquire_timeout=0.1))

    leased = pool.acquire(server.host).result(2)
    waiting = pool.acquire(server.host)

    with pytest.raises(arangovst.RequestTimeout):
        waiting.result(2)

    pool.release(leased)
    pool.close()


def test_cancel_waiter(server):

    pool = ConnectionPool(configure(server, max_in_flight=1, acquire_timeout=5))

    leased = pool.acquire(server.host).result(2)
    waiting = pool.acquire(server.host)
    waiting.cancel()

    host_pool = pool.pools[server.host]
    assert len(host_pool.waiters) == 0

    pool.release(leased)
    assert host_pool.leases[leased] == 0
    pool.close()


def test_overflow(server):

    pool = ConnectionPool(configure(server, max_in_flight=1, overflow='new'))

    regular = pool.acquire(server.host).result(2)
    extra = pool.acquire(server.host).result(2)

    assert extra is not regular
    assert extra.ready == True

    # Transient connections close once their last lease is released.

    pool.release(extra)
    assert wait_for(lambda: extra.state == _connection.CLOSED)
    assert regular.ready == True

    pool.release(regular)
    pool.close()


def test_connect_failure():

    host = arangovst.Host('127.0.0.1', fakeserver.free_port())
    configuration = arangovst.Configuration(hosts=[host], user=None, connect_timeout=1)
    pool = ConnectionPool(configuration)

    with pytest.raises(arangovst.ConnectError):
        pool.acquire(host).result(2)

    assert pool.pools[host].opening == 0
    pool.close()


def test_replace_closed(server):
    """ A connection that closed underneath the pool is forgotten, and the
        next acquire opens a fresh one.
    """

    pool = ConnectionPool(configure(server))

    first = pool.acquire(server.host).result(2)
    pool.release(first)
    first.close()

    second = pool.acquire(server.host).result(2)
    assert second is not first
    assert second.ready == True

    pool.release(second)
    pool.close()


def test_dead_hosts():

    now = [100.0]
    configuration = arangovst.Configuration(dead_host_cooldown=10)
    pool = ConnectionPool(configuration, clock=lambda: now[0])
    host = arangovst.Host('db', 8529)

    assert pool.is_alive(host) == True

    pool.mark_dead(host)
    assert pool.is_alive(host) == False

    now[0] += 9.9
    assert pool.is_alive(host) == False

    now[0] += 0.2
    assert pool.is_alive(host) == True

    pool.mark_dead(host, cooldown=1)
    assert pool.is_alive(host) == False

    pool.clear_dead()
    assert pool.is_alive(host) == True

    pool.close()


def test_closed(server):

    pool = ConnectionPool(configure(server, max_in_flight=1, acquire_timeout=5))

    leased = pool.acquire(server.host).result(2)
    waiting = pool.acquire(server.host)

    pool.close()

    with pytest.raises(arangovst.ConnectionClosedError):
        waiting.result(2)

    with pytest.raises(arangovst.ConnectionClosedError):
        pool.acquire(server.host).result(2)

    assert wait_for(lambda: leased.state == _connection.CLOSED)


def test_keepalive(server):

    server.route('GET', '/_admin/server/availability', body={'mode': 'default'})
    pool = ConnectionPool(configure(server, keepalive_interval=0.05))

    connection = pool.acquire(server.host).result(2)
    pool.release(connection)

    assert wait_for(lambda: len(server.received('GET', '/_admin/server/availability')) > 0)
    assert connection.ready == True

    pool.close()


def test_keepalive_slow(server):
    """ A connection is not probed again while its last probe is still
        waiting for an answer.
    """

    server.route('GET', '/_admin/server/availability', body={'mode': 'default'}, delay=0.5)
    pool = ConnectionPool(configure(server, keepalive_interval=0.05))

    connection = pool.acquire(server.host).result(2)
    pool.release(connection)

    assert wait_for(lambda: connection.in_flight == 1)
    time.sleep(0.3)

    assert len(server.received('GET', '/_admin/server/availability')) == 1
    assert connection.ready == True

    pool.close()


def test_keepalive_failure(server):

    server.route('GET', '/_admin/server/availability', fakeserver.error(503, 503, 'unavailable'))
    pool = ConnectionPool(configure(server, keepalive_interval=0.05))

    connection = pool.acquire(server.host).result(2)
    pool.release(connection)

    assert wait_for(lambda: connection.state == _connection.CLOSED)

    replacement = pool.acquire(server.host).result(2)
    assert replacement is not connection

    pool.release(replacement)
    pool.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
