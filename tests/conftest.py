import pytest

import arangovst
import fakeserver


@pytest.fixture
def server():

    fake = fakeserver.FakeServer().start()
    yield fake
    fake.stop()


@pytest.fixture
def servers():
    """ Two independent servers, for failover tests.
    """

    first = fakeserver.FakeServer().start()
    second = fakeserver.FakeServer().start()

    yield (first, second)

    first.stop()
    second.stop()


@pytest.fixture
def client_factory():
    """ Build clients on demand; all of them are closed when the test ends.
    """

    clients = list()

    def factory(*hosts, **options):
        options.setdefault('retry_backoff', 0.01)
        options.setdefault('timeout', 5.0)
        options.setdefault('connect_timeout', 2.0)
        client = arangovst.ArangoClient(hosts=[host for host in hosts], **options)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
