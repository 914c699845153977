""" The entry point. An :class:`ArangoClient` owns the configuration, the
    executor with its connection pool, and the background host list
    refresh; database handles obtained from it share all of these.

    Typical use::

        with arangovst.ArangoClient(hosts=['127.0.0.1:8529'], password='secret') as client:
            db = client.db('inventory')
            cursor = db.query('FOR item IN parts RETURN item', Part).result()
            for part in cursor:
                print(part.name)
"""

import logging
from typing import List

from . import endpoints
from . import poll
from .config import Configuration, Host
from .database import Database
from .entities import ServerEndpoint
from .errors import ConfigError
from .executor import Executor


logger = logging.getLogger(__name__)


class ArangoClient:
    """ Either pass a complete :class:`Configuration`, or the configuration
        options as keyword arguments.
    """

    def __init__(self, configuration=None, **options):

        if configuration is None:
            configuration = Configuration(**options)
        elif len(options) > 0:
            raise ConfigError('pass either a configuration or keyword options, not both')

        self.configuration = configuration
        self.executor = Executor(configuration)
        self.poller = None

        if configuration.acquire_host_list:
            self.acquire_host_list().add_done_callback(_acquired)
            self.poller = poll.Poller(self._refresh, configuration.acquire_host_list_interval, 'arangovst-hosts')
            self.poller.start()


    def __enter__(self):
        return self


    def __exit__(self, *exception):
        self.close()


    def db(self, name=endpoints.SYSTEM):
        return Database(self.executor, name)


    def get_version(self, details=False):
        return self.db().get_version(details)


    def create_database(self, name):
        return self.db(name).create()


    def get_databases(self):
        return self.db()._execute(endpoints.databases(), List[str], 'result')


    def get_accessible_databases(self):
        return self.db().get_accessible_databases()


    def acquire_host_list(self):
        """ Ask the cluster for its coordinator endpoints and use them from
            now on. Returns a :class:`Future` for the list of hosts.
        """

        tls = self.configuration.use_tls

        def _update(entries):
            hosts = [Host.parse(entry.endpoint, tls) for entry in entries if entry.endpoint]
            self.executor.resolver.update_hosts(hosts)
            logger.info('host list is now %s', ', '.join(str(host) for host in hosts))
            return hosts

        acquired = self.db()._execute(endpoints.cluster_endpoints(), List[ServerEndpoint], 'endpoints')
        return acquired.then(_update)


    def _refresh(self):
        self.acquire_host_list().result(self.configuration.acquire_timeout)


    def execute(self, request, type=None):
        """ Send an arbitrary :class:`arangovst.protocol.Request`, decoding
            the response body as *type*.
        """

        return self.executor.execute(request, type)


    def close(self):

        if self.poller is not None:
            self.poller.stop()
            self.poller = None

        self.executor.close()


# end of class ArangoClient



def _acquired(future):

    exception = future.exception()
    if exception is not None:
        logger.warning('cannot acquire host list: %s', exception)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
