""" Host selection. A :class:`HostResolver` picks the host for each request
    according to the configured load balancing strategy, skipping hosts the
    pool has marked dead; a :class:`HostHandle` remembers the choice so a
    sequence of related requests, such as the pages of a cursor, can stay on
    the same host.
"""

import itertools
import logging
import random
import threading

from ..config import LoadBalancing
from ..errors import NoHostAvailable


logger = logging.getLogger(__name__)


class HostHandle:
    """ A single slot holding the host a request or cursor is bound to.
        Empty until the resolver populates it.
    """

    def __init__(self, host=None):
        self.host = host


    def __repr__(self):
        return '<HostHandle %s>' % (self.host,)


    def __bool__(self):
        return self.host is not None


    def set(self, host):
        self.host = host


    def clear(self):
        self.host = None


# end of class HostHandle



class HostResolver:
    """ Choose among *hosts* using *policy*, a :class:`LoadBalancing` value.
        The *pool* is consulted for the dead host table; without one, every
        host is considered alive.
    """

    def __init__(self, hosts, policy=LoadBalancing.NONE, pool=None):

        self.hosts = list(hosts)
        self.policy = LoadBalancing(policy)
        self.pool = pool
        self.leader = None

        self.lock = threading.Lock()
        self.random = random.Random()
        self._counter = itertools.count()
        self._chosen = None


    def is_alive(self, host):

        if self.pool is None:
            return True
        return self.pool.is_alive(host)


    def alive(self):
        with self.lock:
            hosts = list(self.hosts)
        return [host for host in hosts if self.is_alive(host)]


    def resolve(self, handle=None, dirty_read=False, pinned=False):
        """ Return the :class:`arangovst.config.Host` for the next request.
            A populated *handle* whose host is alive wins; if the handle is
            *pinned* and its host is dead, :class:`NoHostAvailable` is
            raised instead of moving elsewhere. A chosen host is stored in
            the *handle*.
        """

        if handle is not None and handle.host is not None:
            host = handle.host

            if self.is_alive(host):
                return host

            if pinned:
                raise NoHostAvailable('pinned host %s is unavailable' % (host))

        host = self._pick(dirty_read)

        if host is None:
            # Every host is marked dead. Give them all another chance before
            # giving up.
            logger.warning('no live host among %d, clearing dead host table', len(self.hosts))
            if self.pool is not None:
                self.pool.clear_dead()
            host = self._pick(dirty_read)

        if host is None:
            raise NoHostAvailable('no host available')

        if handle is not None:
            handle.set(host)

        return host


    def _pick(self, dirty_read):

        alive = self.alive()

        if len(alive) == 0:
            return None

        leader = self.leader
        if dirty_read == False and leader is not None and leader in alive:
            return leader

        if self.policy == LoadBalancing.ROUND_ROBIN:
            with self.lock:
                index = next(self._counter)
            return alive[index % len(alive)]

        if self.policy == LoadBalancing.ONE_RANDOM:
            with self.lock:
                if self._chosen not in alive:
                    self._chosen = self.random.choice(alive)
                return self._chosen

        return alive[0]


    def set_leader(self, host):
        """ Route non-dirty requests to *host* from now on. The host is added
            to the known hosts if necessary.
        """

        with self.lock:
            if host is not None and host not in self.hosts:
                self.hosts.append(host)
            self.leader = host

        logger.info('leader is now %s', host)


    def update_hosts(self, hosts):
        """ Replace the known hosts, for example with the endpoint list
            reported by the cluster.
        """

        hosts = list(hosts)
        if len(hosts) == 0:
            return

        with self.lock:
            self.hosts = hosts
            if self.leader not in hosts:
                self.leader = None


# end of class HostResolver


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
