""" The transport layer: persistent connections speaking the chunked wire
    protocol, the per-host connection pool, and host selection.
"""

from . import connection
from . import pool
from . import resolver

from .connection import Connection
from .pool import ConnectionPool
from .resolver import HostHandle, HostResolver

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
