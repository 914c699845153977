""" Python client for ArangoDB over the chunked binary protocol. Every
    operation returns a :class:`Future`; requests from many threads are
    multiplexed over a small pool of persistent connections per host.
"""

import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Utility components.

from . import errors
from . import future
from . import poll
from . import weakref

# Submodules used by multiple other components.

from . import protocol
from . import config
from . import serde
from . import entities
from . import options
from . import endpoints
from . import transport
from . import executor
from . import cursor

# Primary public-facing interfaces.

from .config import Configuration, Credentials, Host, LoadBalancing
from .future import Future
from .protocol import Request, Response
from .client import ArangoClient
from .database import Database
from .collection import Collection
from .graph import Graph
from .view import View, ArangoSearch
from .route import Route
from .cursor import Cursor
from .errors import (
    DriverError,
    ConfigError,
    ArgumentError,
    ProtocolError,
    CodecError,
    IncompatibleServerError,
    TransportError,
    ConnectionClosedError,
    ConnectError,
    NoHostAvailable,
    RequestTimeout,
    Cancelled,
    ServerError,
    DeserializationError,
    CursorError,
    CursorClosed,
    CursorHostLost,
)

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
