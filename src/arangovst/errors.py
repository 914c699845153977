"""Exception hierarchy.

Frame-level errors are fatal to the connection that produced them, transport
errors may be retried by the executor, everything else propagates to the
caller through the future that was handed out for the request.
"""

from __future__ import annotations

from typing import Optional


class DriverError(Exception):
    """Base class for every error raised by arangovst."""


class ConfigError(DriverError, ValueError):
    """The configuration is invalid."""


class ArgumentError(DriverError, ValueError):
    """A malformed argument was passed to a database handle."""


# Frame-level errors

class ProtocolError(DriverError):
    """A frame could not be parsed."""


class CodecError(ProtocolError):
    """A packed document could not be encoded or decoded."""


class IncompatibleServerError(ProtocolError):
    """The remote side speaks a different protocol version."""


# Transport errors

class TransportError(DriverError):
    """Base class for all transport-layer errors."""


class ConnectionClosedError(TransportError):
    """The connection was closed before a response arrived."""


class ConnectError(ConnectionClosedError):
    """A connection could not be established; the request was never sent."""


class NoHostAvailable(TransportError):
    """No configured host is currently usable."""


# Flow control

class RequestTimeout(DriverError, TimeoutError):
    """A request, connect or acquire deadline expired."""


class Cancelled(DriverError):
    """The future was cancelled by the caller."""


# Application level

class ServerError(DriverError):
    """ The server answered with an error document. The *error_num* is the
        server's own error number, *code* the HTTP-like response code.
    """

    def __init__(self, error_num: int, code: int, message: Optional[str] = None):
        self.error_num = error_num
        self.code = code
        self.message = message or ''
        super().__init__(error_num, code, self.message)

    def __str__(self) -> str:
        return "Response: %d, Error: %d - %s" % (self.code, self.error_num, self.message)


class DeserializationError(DriverError, ValueError):
    """A value could not be converted to the requested type."""


# Cursor lifecycle

class CursorError(DriverError):
    """Base class for cursor lifecycle errors."""


class CursorClosed(CursorError):
    """The cursor was closed and can no longer be iterated."""


class CursorHostLost(CursorError):
    """The host holding the server-side cursor is gone."""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
