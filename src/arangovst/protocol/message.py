""" Request and response descriptors. A :class:`Request` describes a single
    logical request without having a connection or a message id yet; it is
    immutable, so the executor can send the same instance again to another
    host when a transient failure calls for a retry. A :class:`Response` is
    what comes back: the decoded envelope plus the unpacked body.
"""

from typing import Any, Dict, Optional
from urllib.parse import quote

import msgspec

from . import fields


class Request(msgspec.Struct, frozen=True, kw_only=True):
    """ The fields are largely in order of how they are represented on the
        wire: the *method* name, the *database* the request is scoped to
        (empty for server-wide requests), the *path* of the endpoint, the
        ordered *query* parameters, the *headers* and finally the *body*.

        :ivar retryable: Allow the executor to retry a non-idempotent request.
        :ivar timeout: Per-request deadline in seconds, overriding the
            configured default.
    """

    method: str
    path: str
    database: str = ''
    query: Dict[str, str] = {}
    headers: Dict[str, str] = {}
    body: Any = None
    retryable: bool = False
    timeout: Optional[float] = None

    def __post_init__(self):
        if self.method not in fields.METHOD_CODES:
            raise ValueError('invalid request method: ' + repr(self.method))


    @property
    def idempotent(self):
        """ True if the request may be sent a second time after a transient
            failure.
        """

        return self.method in fields.IDEMPOTENT or self.retryable


    @property
    def dirty_read(self):
        return self.headers.get(fields.ALLOW_DIRTY_READ) == 'true'


    def replace(self, **changes):
        return msgspec.structs.replace(self, **changes)


# end of class Request



class Response(msgspec.Struct, kw_only=True):
    """ A decoded response envelope. The *meta* dictionary holds the header
        map sent by the server, including any positional header fields this
        client does not know about.
    """

    code: int
    meta: Dict[str, Any] = {}
    body: Any = None
    version: int = fields.VERSION
    kind: int = fields.RESPONSE

    @property
    def ok(self):
        return self.code < 400


# end of class Response



def path(*segments):
    """ Join the path *segments* into an absolute path, quoting each segment
        individually. Segments are converted to strings first; None entries
        are skipped.
    """

    parts = list()

    for segment in segments:
        if segment is None:
            continue

        segment = str(segment)
        for piece in segment.strip('/').split('/'):
            if piece == '':
                continue
            parts.append(quote(piece, safe=''))

    return '/' + '/'.join(parts)



def query_value(value):
    """ Render a single query parameter the way the server expects it.
    """

    if value is True:
        return 'true'
    if value is False:
        return 'false'
    if hasattr(value, 'value'):
        value = value.value
    return str(value)



def query(*pairs, **kwargs):
    """ Build an ordered query map. Positional (name, value) *pairs* are
        added first, then keyword arguments in the order given; None values
        are dropped.
    """

    result = dict()

    for name, value in pairs:
        if value is None:
            continue
        result[name] = query_value(value)

    for name, value in kwargs.items():
        if value is None:
            continue
        result[name] = query_value(value)

    return result


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
