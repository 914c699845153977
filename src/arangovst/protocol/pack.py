""" Packed documents. Every header and body on the wire is a msgpack document;
    this module is the one place that knows how to turn Python values into
    that representation and back. Map ordering is preserved in both
    directions, which matters: the query map of a request is ordered.

    Dates travel as msgpack extension types carrying their ISO text, one
    code each for dates, naive datetimes and datetimes with an offset, so
    that they come back as they went in.
"""

import datetime

import msgspec

from ..errors import CodecError


DATE = 1
DATETIME = 2
DATETIME_OFFSET = 3

_builtins = (bytes, bytearray, datetime.datetime, datetime.date)


def _ext_hook(code, data):

    if code == DATE:
        return datetime.date.fromisoformat(bytes(data).decode('ascii'))

    if code == DATETIME or code == DATETIME_OFFSET:
        return datetime.datetime.fromisoformat(bytes(data).decode('ascii'))

    return msgspec.msgpack.Ext(code, bytes(data))


_encoder = msgspec.msgpack.Encoder()
_decoder = msgspec.msgpack.Decoder(ext_hook=_ext_hook)


def _extend(value):
    """ Replace every date in the builtin *value* with its extension type.
    """

    if isinstance(value, dict):
        return dict((key, _extend(item)) for key, item in value.items())

    if isinstance(value, list):
        return [_extend(item) for item in value]

    if isinstance(value, datetime.datetime):
        text = value.isoformat().encode('ascii')
        if value.utcoffset() is None:
            return msgspec.msgpack.Ext(DATETIME, text)
        return msgspec.msgpack.Ext(DATETIME_OFFSET, text)

    if isinstance(value, datetime.date):
        return msgspec.msgpack.Ext(DATE, value.isoformat().encode('ascii'))

    return value



def pack(value):
    """ Return the packed representation of *value* as bytes. Structs,
        dataclasses, enums, dates and datetimes are all accepted, in
        addition to the usual builtin types.
    """

    try:
        value = msgspec.to_builtins(value, builtin_types=_builtins)
        return _encoder.encode(_extend(value))
    except (TypeError, ValueError, OverflowError) as exc:
        raise CodecError('cannot pack %s: %s' % (type(value).__name__, exc)) from exc



def unpack(data):
    """ Return the Python value held in the packed document *data*. Any
        malformed or truncated input raises :class:`CodecError`.
    """

    try:
        return _decoder.decode(data)
    except (msgspec.DecodeError, ValueError) as exc:
        raise CodecError('malformed packed document: %s' % (exc)) from exc



def to_builtins(value):
    """ Reduce *value* to builtin types, applying the same renaming rules
        :func:`pack` would. This is how option structs are merged into larger
        request bodies.
    """

    try:
        return msgspec.to_builtins(value, builtin_types=_builtins)
    except (TypeError, ValueError) as exc:
        raise CodecError('cannot convert %s: %s' % (type(value).__name__, exc)) from exc


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
