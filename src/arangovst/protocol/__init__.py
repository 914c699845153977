"""
arangovst protocol layer
========================

Transport-agnostic pieces of the wire protocol:

fields.py
    Canonical constants: versions, message kinds, method codes, header
    names, transient error numbers.

message.py
    Request and Response descriptors.

pack.py
    Packed documents (msgpack via msgspec).

wire.py
    Chunk framing and the positional request/response/authentication
    headers.

Nothing in here opens a socket; see :mod:`arangovst.transport`.
"""

from . import fields
from . import pack
from . import message
from . import wire

from .message import Request, Response


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
