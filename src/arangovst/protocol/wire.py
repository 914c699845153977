"""Chunked framing for protocol messages.

Every message is carried in one or more chunks. Each chunk starts with a
fixed 24 byte header, little endian:

    uint32  chunk length, header included
    uint32  chunkx: (count << 1) | 1 on the first chunk, index << 1 after
    uint64  message id
    uint64  total message length

The message itself is a uint32 header length, the packed header, and the
packed body if there is one.

Request header
    [version, REQUEST, database, method, path, query, headers]

Response header
    [version, RESPONSE, code, headers, (extra fields...)]

Authentication header
    [version, AUTHENTICATION, 'plain', user, password]
    [version, AUTHENTICATION, 'jwt', token]
"""

from __future__ import annotations

import math
import struct
from typing import Any, Dict, List, Optional, Tuple

from ..errors import IncompatibleServerError, ProtocolError
from . import fields
from .message import Request, Response
from .pack import pack, unpack


CHUNK_HEADER = struct.Struct('<IIQQ')
HEADER_LENGTH = struct.Struct('<I')


def pack_message(header: List[Any], body: Any = None, has_body: bool = False) -> bytes:
    """Serialize a header and optional body into one message payload."""

    head = pack(header)
    payload = HEADER_LENGTH.pack(len(head)) + head

    if has_body or body is not None:
        payload += pack(body)

    return payload


def unpack_message(payload: bytes) -> Tuple[List[Any], Any, bool]:
    """Deserialize a payload -> (header, body, has_body)."""

    if len(payload) < HEADER_LENGTH.size:
        raise ProtocolError('truncated message: %d bytes' % len(payload))

    (length,) = HEADER_LENGTH.unpack_from(payload)
    end = HEADER_LENGTH.size + length

    if len(payload) < end:
        raise ProtocolError(
            'truncated message header: need %d bytes, have %d' % (end, len(payload))
        )

    header = unpack(payload[HEADER_LENGTH.size:end])

    if not isinstance(header, list) or len(header) < 2:
        raise ProtocolError('message header is not a positional array')

    if header[0] != fields.VERSION:
        raise IncompatibleServerError(
            'message is protocol version %r, recipient expects %r' % (header[0], fields.VERSION)
        )

    rest = payload[end:]
    if rest:
        return header, unpack(rest), True
    return header, None, False


def to_chunks(message_id: int, payload: bytes, chunk_size: int = fields.DEFAULT_CHUNK_SIZE) -> bytes:
    """Split a message payload into chunks, returned back to back."""

    room = chunk_size - CHUNK_HEADER.size
    if room <= 0:
        raise ValueError('chunk size %d leaves no room for data' % chunk_size)

    total = len(payload)
    count = max(1, math.ceil(total / room))
    chunks = []

    for index in range(count):
        data = payload[index * room:(index + 1) * room]
        if index == 0:
            chunkx = (count << 1) | 1
        else:
            chunkx = index << 1
        chunks.append(CHUNK_HEADER.pack(CHUNK_HEADER.size + len(data), chunkx, message_id, total))
        chunks.append(data)

    return b''.join(chunks)


class ChunkAssembler:
    """Incrementally reassemble messages from a byte stream.

    Bytes are handed to :meth:`feed` as they arrive; complete messages are
    returned as (message_id, payload) tuples in completion order.
    """

    def __init__(self) -> None:
        self._buffer = bytearray()
        self._partial: Dict[int, Dict[str, Any]] = {}

    @property
    def idle(self) -> bool:
        """True when no partial chunk or message is buffered."""
        return not self._buffer and not self._partial

    def feed(self, data: bytes) -> List[Tuple[int, bytes]]:
        self._buffer += data
        complete = []

        while len(self._buffer) >= CHUNK_HEADER.size:
            length, chunkx, message_id, message_length = CHUNK_HEADER.unpack_from(self._buffer)

            if length < CHUNK_HEADER.size:
                raise ProtocolError('invalid chunk length: %d' % length)

            if len(self._buffer) < length:
                break

            chunk = bytes(self._buffer[CHUNK_HEADER.size:length])
            del self._buffer[:length]

            message = self._add(message_id, chunkx, message_length, chunk)
            if message is not None:
                complete.append((message_id, message))

        return complete

    def _add(self, message_id: int, chunkx: int, message_length: int, chunk: bytes) -> Optional[bytes]:
        first = chunkx & 1

        if first:
            count = chunkx >> 1
            if count < 1:
                raise ProtocolError('first chunk announces %d chunks' % count)
            if count == 1:
                if len(chunk) != message_length:
                    raise ProtocolError(
                        'message %d: expected %d bytes, got %d' % (message_id, message_length, len(chunk))
                    )
                return chunk
            if message_id in self._partial:
                raise ProtocolError('message %d started twice' % message_id)
            self._partial[message_id] = {'count': count, 'length': message_length, 'pieces': {0: chunk}}
            return None

        index = chunkx >> 1
        try:
            entry = self._partial[message_id]
        except KeyError:
            raise ProtocolError('continuation chunk for unknown message %d' % message_id)

        if index >= entry['count'] or index in entry['pieces']:
            raise ProtocolError('message %d: unexpected chunk index %d' % (message_id, index))

        entry['pieces'][index] = chunk
        if len(entry['pieces']) < entry['count']:
            return None

        del self._partial[message_id]
        pieces = entry['pieces']
        payload = b''.join(pieces[i] for i in range(entry['count']))

        if len(payload) != entry['length']:
            raise ProtocolError(
                'message %d: expected %d bytes, got %d' % (message_id, entry['length'], len(payload))
            )

        return payload


def _single(frame: bytes) -> Tuple[int, bytes]:
    assembler = ChunkAssembler()
    messages = assembler.feed(frame)

    if len(messages) != 1 or not assembler.idle:
        raise ProtocolError('truncated frame')

    return messages[0]


# Requests

def request_header(request: Request) -> List[Any]:
    return [
        fields.VERSION,
        fields.REQUEST,
        request.database,
        fields.METHOD_CODES[request.method],
        request.path,
        request.query,
        request.headers,
    ]


def encode_request(
    request: Request,
    message_id: int,
    headers: Optional[Dict[str, str]] = None,
    chunk_size: int = fields.DEFAULT_CHUNK_SIZE,
) -> bytes:
    """Encode a Request descriptor as a complete frame.

    Extra *headers* (authorization, for one) are merged underneath the
    request's own headers; the request wins on conflicts.
    """

    header = request_header(request)

    if headers:
        merged = dict(headers)
        merged.update(request.headers)
        header[6] = merged

    payload = pack_message(header, request.body)
    return to_chunks(message_id, payload, chunk_size)


def request_from_payload(payload: bytes) -> Request:
    header, body, _has_body = unpack_message(payload)

    if header[1] != fields.REQUEST:
        raise ProtocolError('expected a request, got message kind %r' % (header[1],))
    if len(header) < 7:
        raise ProtocolError('request header has %d fields, expected 7' % len(header))

    try:
        method = fields.METHOD_NAMES[header[3]]
    except (KeyError, TypeError):
        raise ProtocolError('unknown method code: %r' % (header[3],))

    return Request(
        method=method,
        database=header[2] or '',
        path=header[4],
        query=dict(header[5] or {}),
        headers=dict(header[6] or {}),
        body=body,
    )


def decode_request(frame: bytes) -> Tuple[int, Request]:
    message_id, payload = _single(frame)
    return message_id, request_from_payload(payload)


# Responses

def encode_response(
    message_id: int,
    code: int,
    body: Any = None,
    meta: Optional[Dict[str, Any]] = None,
    chunk_size: int = fields.DEFAULT_CHUNK_SIZE,
) -> bytes:
    header = [fields.VERSION, fields.RESPONSE, code, dict(meta or {})]
    payload = pack_message(header, body)
    return to_chunks(message_id, payload, chunk_size)


def response_from_payload(payload: bytes) -> Response:
    header, body, _has_body = unpack_message(payload)

    if header[1] != fields.RESPONSE:
        raise ProtocolError('expected a response, got message kind %r' % (header[1],))
    if len(header) < 4:
        raise ProtocolError('response header has %d fields, expected 4' % len(header))

    code = header[2]
    if not isinstance(code, int) or isinstance(code, bool):
        raise ProtocolError('response code is not an integer: %r' % (code,))

    meta = header[3]
    if meta is None:
        meta = {}
    elif not isinstance(meta, dict):
        raise ProtocolError('response header map is not a map')

    for index in range(4, len(header)):
        meta.setdefault(str(index), header[index])

    return Response(version=header[0], kind=header[1], code=code, meta=meta, body=body)


def decode_response(frame: bytes) -> Tuple[int, Response]:
    message_id, payload = _single(frame)
    return message_id, response_from_payload(payload)


# Authentication

def authentication_header(user: Optional[str] = None, password: Optional[str] = None, jwt: Optional[str] = None) -> List[Any]:
    if jwt is not None:
        return [fields.VERSION, fields.AUTHENTICATION, 'jwt', jwt]
    return [fields.VERSION, fields.AUTHENTICATION, 'plain', user or '', password or '']


def encode_authentication(
    message_id: int,
    user: Optional[str] = None,
    password: Optional[str] = None,
    jwt: Optional[str] = None,
    chunk_size: int = fields.DEFAULT_CHUNK_SIZE,
) -> bytes:
    payload = pack_message(authentication_header(user, password, jwt))
    return to_chunks(message_id, payload, chunk_size)
