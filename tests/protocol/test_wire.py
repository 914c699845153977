import pytest

import arangovst
from arangovst.protocol import fields
from arangovst.protocol import pack
from arangovst.protocol import wire


def test_request_header():

    request = arangovst.Request(method='POST', database='inventory', path='/_api/cursor',
                                query={'b': '2', 'a': '1'}, headers={'x-test': 'yes'},
                                body={'query': 'RETURN 1'})

    header = wire.request_header(request)
    assert header == [1, 1, 'inventory', 2, '/_api/cursor', {'b': '2', 'a': '1'}, {'x-test': 'yes'}]


def test_single_chunk():

    request = arangovst.Request(method='GET', path='/_api/version')
    frame = wire.encode_request(request, 7)

    length, chunkx, message_id, total = wire.CHUNK_HEADER.unpack_from(frame)
    assert length == len(frame)
    assert chunkx == 3
    assert message_id == 7
    assert total == len(frame) - wire.CHUNK_HEADER.size

    message_id, decoded = wire.decode_request(frame)
    assert message_id == 7
    assert decoded.method == 'GET'
    assert decoded.path == '/_api/version'
    assert decoded.body is None


def test_multiple_chunks():

    body = {'values': list(range(500))}
    request = arangovst.Request(method='PUT', database='db', path='/_api/thing', body=body)
    frame = wire.encode_request(request, 12, chunk_size=100)

    length, chunkx, message_id, total = wire.CHUNK_HEADER.unpack_from(frame)
    count = chunkx >> 1
    assert chunkx & 1 == 1
    assert count > 1
    assert length == 100

    message_id, decoded = wire.decode_request(frame)
    assert message_id == 12
    assert decoded.body == body
    assert decoded.database == 'db'


def test_extra_headers():
    """ Connection-level headers sit underneath the request's own; the
        request wins when both name the same header.
    """

    request = arangovst.Request(method='GET', path='/', headers={'authorization': 'mine'})
    frame = wire.encode_request(request, 1, {'authorization': 'basic xyz', 'x-other': 'o'})

    message_id, decoded = wire.decode_request(frame)
    assert decoded.headers == {'authorization': 'mine', 'x-other': 'o'}


def test_interleaved():
    """ Chunks of different messages may arrive interleaved, and a stream
        may be split at any byte.
    """

    first = wire.encode_response(1, 200, {'result': 'x' * 300}, chunk_size=64)
    second = wire.encode_response(2, 201, {'result': 'y' * 300}, chunk_size=64)

    chunks = list()
    for frame in (first, second):
        pieces = list()
        offset = 0
        while offset < len(frame):
            length = wire.CHUNK_HEADER.unpack_from(frame, offset)[0]
            pieces.append(frame[offset:offset + length])
            offset += length
        chunks.append(pieces)

    stream = b''
    for index in range(max(len(chunks[0]), len(chunks[1]))):
        for pieces in chunks:
            if index < len(pieces):
                stream += pieces[index]

    assembler = wire.ChunkAssembler()
    completed = list()

    for offset in range(0, len(stream), 7):
        completed.extend(assembler.feed(stream[offset:offset + 7]))

    assert assembler.idle == True
    assert sorted(message_id for message_id, payload in completed) == [1, 2]

    for message_id, payload in completed:
        response = wire.response_from_payload(payload)
        if message_id == 1:
            assert response.code == 200
            assert response.body == {'result': 'x' * 300}
        else:
            assert response.code == 201
            assert response.body == {'result': 'y' * 300}


def test_response_extra_fields():

    header = [1, 2, 200, {'content-type': 'x'}, 'extra']
    payload = wire.pack_message(header, {'ok': True})
    response = wire.response_from_payload(payload)

    assert response.code == 200
    assert response.meta['content-type'] == 'x'
    assert response.meta['4'] == 'extra'
    assert response.body == {'ok': True}


def test_response_without_body():

    message_id, response = wire.decode_response(wire.encode_response(5, 204))

    assert message_id == 5
    assert response.code == 204
    assert response.meta == {}
    assert response.body is None


def test_authentication():

    header = wire.authentication_header('root', 'secret')
    assert header == [1, 1000, 'plain', 'root', 'secret']

    header = wire.authentication_header(jwt='token')
    assert header == [1, 1000, 'jwt', 'token']

    frame = wire.encode_authentication(3, 'root', 'secret')
    message_id, payload = wire.ChunkAssembler().feed(frame)[0]
    header, body, has_body = wire.unpack_message(payload)

    assert message_id == 3
    assert header[1] == fields.AUTHENTICATION
    assert has_body == False


def test_version_mismatch():

    payload = wire.pack_message([2, 2, 200, {}])

    with pytest.raises(arangovst.IncompatibleServerError):
        wire.response_from_payload(payload)


def test_malformed():

    with pytest.raises(arangovst.ProtocolError):
        wire.unpack_message(b'\x01')

    with pytest.raises(arangovst.ProtocolError):
        wire.unpack_message(wire.HEADER_LENGTH.pack(50) + b'short')

    with pytest.raises(arangovst.ProtocolError):
        wire.unpack_message(wire.HEADER_LENGTH.pack(2) + pack.pack({'a': 1})[:2])

    # Response code must be an integer.

    with pytest.raises(arangovst.ProtocolError):
        wire.response_from_payload(wire.pack_message([1, 2, 'ok', {}]))

    # A continuation chunk for a message that was never started.

    orphan = wire.CHUNK_HEADER.pack(wire.CHUNK_HEADER.size + 1, 2, 9, 10) + b'x'

    with pytest.raises(arangovst.ProtocolError):
        wire.ChunkAssembler().feed(orphan)

    # Truncated frames are not messages.

    frame = wire.encode_response(1, 200, {'a': 1})

    with pytest.raises(arangovst.ProtocolError):
        wire.decode_response(frame[:-1])


def test_chunk_size():

    with pytest.raises(ValueError):
        wire.to_chunks(1, b'payload', wire.CHUNK_HEADER.size)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
