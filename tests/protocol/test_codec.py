import pytest

from porthos import EncodingError
from porthos.protocol import codec, fields


def test_content_types():

    assert codec.RawBody(b'x').content_type == fields.OCTET_STREAM
    assert codec.ArgsBody((1,)).content_type == fields.ARGS
    assert codec.MapBody({'a': 1}).content_type == fields.MAP

    assert fields.OCTET_STREAM == 'application/octet-stream'
    assert fields.ARGS == 'application/porthos-args'
    assert fields.MAP == 'application/porthos-map'


def test_no_body():

    body, content_type = codec.encode(None)
    assert body == b''
    assert content_type == fields.OCTET_STREAM


def test_raw():

    body, content_type = codec.encode(codec.RawBody(b'\x00\x01binary'))
    assert body == b'\x00\x01binary'
    assert content_type == fields.OCTET_STREAM

    assert codec.decode(content_type, body) == b'\x00\x01binary'


def test_args_round_trip():
    """ What the client encodes, the serving side decodes back into the
        original positional arguments.
    """

    arguments = (20, 'twenty', 20.5, None, True, [1, 2], {'nested': 'map'})

    body, content_type = codec.encode(codec.ArgsBody(arguments))
    assert content_type == fields.ARGS
    assert body.startswith(b'[20,"twenty"')

    decoded = codec.decode(content_type, body)
    assert isinstance(decoded, list)
    assert decoded == list(arguments)


def test_map_round_trip():

    named = {'user': 'someone', 'limit': 20, 'tags': ['a', 'b'], 'active': False}

    body, content_type = codec.encode(codec.MapBody(named))
    assert content_type == fields.MAP

    decoded = codec.decode(content_type, body)
    assert isinstance(decoded, dict)
    assert decoded == named


def test_unencodable():

    with pytest.raises(EncodingError):
        codec.encode(codec.ArgsBody((object(),)))


def test_decode_errors():

    with pytest.raises(EncodingError):
        codec.decode('text/plain', b'whatever')

    with pytest.raises(EncodingError):
        codec.decode(fields.ARGS, b'[1, 2')

    # Well-formed JSON, but the wrong shape for the content type.

    with pytest.raises(EncodingError):
        codec.decode(fields.ARGS, b'{"a": 1}')

    with pytest.raises(EncodingError):
        codec.decode(fields.MAP, b'[1, 2]')


def test_encoding_error_is_value_error():

    with pytest.raises(ValueError):
        codec.decode('text/plain', b'')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
