import pytest

import porthos


def test_round_trip():

    arguments = {
        'user': 'someone',
        'limit': 20,
        'ratio': 0.25,
        'tags': ['a', 'b', None],
        'active': True,
    }

    encoded = porthos.json.dumps(arguments)
    assert isinstance(encoded, bytes)

    assert porthos.json.loads(encoded) == arguments
    assert porthos.json.loads(encoded.decode()) == arguments


def test_malformed():

    with pytest.raises(porthos.json.DecodeError):
        porthos.json.loads(b'{"user":')

    with pytest.raises(porthos.json.DecodeError):
        porthos.json.loads(b'')


def test_compact():
    """ The positional argument encoding promises a compact array. """

    encoded = porthos.json.dumps([1, 'two', 3.5])
    assert encoded == b'[1,"two",3.5]'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
