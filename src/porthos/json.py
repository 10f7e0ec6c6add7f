''' Wrapper module providing the equivalent of :func:`json.loads` and
    :func:`json.dumps` for the argument and result encodings, backed by
    msgspec.
'''

import msgspec


# The msgspec 'encode' operation returns bytes, which is what goes on the
# wire; 'decode' accepts either bytes or str.

encoder = msgspec.json.Encoder()
decoder = msgspec.json.Decoder()

dumps = encoder.encode
loads = decoder.decode

DecodeError = msgspec.DecodeError

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
