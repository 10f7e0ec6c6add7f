"""
porthos Protocol Layer
======================

This package defines what a remote call looks like independent of how it is
carried: the body encodings, the envelope fields, and the structured result.

The protocol layer MUST NOT depend on any transport implementation
(e.g. pika).

---------------------------------------------------------------------

Layer Architecture Overview
---------------------------

User Code
    │
    ▼
Call Builder (call.py)
    Immutable, chainable description of one call
    - with_timeout()
    - with_body() / with_args() / with_map()
    - invoke() / void()

    │
    ▼
Client (client.py)
    Correlation engine
    - registry   (pending.py)
    - supervisor (timeout.py)
    - dispatcher (dispatch.py)

    │
    ▼
Message Model (protocol/message.py, protocol/codec.py)
    - CallEnvelope
    - ReplyEnvelope
    - Response
    - RawBody | ArgsBody | MapBody

    │
    ▼
Field Vocabulary (protocol/fields.py)
    Canonical content types and header names

---------------------------------------------------------------------

Below the Protocol Layer
------------------------

Transport Layer (transport/)
    Moves bytes
    - connect / open_channel / declare_exclusive_queue
    - subscribe / publish / acknowledge / close
    - RabbitMQ via pika

---------------------------------------------------------------------
"""

from . import codec
from . import fields
from . import message


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
