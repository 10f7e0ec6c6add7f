""" Python implementation of the porthos RPC client. Remote methods are
    invoked over an AMQP broker; many calls share one connection and one
    private reply queue, and every reply is routed back to the call that
    issued it.
"""

# Utility components.

from . import config
from . import json
from . import log

# Submodules used by multiple other components.

from . import protocol
from . import transport

# Primary public-facing interfaces.

from .call import Call
from .client import Client, create_broker, create_client
from .errors import (
    CallError,
    CallTimeout,
    ClientClosed,
    EncodingError,
    PorthosError,
)
from .protocol.message import Response

__version__ = "0.1.0"

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
