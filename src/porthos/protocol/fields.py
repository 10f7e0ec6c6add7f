"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Content types, one per body encoding.
OCTET_STREAM = "application/octet-stream"
ARGS = "application/porthos-args"
MAP = "application/porthos-map"

# Message headers.
METHOD_HEADER = "X-Method"
STATUS_HEADER = "statusCode"

# Requests are published to the default exchange, routed by service name.
DEFAULT_EXCHANGE = ""
