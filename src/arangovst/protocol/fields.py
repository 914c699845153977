"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

VERSION = 1

# Message kinds, the second positional field of every header.

REQUEST = 1
RESPONSE = 2
AUTHENTICATION = 1000

# Request methods and their wire codes.

DELETE = 'DELETE'
GET = 'GET'
POST = 'POST'
PUT = 'PUT'
HEAD = 'HEAD'
PATCH = 'PATCH'
OPTIONS = 'OPTIONS'

METHOD_CODES = {
    DELETE: 0,
    GET: 1,
    POST: 2,
    PUT: 3,
    HEAD: 4,
    PATCH: 5,
    OPTIONS: 6,
}

METHOD_NAMES = dict((code, name) for name, code in METHOD_CODES.items())

IDEMPOTENT = frozenset((GET, HEAD, OPTIONS, PUT, DELETE))

# Response codes and server error numbers treated as transient.

SERVICE_UNAVAILABLE = 503
NOT_FOUND = 404
CLUSTER_LEADERSHIP_CHALLENGE_ONGOING = 1495
CLUSTER_NOT_LEADER = 1496
TRANSIENT_ERRORS = frozenset((CLUSTER_LEADERSHIP_CHALLENGE_ONGOING, CLUSTER_NOT_LEADER))

# Header names.

AUTHORIZATION = 'authorization'
ALLOW_DIRTY_READ = 'x-arango-allow-dirty-read'
POTENTIAL_DIRTY_READ = 'x-arango-potential-dirty-read'
ENDPOINT = 'x-arango-endpoint'
IF_MATCH = 'if-match'
IF_NONE_MATCH = 'if-none-match'

# Framing.

PREAMBLE = b'VST/1.1\r\n\r\n'
DEFAULT_CHUNK_SIZE = 30000

DEFAULT_DATABASE = '_system'
