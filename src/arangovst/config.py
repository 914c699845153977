""" Client configuration. A :class:`Configuration` is built once, validated
    immediately, and treated as read-only afterwards; every component of the
    client takes what it needs from the same instance.

    Configuration can be assembled from keyword arguments, from a mapping,
    from a JSON or properties file (:func:`Configuration.load`), or from
    ``ARANGOVST_*`` environment variables.
"""

import base64
import enum
import os
import ssl
from typing import Any, List, Optional

import msgspec

from .errors import ConfigError
from .protocol import fields


class LoadBalancing(enum.Enum):
    NONE = 'NONE'
    ROUND_ROBIN = 'ROUND_ROBIN'
    ONE_RANDOM = 'ONE_RANDOM'


# end of class LoadBalancing



class Host(msgspec.Struct, frozen=True):
    """ One server endpoint: *host* name, *port* number, and whether the
        connection is wrapped in TLS.
    """

    host: str
    port: int = 8529
    tls: bool = False

    def __str__(self):
        return '%s:%d' % (self.host, self.port)


    @classmethod
    def parse(cls, value, tls=False):
        """ Accept a :class:`Host`, a ``(host, port)`` pair, or a string of
            the form ``host:port``, ``tcp://host:port`` or ``ssl://host:port``.
        """

        if isinstance(value, Host):
            return value

        if isinstance(value, (tuple, list)):
            if len(value) == 2:
                return cls(str(value[0]), int(value[1]), tls)
            if len(value) == 3:
                return cls(str(value[0]), int(value[1]), bool(value[2]))
            raise ConfigError('invalid host specification: ' + repr(value))

        if isinstance(value, dict):
            try:
                return cls(str(value['host']), int(value.get('port', 8529)), bool(value.get('tls', tls)))
            except (KeyError, TypeError, ValueError):
                raise ConfigError('invalid host specification: ' + repr(value))

        if not isinstance(value, str):
            raise ConfigError('invalid host specification: ' + repr(value))

        text = value.strip()

        for scheme, secure in (('tcp://', False), ('vst://', False), ('http://', False),
                               ('ssl://', True), ('vsts://', True), ('https://', True)):
            if text.startswith(scheme):
                text = text[len(scheme):]
                tls = secure
                break

        if text.startswith('['):
            # IPv6 literal, [::1]:8529
            address, _, rest = text[1:].partition(']')
            port = rest.lstrip(':') or '8529'
        else:
            address, _, port = text.rpartition(':')
            if address == '':
                address = port
                port = '8529'

        if address == '':
            raise ConfigError('invalid host specification: ' + repr(value))

        try:
            port = int(port)
        except ValueError:
            raise ConfigError('invalid port in host specification: ' + repr(value))

        return cls(address, port, tls)


# end of class Host



class Credentials:
    """ The user credentials attached to every outbound request. Either a
        *user* with an optional *password*, or a *jwt* bearer token.
    """

    def __init__(self, user=None, password=None, jwt=None):

        self.user = user
        self.password = password
        self.jwt = jwt

        if jwt is not None:
            self.authorization = 'bearer ' + jwt
        elif user is not None:
            pair = '%s:%s' % (user, password or '')
            self.authorization = 'basic ' + base64.b64encode(pair.encode()).decode()
        else:
            self.authorization = None


    def __bool__(self):
        return self.authorization is not None


    def __repr__(self):
        return 'Credentials(user=%r, jwt=%s)' % (self.user, self.jwt is not None)


    def headers(self):
        if self.authorization is None:
            return dict()
        return {fields.AUTHORIZATION: self.authorization}


# end of class Credentials



class Configuration(msgspec.Struct, kw_only=True):
    """ The enumerated configuration options. Durations are in seconds.

        :ivar hosts: The :class:`Host` endpoints to contact.
        :ivar timeout: Default per-request deadline; None waits forever.
        :ivar max_connections: Upper bound on connections per host.
        :ivar max_in_flight: Requests multiplexed on one connection before
            another one is opened (or the caller waits).
        :ivar overflow: 'wait' to suspend when every connection is saturated,
            'new' to open a transient extra connection instead.
        :ivar dead_host_cooldown: How long a failed host is skipped.
        :ivar strict: Reject unknown fields when decoding entities.
        :ivar naming: Naming convention for user classes: None or 'camel'.
    """

    hosts: List[Host] = msgspec.field(default_factory=lambda: [Host('127.0.0.1', 8529)])
    use_tls: bool = False
    user: Optional[str] = 'root'
    password: Optional[str] = None
    jwt: Optional[str] = None
    timeout: Optional[float] = 30.0
    connect_timeout: float = 10.0
    acquire_timeout: float = 30.0
    keepalive_interval: Optional[float] = None
    max_connections: int = 1
    max_in_flight: int = 256
    overflow: str = 'wait'
    load_balancing: LoadBalancing = LoadBalancing.NONE
    acquire_host_list: bool = False
    acquire_host_list_interval: float = 3600.0
    retries: int = 3
    retry_backoff: float = 0.1
    dead_host_cooldown: float = 15.0
    chunk_size: int = fields.DEFAULT_CHUNK_SIZE
    strict: bool = False
    naming: Optional[str] = None
    ssl_context: Any = None

    def __post_init__(self):

        if len(self.hosts) == 0:
            raise ConfigError('at least one host is required')

        hosts = list()
        for host in self.hosts:
            host = Host.parse(host, self.use_tls)
            if self.use_tls and not host.tls:
                host = Host(host.host, host.port, True)
            if host.port <= 0 or host.port > 65535:
                raise ConfigError('port out of range: ' + str(host))
            if host not in hosts:
                hosts.append(host)
        self.hosts = hosts

        if isinstance(self.load_balancing, str):
            try:
                self.load_balancing = LoadBalancing(self.load_balancing.upper())
            except ValueError:
                raise ConfigError('unknown load balancing strategy: ' + repr(self.load_balancing))

        if self.timeout is not None and self.timeout <= 0:
            raise ConfigError('timeout must be positive')
        if self.connect_timeout <= 0:
            raise ConfigError('connect_timeout must be positive')
        if self.acquire_timeout <= 0:
            raise ConfigError('acquire_timeout must be positive')
        if self.keepalive_interval is not None and self.keepalive_interval <= 0:
            raise ConfigError('keepalive_interval must be positive')
        if self.max_connections < 1:
            raise ConfigError('max_connections must be at least 1')
        if self.max_in_flight < 1:
            raise ConfigError('max_in_flight must be at least 1')
        if self.overflow not in ('wait', 'new'):
            raise ConfigError("overflow must be 'wait' or 'new', not " + repr(self.overflow))
        if self.retries < 0:
            raise ConfigError('retries cannot be negative')
        if self.retry_backoff < 0:
            raise ConfigError('retry_backoff cannot be negative')
        if self.dead_host_cooldown < 0:
            raise ConfigError('dead_host_cooldown cannot be negative')
        if self.acquire_host_list_interval <= 0:
            raise ConfigError('acquire_host_list_interval must be positive')
        if self.chunk_size <= 64:
            raise ConfigError('chunk_size is too small: ' + str(self.chunk_size))
        if self.naming not in (None, 'camel', 'snake'):
            raise ConfigError('unknown naming convention: ' + repr(self.naming))
        if self.ssl_context is not None and not isinstance(self.ssl_context, ssl.SSLContext):
            raise ConfigError('ssl_context must be an ssl.SSLContext')


    @property
    def credentials(self):
        return Credentials(self.user, self.password, self.jwt)


    def tls_context(self):
        """ Return the SSL context used for TLS hosts, creating a default
            one if none was configured.
        """

        if self.ssl_context is None:
            self.ssl_context = ssl.create_default_context()
        return self.ssl_context


    @classmethod
    def from_mapping(cls, mapping):
        """ Build a :class:`Configuration` from a plain dictionary, as it
            would be read from a JSON document. Unknown keys are an error.
        """

        mapping = dict(mapping)

        for key in mapping:
            if key not in _OPTIONS:
                raise ConfigError('unknown configuration option: ' + repr(key))

        try:
            hosts = mapping['hosts']
        except KeyError:
            pass
        else:
            if isinstance(hosts, str):
                hosts = [item for item in hosts.split(',') if item.strip()]
            tls = bool(mapping.get('use_tls', False))
            mapping['hosts'] = [msgspec.structs.asdict(Host.parse(host, tls)) for host in hosts]

        strategy = mapping.get('load_balancing')
        if isinstance(strategy, LoadBalancing):
            mapping['load_balancing'] = strategy.value

        try:
            return msgspec.convert(mapping, cls, strict=False)
        except msgspec.ValidationError as exc:
            raise ConfigError(str(exc)) from exc


    @classmethod
    def load(cls, filename):
        """ Read configuration from *filename*. Files ending in ``.json`` are
            parsed as JSON; anything else is treated as a properties file of
            ``key=value`` lines, where keys may carry an ``arangodb.`` prefix
            and camelCase names are accepted for compatibility with other
            drivers (``arangodb.hosts=h1:8529,h2:8529``).
        """

        try:
            with open(filename, 'rb') as handle:
                contents = handle.read()
        except OSError as exc:
            raise ConfigError('cannot read configuration file %s: %s' % (filename, exc)) from exc

        if str(filename).endswith('.json'):
            try:
                mapping = msgspec.json.decode(contents)
            except msgspec.DecodeError as exc:
                raise ConfigError('invalid JSON in %s: %s' % (filename, exc)) from exc
            if not isinstance(mapping, dict):
                raise ConfigError('configuration file %s does not hold an object' % (filename))
        else:
            mapping = _parse_properties(contents.decode('utf-8'))

        return cls.from_mapping(mapping)


    @classmethod
    def from_environment(cls, environ=None, **overrides):
        """ Read ``ARANGOVST_<OPTION>`` variables, for example
            ``ARANGOVST_HOSTS=h1:8529,h2:8529`` or ``ARANGOVST_USER=root``.
            Keyword *overrides* take precedence.
        """

        if environ is None:
            environ = os.environ

        mapping = dict()
        prefix = 'ARANGOVST_'

        for key, value in environ.items():
            if not key.startswith(prefix):
                continue
            name = key[len(prefix):].lower()
            if name in _OPTIONS:
                mapping[name] = _coerce(name, value)

        mapping.update(overrides)
        return cls.from_mapping(mapping)


# end of class Configuration



_OPTIONS = frozenset(Configuration.__struct_fields__) - set(('ssl_context',))

_ALIASES = {
    'usessl': 'use_tls',
    'usetls': 'use_tls',
    'connections.max': 'max_connections',
    'maxconnections': 'max_connections',
    'loadbalancingstrategy': 'load_balancing',
    'acquirehostlist': 'acquire_host_list',
    'acquirehostlistinterval': 'acquire_host_list_interval',
    'keepaliveinterval': 'keepalive_interval',
    'connecttimeout': 'connect_timeout',
    'acquiretimeout': 'acquire_timeout',
    'chunksize': 'chunk_size',
}


def _coerce(name, value):
    """ Properties and environment variables are strings; convert them to
        the type the option expects.
    """

    value = value.strip()

    if name == 'hosts':
        return [item.strip() for item in value.split(',') if item.strip()]

    if value.lower() in ('none', 'null', ''):
        return None

    if name in ('use_tls', 'acquire_host_list', 'strict'):
        return value.lower() in ('1', 'true', 'yes', 'on')

    if name in ('max_connections', 'max_in_flight', 'retries', 'chunk_size'):
        try:
            return int(value)
        except ValueError:
            raise ConfigError('%s must be an integer: %r' % (name, value))

    if name in ('timeout', 'connect_timeout', 'acquire_timeout', 'keepalive_interval',
                'acquire_host_list_interval', 'retry_backoff', 'dead_host_cooldown'):
        try:
            return float(value)
        except ValueError:
            raise ConfigError('%s must be a number: %r' % (name, value))

    if name == 'load_balancing':
        return value.upper()

    return value



def _parse_properties(text):

    mapping = dict()

    for number, line in enumerate(text.splitlines(), 1):
        line = line.strip()
        if line == '' or line.startswith('#') or line.startswith('!'):
            continue

        if '=' in line:
            key, _, value = line.partition('=')
        elif ':' in line:
            key, _, value = line.partition(':')
        else:
            raise ConfigError('line %d is not a key=value pair: %r' % (number, line))

        key = key.strip()
        if key.startswith('arangodb.'):
            key = key[len('arangodb.'):]

        lowered = key.lower()
        if lowered in _ALIASES:
            name = _ALIASES[lowered]
        else:
            name = _snake(key)

        if name not in _OPTIONS:
            raise ConfigError('unknown configuration option: ' + repr(key))

        mapping[name] = _coerce(name, value)

    return mapping



def _snake(name):

    result = list()
    for character in name:
        if character.isupper():
            result.append('_')
            result.append(character.lower())
        else:
            result.append(character)

    return ''.join(result).lstrip('_')


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
