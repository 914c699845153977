""" The documents returned by the server, as typed entities. Field names are
    the Python spelling; the wire names are camelCase unless stated
    otherwise. Entities are decoded with :func:`arangovst.serde.deserialize`,
    so fields the server adds in later versions are ignored, and fields it
    omits take their default.
"""

import enum
from typing import Any, Dict, List, Optional

import msgspec


class License(enum.Enum):
    ENTERPRISE = 'enterprise'
    COMMUNITY = 'community'


class Permissions(enum.Enum):
    RW = 'rw'
    RO = 'ro'
    NONE = 'none'


class CollectionType(enum.Enum):
    DOCUMENT = 2
    EDGES = 3


class CollectionStatus(enum.Enum):
    NEW_BORN = 1
    UNLOADED = 2
    LOADED = 3
    IN_THE_PROCESS_OF_BEING_UNLOADED = 4
    DELETED = 5
    LOADING = 6


class ViewType(enum.Enum):
    ARANGO_SEARCH = 'arangosearch'
    SEARCH_ALIAS = 'search-alias'


class Entity(msgspec.Struct, rename='camel', kw_only=True):
    """ Common base of every entity.
    """


# Server and databases

class ErrorEntity(Entity):
    error: bool = True
    error_num: int = 0
    code: int = 0
    error_message: str = ''


class ArangoDBVersion(Entity):
    server: str = ''
    version: str = ''
    license: Optional[License] = None
    details: Dict[str, Any] = {}


class DatabaseEntity(Entity):
    id: str = ''
    name: str = ''
    path: str = ''
    is_system: bool = False


class ServerEndpoint(Entity):
    endpoint: str = ''


# Collections and documents

class CollectionEntity(Entity):
    id: str = ''
    name: str = ''
    global_unique_id: Optional[str] = None
    wait_for_sync: Optional[bool] = None
    is_system: bool = False
    status: Optional[CollectionStatus] = None
    type: Optional[CollectionType] = None


class CollectionPropertiesEntity(CollectionEntity):
    count: Optional[int] = None
    cache_enabled: Optional[bool] = None
    key_options: Dict[str, Any] = {}
    schema: Optional[Dict[str, Any]] = None
    number_of_shards: Optional[int] = None
    replication_factor: Any = None
    write_concern: Optional[int] = None
    shard_keys: List[str] = []


class DocumentEntity(Entity):
    key: Optional[str] = msgspec.field(default=None, name='_key')
    id: Optional[str] = msgspec.field(default=None, name='_id')
    rev: Optional[str] = msgspec.field(default=None, name='_rev')


class DocumentCreateEntity(DocumentEntity):
    new: Any = None


class DocumentUpdateEntity(DocumentEntity):
    old_rev: Optional[str] = msgspec.field(default=None, name='_oldRev')
    new: Any = None
    old: Any = None


class DocumentDeleteEntity(DocumentEntity):
    old: Any = None


class IndexEntity(Entity):
    id: str = ''
    name: Optional[str] = None
    type: str = ''
    fields: List[str] = []
    unique: Optional[bool] = None
    sparse: Optional[bool] = None
    selectivity_estimate: Optional[float] = None
    is_newly_created: Optional[bool] = None
    in_background: Optional[bool] = None
    estimates: Optional[bool] = None


# Queries

class CursorEntity(Entity):
    id: Optional[str] = None
    count: Optional[int] = None
    extra: Dict[str, Any] = {}
    cached: bool = False
    has_more: bool = False
    result: List[Any] = []


class AqlExecutionExplainEntity(Entity):
    plan: Optional[Dict[str, Any]] = None
    plans: Optional[List[Dict[str, Any]]] = None
    warnings: List[Dict[str, Any]] = []
    stats: Dict[str, Any] = {}
    cacheable: Optional[bool] = None


class AqlParseEntity(Entity):
    collections: List[str] = []
    bind_vars: List[str] = []
    ast: List[Dict[str, Any]] = []


class QueryCachePropertiesEntity(Entity):
    mode: Optional[str] = None
    max_results: Optional[int] = None
    max_results_size: Optional[int] = None
    max_entry_size: Optional[int] = None
    include_system: Optional[bool] = None


class QueryTrackingPropertiesEntity(Entity):
    enabled: Optional[bool] = None
    track_slow_queries: Optional[bool] = None
    track_bind_vars: Optional[bool] = None
    max_slow_queries: Optional[int] = None
    slow_query_threshold: Optional[float] = None
    max_query_string_length: Optional[int] = None


class QueryEntity(Entity):
    id: str = ''
    database: Optional[str] = None
    user: Optional[str] = None
    query: str = ''
    bind_vars: Dict[str, Any] = {}
    started: Optional[str] = None
    run_time: float = 0.0
    state: Optional[str] = None
    stream: Optional[bool] = None


class AqlFunctionEntity(Entity):
    name: str = ''
    code: str = ''
    is_deterministic: Optional[bool] = None


# Graphs

class EdgeDefinition(Entity):
    collection: str = ''
    from_: List[str] = msgspec.field(default_factory=list, name='from')
    to: List[str] = []


class GraphEntity(Entity):
    name: str = msgspec.field(default='', name='_key')
    id: Optional[str] = msgspec.field(default=None, name='_id')
    rev: Optional[str] = msgspec.field(default=None, name='_rev')
    edge_definitions: List[EdgeDefinition] = []
    orphan_collections: List[str] = []
    number_of_shards: Optional[int] = None
    replication_factor: Any = None
    is_smart: Optional[bool] = None
    smart_graph_attribute: Optional[str] = None


class PathEntity(Entity):
    edges: List[Any] = []
    vertices: List[Any] = []


class TraversalVisited(Entity):
    vertices: List[Any] = []
    paths: List[PathEntity] = []


class TraversalEntity(Entity):
    visited: TraversalVisited = msgspec.field(default_factory=TraversalVisited)


# Views

class ViewEntity(Entity):
    id: str = ''
    name: str = ''
    type: Optional[ViewType] = None
    global_unique_id: Optional[str] = None


class ArangoSearchPropertiesEntity(ViewEntity):
    consolidation_interval_msec: Optional[int] = None
    commit_interval_msec: Optional[int] = None
    cleanup_interval_step: Optional[int] = None
    writebuffer_idle: Optional[int] = None
    writebuffer_active: Optional[int] = None
    writebuffer_size_max: Optional[int] = None
    primary_sort: List[Dict[str, Any]] = []
    stored_values: List[Dict[str, Any]] = []
    links: Dict[str, Any] = {}


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
