""" Optional request parameters. Each options class is rendered into the
    request body (or query) with :func:`render`; fields left at their
    default, or set to None, are omitted, so the server applies its own
    defaults. Entities may be rendered the same way.
"""

from typing import Any, Dict, List, Optional

import msgspec

from .entities import CollectionType
from .protocol.pack import to_builtins


class Options(msgspec.Struct, rename='camel', kw_only=True, omit_defaults=True):
    pass


def render(options):
    """ Return the wire representation of *options*: a plain dictionary
        with camelCase keys and only the fields that were set.
    """

    if options is None:
        return dict()

    rendered = to_builtins(options)
    return dict((key, value) for key, value in rendered.items() if value is not None)


# Collections

class CollectionCreateOptions(Options):
    type: Optional[CollectionType] = None
    wait_for_sync: Optional[bool] = None
    is_system: Optional[bool] = None
    key_options: Optional[Dict[str, Any]] = None
    schema: Optional[Dict[str, Any]] = None
    number_of_shards: Optional[int] = None
    shard_keys: Optional[List[str]] = None
    replication_factor: Any = None
    write_concern: Optional[int] = None


class CollectionsReadOptions(Options):
    exclude_system: Optional[bool] = None


class DocumentCreateOptions(Options):
    wait_for_sync: Optional[bool] = None
    return_new: Optional[bool] = None
    overwrite: Optional[bool] = None
    silent: Optional[bool] = None


class DocumentReplaceOptions(Options):
    wait_for_sync: Optional[bool] = None
    ignore_revs: Optional[bool] = None
    if_match: Optional[str] = None
    return_new: Optional[bool] = None
    return_old: Optional[bool] = None


class DocumentUpdateOptions(DocumentReplaceOptions):
    keep_null: Optional[bool] = None
    merge_objects: Optional[bool] = None


class DocumentDeleteOptions(Options):
    wait_for_sync: Optional[bool] = None
    if_match: Optional[str] = None
    return_old: Optional[bool] = None


class DocumentReadOptions(Options):
    if_none_match: Optional[str] = None
    if_match: Optional[str] = None
    allow_dirty_read: Optional[bool] = None


class PersistentIndexOptions(Options):
    name: Optional[str] = None
    unique: Optional[bool] = None
    sparse: Optional[bool] = None
    deduplicate: Optional[bool] = None
    estimates: Optional[bool] = None
    in_background: Optional[bool] = None


# Queries

class AqlQueryOptions(Options):
    count: Optional[bool] = None
    batch_size: Optional[int] = None
    ttl: Optional[int] = None
    cache: Optional[bool] = None
    memory_limit: Optional[int] = None
    full_count: Optional[bool] = None
    fail_on_warning: Optional[bool] = None
    max_plans: Optional[int] = None
    profile: Optional[bool] = None
    stream: Optional[bool] = None
    optimizer_rules: Optional[List[str]] = None
    allow_dirty_read: Optional[bool] = None


class AqlQueryExplainOptions(Options):
    all_plans: Optional[bool] = None
    max_number_of_plans: Optional[int] = None
    optimizer_rules: Optional[List[str]] = None


class AqlFunctionCreateOptions(Options):
    is_deterministic: Optional[bool] = None


class AqlFunctionDeleteOptions(Options):
    group: Optional[bool] = None


class AqlFunctionGetOptions(Options):
    namespace: Optional[str] = None


class TransactionOptions(Options):
    read_collections: Optional[List[str]] = None
    write_collections: Optional[List[str]] = None
    exclusive_collections: Optional[List[str]] = None
    params: Any = None
    wait_for_sync: Optional[bool] = None
    allow_implicit: Optional[bool] = None
    lock_timeout: Optional[int] = None
    max_transaction_size: Optional[int] = None


class TraversalOptions(Options):
    graph_name: Optional[str] = None
    edge_collection: Optional[str] = None
    start_vertex: Optional[str] = None
    direction: Optional[str] = None
    min_depth: Optional[int] = None
    max_depth: Optional[int] = None
    strategy: Optional[str] = None
    order: Optional[str] = None
    item_order: Optional[str] = None
    uniqueness: Optional[Dict[str, str]] = None
    max_iterations: Optional[int] = None
    filter: Optional[str] = None
    visitor: Optional[str] = None
    init: Optional[str] = None
    expander: Optional[str] = None
    sort: Optional[str] = None


# Graphs

class GraphCreateOptions(Options):
    orphan_collections: Optional[List[str]] = None
    is_smart: Optional[bool] = None
    number_of_shards: Optional[int] = None
    replication_factor: Any = None
    smart_graph_attribute: Optional[str] = None


class GraphDropOptions(Options):
    drop_collections: Optional[bool] = None


# Views

class ArangoSearchCreateOptions(Options):
    consolidation_interval_msec: Optional[int] = None
    commit_interval_msec: Optional[int] = None
    cleanup_interval_step: Optional[int] = None
    primary_sort: Optional[List[Dict[str, Any]]] = None
    stored_values: Optional[List[Dict[str, Any]]] = None
    links: Optional[Dict[str, Any]] = None


class ArangoSearchPropertiesOptions(Options):
    consolidation_interval_msec: Optional[int] = None
    commit_interval_msec: Optional[int] = None
    cleanup_interval_step: Optional[int] = None
    links: Optional[Dict[str, Any]] = None


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
