""" Request builders, one function per server endpoint. Each returns an
    immutable :class:`arangovst.protocol.Request`; nothing here touches the
    network. Malformed names and identifiers raise :class:`ArgumentError`
    before a request exists.
"""

from .entities import Permissions
from .errors import ArgumentError
from .options import render
from .protocol import Request
from .protocol import fields
from .protocol.message import path, query


SYSTEM = fields.DEFAULT_DATABASE

# Cursor creation keeps these keys at the top level of the request body;
# every other query option travels in the nested options document.
_CURSOR_TOP_LEVEL = ('count', 'batchSize', 'ttl', 'cache', 'memoryLimit')


def name(kind, value):
    """ Validate and return the *value* of a database, collection, graph
        or view name.
    """

    if not isinstance(value, str) or value == '':
        raise ArgumentError('%s name must be a non-empty string, not %r' % (kind, value))

    if '/' in value:
        raise ArgumentError('%s name cannot contain a slash: %r' % (kind, value))

    return value



def document_id(collection, key):
    """ Return the full ``collection/key`` identifier of a document. The
        *key* may already be a full identifier, in which case it must refer
        to *collection*.
    """

    name('collection', collection)

    if not isinstance(key, str) or key == '':
        raise ArgumentError('document key must be a non-empty string, not %r' % (key,))

    if '/' in key:
        owner, _, bare = key.partition('/')
        if owner != collection or bare == '' or '/' in bare:
            raise ArgumentError('document id %r does not belong to collection %r' % (key, collection))
        return key

    return collection + '/' + key



def index_id(collection, index):
    """ Index identifiers are ``collection/number``; a bare number is
        qualified with *collection* if one is known.
    """

    if not isinstance(index, str) or index == '':
        raise ArgumentError('index id must be a non-empty string, not %r' % (index,))

    if '/' in index:
        owner, _, bare = index.partition('/')
        if owner == '' or bare == '' or '/' in bare:
            raise ArgumentError('malformed index id: %r' % (index,))
        return index

    if collection is None:
        raise ArgumentError('index id %r lacks a collection name' % (index,))

    return collection + '/' + index



def _headers(options, *names):

    headers = dict()
    if options is None:
        return headers

    for attribute, header in names:
        value = getattr(options, attribute, None)
        if value is None:
            continue
        if value is True:
            value = 'true'
        headers[header] = str(value)

    return headers


_DOCUMENT_HEADERS = (
    ('if_match', fields.IF_MATCH),
    ('if_none_match', fields.IF_NONE_MATCH),
    ('allow_dirty_read', fields.ALLOW_DIRTY_READ),
)


def _document_query(options):

    parameters = render(options)
    for attribute in ('ifMatch', 'ifNoneMatch', 'allowDirtyRead'):
        parameters.pop(attribute, None)

    return query(**parameters)


# Server

def version(database=SYSTEM, details=False):
    return Request(method='GET', database=database, path='/_api/version',
                   query=query(details=details if details else None))


def availability():
    return Request(method='GET', path='/_admin/server/availability')


def cluster_endpoints(database=SYSTEM):
    return Request(method='GET', database=database, path='/_api/cluster/endpoints')


def reload_routing(database):
    return Request(method='POST', database=database, path='/_admin/routing/reload')


# Databases

def database_current(database):
    return Request(method='GET', database=name('database', database), path='/_api/database/current')


def database_create(database):
    return Request(method='POST', database=SYSTEM, path='/_api/database',
                   body={'name': name('database', database)})


def database_drop(database):
    return Request(method='DELETE', database=SYSTEM, path=path('_api', 'database', name('database', database)))


def databases():
    return Request(method='GET', database=SYSTEM, path='/_api/database')


def accessible_databases(database=SYSTEM):
    return Request(method='GET', database=database, path='/_api/database/user')


# Users and permissions

def _user(user):
    if not isinstance(user, str) or user == '':
        raise ArgumentError('user name must be a non-empty string, not %r' % (user,))
    return user


def grant_access(database, user, permissions=Permissions.RW):
    return Request(method='PUT', database=SYSTEM,
                   path=path('_api', 'user', _user(user), 'database', name('database', database)),
                   body={'grant': Permissions(permissions).value})


def reset_access(database, user):
    return Request(method='DELETE', database=SYSTEM,
                   path=path('_api', 'user', _user(user), 'database', name('database', database)))


def grant_default_collection_access(database, user, permissions=Permissions.RW):
    return Request(method='PUT', database=SYSTEM,
                   path=path('_api', 'user', _user(user), 'database', name('database', database), '*'),
                   body={'grant': Permissions(permissions).value})


def permissions(database, user):
    return Request(method='GET', database=SYSTEM,
                   path=path('_api', 'user', _user(user), 'database', name('database', database)))


# Collections

def collections(database, options=None):
    return Request(method='GET', database=database, path='/_api/collection',
                   query=query(**render(options)))


def collection_create(database, collection, options=None):
    body = {'name': name('collection', collection)}
    body.update(render(options))
    return Request(method='POST', database=database, path='/_api/collection', body=body)


def collection_info(database, collection):
    return Request(method='GET', database=database, path=path('_api', 'collection', name('collection', collection)))


def collection_properties(database, collection):
    return Request(method='GET', database=database,
                   path=path('_api', 'collection', name('collection', collection), 'properties'))


def collection_count(database, collection):
    return Request(method='GET', database=database,
                   path=path('_api', 'collection', name('collection', collection), 'count'))


def collection_drop(database, collection, is_system=False):
    return Request(method='DELETE', database=database,
                   path=path('_api', 'collection', name('collection', collection)),
                   query=query(isSystem=True if is_system else None))


def collection_truncate(database, collection):
    return Request(method='PUT', database=database,
                   path=path('_api', 'collection', name('collection', collection), 'truncate'))


def collection_rename(database, collection, new_name):
    return Request(method='PUT', database=database,
                   path=path('_api', 'collection', name('collection', collection), 'rename'),
                   body={'name': name('collection', new_name)})


# Documents

def document_insert(database, collection, document, options=None):
    return Request(method='POST', database=database,
                   path=path('_api', 'document', name('collection', collection)),
                   query=_document_query(options), body=document)


def document_get(database, id, options=None):
    return Request(method='GET', database=database, path=path('_api', 'document', id),
                   headers=_headers(options, *_DOCUMENT_HEADERS))


def document_head(database, id, options=None):
    return Request(method='HEAD', database=database, path=path('_api', 'document', id),
                   headers=_headers(options, *_DOCUMENT_HEADERS))


def document_replace(database, id, document, options=None):
    return Request(method='PUT', database=database, path=path('_api', 'document', id),
                   query=_document_query(options), headers=_headers(options, *_DOCUMENT_HEADERS),
                   body=document)


def document_update(database, id, document, options=None):
    return Request(method='PATCH', database=database, path=path('_api', 'document', id),
                   query=_document_query(options), headers=_headers(options, *_DOCUMENT_HEADERS),
                   body=document)


def document_delete(database, id, options=None):
    return Request(method='DELETE', database=database, path=path('_api', 'document', id),
                   query=_document_query(options), headers=_headers(options, *_DOCUMENT_HEADERS))


# Indexes

def index_get(database, id):
    return Request(method='GET', database=database, path=path('_api', 'index', id))


def index_delete(database, id):
    return Request(method='DELETE', database=database, path=path('_api', 'index', id))


def indexes(database, collection):
    return Request(method='GET', database=database, path='/_api/index',
                   query=query(collection=name('collection', collection)))


def persistent_index(database, collection, attributes, options=None):

    attributes = list(attributes)
    if len(attributes) == 0:
        raise ArgumentError('a persistent index needs at least one attribute')

    body = {'type': 'persistent', 'fields': attributes}
    body.update(render(options))

    return Request(method='POST', database=database, path='/_api/index',
                   query=query(collection=name('collection', collection)), body=body)


# Queries

def cursor_create(database, aql, bind_vars=None, options=None):

    if not isinstance(aql, str) or aql.strip() == '':
        raise ArgumentError('query must be a non-empty string')

    body = {'query': aql}
    if bind_vars:
        body['bindVars'] = dict(bind_vars)

    rendered = render(options)
    dirty = rendered.pop('allowDirtyRead', None)

    for key in _CURSOR_TOP_LEVEL:
        if key in rendered:
            body[key] = rendered.pop(key)

    if rendered:
        body['options'] = rendered

    headers = dict()
    if dirty == True:
        headers[fields.ALLOW_DIRTY_READ] = 'true'

    return Request(method='POST', database=database, path='/_api/cursor', headers=headers, body=body)


def cursor_next(database, id):
    return Request(method='POST', database=database, path=path('_api', 'cursor', id))


def cursor_delete(database, id):
    return Request(method='DELETE', database=database, path=path('_api', 'cursor', id))


def query_explain(database, aql, bind_vars=None, options=None):
    body = {'query': aql}
    if bind_vars:
        body['bindVars'] = dict(bind_vars)
    rendered = render(options)
    if rendered:
        body['options'] = rendered
    return Request(method='POST', database=database, path='/_api/explain', body=body)


def query_parse(database, aql):
    return Request(method='POST', database=database, path='/_api/query', body={'query': aql})


def query_cache_clear(database):
    return Request(method='DELETE', database=database, path='/_api/query-cache')


def query_cache_properties(database):
    return Request(method='GET', database=database, path='/_api/query-cache/properties')


def query_cache_properties_set(database, properties):
    return Request(method='PUT', database=database, path='/_api/query-cache/properties',
                   body=render(properties))


def query_tracking_properties(database):
    return Request(method='GET', database=database, path='/_api/query/properties')


def query_tracking_properties_set(database, properties):
    return Request(method='PUT', database=database, path='/_api/query/properties',
                   body=render(properties))


def queries_current(database):
    return Request(method='GET', database=database, path='/_api/query/current')


def queries_slow(database):
    return Request(method='GET', database=database, path='/_api/query/slow')


def queries_slow_clear(database):
    return Request(method='DELETE', database=database, path='/_api/query/slow')


def query_kill(database, id):
    return Request(method='DELETE', database=database, path=path('_api', 'query', id))


# User defined functions

def aql_function_create(database, function, code, options=None):
    body = {'name': function, 'code': code}
    body.update(render(options))
    return Request(method='POST', database=database, path='/_api/aqlfunction', body=body)


def aql_function_delete(database, function, options=None):
    return Request(method='DELETE', database=database, path=path('_api', 'aqlfunction', function),
                   query=query(**render(options)))


def aql_functions(database, options=None):
    return Request(method='GET', database=database, path='/_api/aqlfunction',
                   query=query(**render(options)))


# Graphs

def graphs(database):
    return Request(method='GET', database=database, path='/_api/gharial')


def graph_create(database, graph, edge_definitions=(), options=None):
    body = {'name': name('graph', graph), 'edgeDefinitions': [render(item) for item in edge_definitions]}
    body.update(render(options))
    return Request(method='POST', database=database, path='/_api/gharial', body=body)


def graph_info(database, graph):
    return Request(method='GET', database=database, path=path('_api', 'gharial', name('graph', graph)))


def graph_drop(database, graph, drop_collections=False):
    return Request(method='DELETE', database=database, path=path('_api', 'gharial', name('graph', graph)),
                   query=query(dropCollections=True if drop_collections else None))


def graph_vertex_collections(database, graph):
    return Request(method='GET', database=database, path=path('_api', 'gharial', name('graph', graph), 'vertex'))


def graph_vertex_collection_add(database, graph, collection):
    return Request(method='POST', database=database, path=path('_api', 'gharial', name('graph', graph), 'vertex'),
                   body={'collection': name('collection', collection)})


def graph_edge_definitions(database, graph):
    return Request(method='GET', database=database, path=path('_api', 'gharial', name('graph', graph), 'edge'))


def graph_edge_definition_add(database, graph, definition):
    return Request(method='POST', database=database, path=path('_api', 'gharial', name('graph', graph), 'edge'),
                   body=render(definition))


def graph_edge_definition_replace(database, graph, definition):
    return Request(method='PUT', database=database,
                   path=path('_api', 'gharial', name('graph', graph), 'edge', name('collection', definition.collection)),
                   body=render(definition))


def graph_edge_definition_remove(database, graph, collection):
    return Request(method='DELETE', database=database,
                   path=path('_api', 'gharial', name('graph', graph), 'edge', name('collection', collection)))


# Transactions and traversals

def transaction(database, action, options=None):

    if not isinstance(action, str) or action.strip() == '':
        raise ArgumentError('transaction action must be a non-empty string')

    rendered = render(options)
    body = {'action': action}

    read = rendered.pop('readCollections', None)
    write = rendered.pop('writeCollections', None)
    exclusive = rendered.pop('exclusiveCollections', None)

    collections = dict()
    if read:
        collections['read'] = read
    if write:
        collections['write'] = write
    if exclusive:
        collections['exclusive'] = exclusive

    body['collections'] = collections
    body.update(rendered)

    return Request(method='POST', database=database, path='/_api/transaction', body=body)


def traversal(database, options):
    return Request(method='POST', database=database, path='/_api/traversal', body=render(options))


# Views

def views(database):
    return Request(method='GET', database=database, path='/_api/view')


def view_info(database, view):
    return Request(method='GET', database=database, path=path('_api', 'view', name('view', view)))


def view_drop(database, view):
    return Request(method='DELETE', database=database, path=path('_api', 'view', name('view', view)))


def view_rename(database, view, new_name):
    return Request(method='PUT', database=database, path=path('_api', 'view', name('view', view), 'rename'),
                   body={'name': name('view', new_name)})


def view_create(database, view, type, options=None):
    body = {'name': name('view', view), 'type': type.value}
    body.update(render(options))
    return Request(method='POST', database=database, path='/_api/view', body=body)


def view_properties(database, view):
    return Request(method='GET', database=database, path=path('_api', 'view', name('view', view), 'properties'))


def view_properties_update(database, view, options):
    return Request(method='PATCH', database=database, path=path('_api', 'view', name('view', view), 'properties'),
                   body=render(options))


def view_properties_replace(database, view, options):
    return Request(method='PUT', database=database, path=path('_api', 'view', name('view', view), 'properties'),
                   body=render(options))


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
