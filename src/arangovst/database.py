""" The database handle. Every operation returns a :class:`Future`; the
    request itself is built and validated synchronously, so malformed
    arguments raise :class:`arangovst.errors.ArgumentError` immediately.
"""

from typing import Any, List

from . import endpoints
from . import serde
from .collection import Collection
from .cursor import Cursor, CursorRemote
from .entities import (
    AqlExecutionExplainEntity,
    AqlFunctionEntity,
    AqlParseEntity,
    ArangoDBVersion,
    ArangoSearchPropertiesEntity,
    CollectionEntity,
    CursorEntity,
    DatabaseEntity,
    GraphEntity,
    IndexEntity,
    Permissions,
    QueryCachePropertiesEntity,
    QueryEntity,
    QueryTrackingPropertiesEntity,
    TraversalEntity,
    ViewEntity,
    ViewType,
)
from .errors import ArgumentError
from .executor import Executable
from .graph import Graph
from .route import Route
from .transport.resolver import HostHandle
from .view import ArangoSearch, View


class Database(Executable):
    """ A handle on the database *name*. Creating the handle does not
        contact the server.
    """

    def __init__(self, executor, name=endpoints.SYSTEM):

        endpoints.name('database', name)
        Executable.__init__(self, executor, name)


    def __repr__(self):
        return '<Database %s>' % (self.name)


    @property
    def name(self):
        return self.database


    def get_version(self, details=False):
        return self._execute(endpoints.version(self.name, details), ArangoDBVersion)


    def exists(self):
        """ True if the database exists. Only a not-found answer yields
            False; transport failures and other server errors propagate.
        """

        return self._exists(endpoints.database_current(self.name))


    def get_info(self):
        return self._execute(endpoints.database_current(self.name), DatabaseEntity, 'result')


    def get_accessible_databases(self):
        return self._execute(endpoints.accessible_databases(self.name), List[str], 'result')


    def create(self):
        return self._execute(endpoints.database_create(self.name), bool, 'result')


    def drop(self):
        return self._execute(endpoints.database_drop(self.name), bool, 'result')


    # Users

    def grant_access(self, user, permissions=Permissions.RW):
        return self._execute(endpoints.grant_access(self.name, user, permissions), serde.void)


    def revoke_access(self, user):
        return self.grant_access(user, Permissions.NONE)


    def reset_access(self, user):
        return self._execute(endpoints.reset_access(self.name, user), serde.void)


    def grant_default_collection_access(self, user, permissions=Permissions.RW):
        request = endpoints.grant_default_collection_access(self.name, user, permissions)
        return self._execute(request, serde.void)


    def get_permissions(self, user):
        return self._execute(endpoints.permissions(self.name, user), Permissions, 'result')


    # Collections and indexes

    def collection(self, name):
        return Collection(self, name)


    def create_collection(self, name, options=None):
        return self._execute(endpoints.collection_create(self.name, name, options), CollectionEntity)


    def get_collections(self, options=None):
        return self._execute(endpoints.collections(self.name, options), List[CollectionEntity], 'result')


    def get_index(self, id):
        return self._execute(endpoints.index_get(self.name, endpoints.index_id(None, id)), IndexEntity)


    def delete_index(self, id):
        return self._execute(endpoints.index_delete(self.name, endpoints.index_id(None, id)), str, 'id')


    # Queries

    def query(self, query, type=Any, bind_vars=None, options=None):
        """ Run the *query* and return a :class:`Future` for a
            :class:`Cursor` over its results, decoded as *type*. Subsequent
            pages are fetched from the same host as the first one.
        """

        request = endpoints.cursor_create(self.name, query, bind_vars, options)
        return self._cursor(request, type)


    def cursor(self, id, type=Any):
        """ Resume iterating the existing server-side cursor *id*.
        """

        if not isinstance(id, str) or id == '':
            raise ArgumentError('cursor id must be a non-empty string, not %r' % (id,))

        return self._cursor(endpoints.cursor_next(self.name, id), type)


    def _cursor(self, request, type):

        configuration = self.configuration
        handle = HostHandle()
        remote = CursorRemote(self.executor, self.name, handle)

        def _open(entity):
            return Cursor(remote, entity, type, configuration.strict, configuration.naming)

        started = self.executor.execute(request, serde.decoder(CursorEntity), handle)
        return started.then(_open)


    def explain_query(self, query, bind_vars=None, options=None):
        request = endpoints.query_explain(self.name, query, bind_vars, options)
        return self._execute(request, AqlExecutionExplainEntity)


    def parse_query(self, query):
        return self._execute(endpoints.query_parse(self.name, query), AqlParseEntity)


    def clear_query_cache(self):
        return self._execute(endpoints.query_cache_clear(self.name), serde.void)


    def get_query_cache_properties(self):
        return self._execute(endpoints.query_cache_properties(self.name), QueryCachePropertiesEntity)


    def set_query_cache_properties(self, properties):
        request = endpoints.query_cache_properties_set(self.name, properties)
        return self._execute(request, QueryCachePropertiesEntity)


    def get_query_tracking_properties(self):
        return self._execute(endpoints.query_tracking_properties(self.name), QueryTrackingPropertiesEntity)


    def set_query_tracking_properties(self, properties):
        request = endpoints.query_tracking_properties_set(self.name, properties)
        return self._execute(request, QueryTrackingPropertiesEntity)


    def get_currently_running_queries(self):
        return self._execute(endpoints.queries_current(self.name), List[QueryEntity])


    def get_slow_queries(self):
        return self._execute(endpoints.queries_slow(self.name), List[QueryEntity])


    def clear_slow_queries(self):
        return self._execute(endpoints.queries_slow_clear(self.name), serde.void)


    def kill_query(self, id):
        return self._execute(endpoints.query_kill(self.name, id), serde.void)


    def create_aql_function(self, name, code, options=None):
        return self._execute(endpoints.aql_function_create(self.name, name, code, options), serde.void)


    def delete_aql_function(self, name, options=None):
        return self._execute(endpoints.aql_function_delete(self.name, name, options), int, 'deletedCount')


    def get_aql_functions(self, options=None):
        return self._execute(endpoints.aql_functions(self.name, options), List[AqlFunctionEntity], 'result')


    # Graphs

    def graph(self, name):
        return Graph(self, name)


    def create_graph(self, name, edge_definitions=(), options=None):
        request = endpoints.graph_create(self.name, name, edge_definitions, options)
        return self._execute(request, GraphEntity, 'graph')


    def get_graphs(self):
        return self._execute(endpoints.graphs(self.name), List[GraphEntity], 'graphs')


    # Transactions, traversals and documents

    def transaction(self, action, type=Any, options=None):
        """ Run the JavaScript *action* as a server-side transaction and
            return its result decoded as *type*.
        """

        return self._execute(endpoints.transaction(self.name, action, options), type, 'result')


    def execute_traversal(self, options):
        return self._execute(endpoints.traversal(self.name, options), TraversalEntity, 'result')


    def get_document(self, id, type=Any, options=None):
        """ Read a document by its full ``collection/key`` identifier.
        """

        if not isinstance(id, str) or id.count('/') != 1:
            raise ArgumentError('document id must have the form collection/key, not %r' % (id,))

        collection, _, key = id.partition('/')
        return Collection(self, collection).get_document(key, type, options)


    def reload_routing(self):
        return self._execute(endpoints.reload_routing(self.name), serde.void)


    def route(self, *path):
        return Route(self, *path)


    # Views

    def get_views(self):
        return self._execute(endpoints.views(self.name), List[ViewEntity], 'result')


    def view(self, name):
        return View(self, name)


    def arango_search(self, name):
        return ArangoSearch(self, name)


    def create_view(self, name, type):
        return self._execute(endpoints.view_create(self.name, name, ViewType(type)), ViewEntity)


    def create_arango_search(self, name, options=None):
        request = endpoints.view_create(self.name, name, ViewType.ARANGO_SEARCH, options)
        return self._execute(request, ArangoSearchPropertiesEntity)


# end of class Database


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
