""" Named graph handles.
"""

from typing import List

from . import endpoints
from . import serde
from .entities import EdgeDefinition, GraphEntity
from .executor import Executable


class Graph(Executable):

    def __init__(self, database, name):

        endpoints.name('graph', name)
        Executable.__init__(self, database.executor, database.name)

        self.db = database
        self.name = name


    def __repr__(self):
        return '<Graph %s/%s>' % (self.database, self.name)


    def exists(self):
        return self._exists(endpoints.graph_info(self.database, self.name))


    def create(self, edge_definitions=(), options=None):
        request = endpoints.graph_create(self.database, self.name, edge_definitions, options)
        return self._execute(request, GraphEntity, 'graph')


    def drop(self, drop_collections=False):
        return self._execute(endpoints.graph_drop(self.database, self.name, drop_collections), serde.void)


    def get_info(self):
        return self._execute(endpoints.graph_info(self.database, self.name), GraphEntity, 'graph')


    def get_vertex_collections(self):
        request = endpoints.graph_vertex_collections(self.database, self.name)
        return self._execute(request, List[str], 'collections')


    def add_vertex_collection(self, name):
        request = endpoints.graph_vertex_collection_add(self.database, self.name, name)
        return self._execute(request, GraphEntity, 'graph')


    def get_edge_definitions(self):
        """ Return the names of the edge collections of this graph.
        """

        request = endpoints.graph_edge_definitions(self.database, self.name)
        return self._execute(request, List[str], 'collections')


    def add_edge_definition(self, definition):
        request = endpoints.graph_edge_definition_add(self.database, self.name, _definition(definition))
        return self._execute(request, GraphEntity, 'graph')


    def replace_edge_definition(self, definition):
        request = endpoints.graph_edge_definition_replace(self.database, self.name, _definition(definition))
        return self._execute(request, GraphEntity, 'graph')


    def remove_edge_definition(self, collection):
        request = endpoints.graph_edge_definition_remove(self.database, self.name, collection)
        return self._execute(request, GraphEntity, 'graph')


# end of class Graph



def _definition(definition):
    """ Accept an :class:`EdgeDefinition` or the equivalent mapping.
    """

    if isinstance(definition, EdgeDefinition):
        return definition

    return serde.deserialize(definition, EdgeDefinition)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
