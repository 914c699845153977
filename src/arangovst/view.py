""" View handles. :class:`View` covers what every view type supports;
    :class:`ArangoSearch` adds creation and the search link properties.
"""

from . import endpoints
from . import serde
from .entities import ArangoSearchPropertiesEntity, ViewEntity, ViewType
from .executor import Executable


class View(Executable):

    def __init__(self, database, name):

        endpoints.name('view', name)
        Executable.__init__(self, database.executor, database.name)

        self.db = database
        self.name = name


    def __repr__(self):
        return '<%s %s/%s>' % (self.__class__.__name__, self.database, self.name)


    def exists(self):
        return self._exists(endpoints.view_info(self.database, self.name))


    def get_info(self):
        return self._execute(endpoints.view_info(self.database, self.name), ViewEntity)


    def drop(self):
        return self._execute(endpoints.view_drop(self.database, self.name), serde.void)


    def rename(self, new_name):
        return self._execute(endpoints.view_rename(self.database, self.name, new_name), ViewEntity)


# end of class View



class ArangoSearch(View):

    def create(self, options=None):
        request = endpoints.view_create(self.database, self.name, ViewType.ARANGO_SEARCH, options)
        return self._execute(request, ArangoSearchPropertiesEntity)


    def get_properties(self):
        request = endpoints.view_properties(self.database, self.name)
        return self._execute(request, ArangoSearchPropertiesEntity)


    def update_properties(self, options):
        request = endpoints.view_properties_update(self.database, self.name, options)
        return self._execute(request, ArangoSearchPropertiesEntity)


    def replace_properties(self, options):
        request = endpoints.view_properties_replace(self.database, self.name, options)
        return self._execute(request, ArangoSearchPropertiesEntity)


# end of class ArangoSearch


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
