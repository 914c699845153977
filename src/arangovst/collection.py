""" Collection handles: metadata, documents and indexes of one collection.
"""

from typing import Any, List

from . import endpoints
from . import serde
from .entities import (
    CollectionEntity,
    CollectionPropertiesEntity,
    DocumentCreateEntity,
    DocumentDeleteEntity,
    DocumentUpdateEntity,
    IndexEntity,
)
from .executor import Executable


class Collection(Executable):
    """ The collection *name* inside the :class:`arangovst.database.Database`
        *database*.
    """

    def __init__(self, database, name):

        endpoints.name('collection', name)
        Executable.__init__(self, database.executor, database.name)

        self.db = database
        self.name = name


    def __repr__(self):
        return '<Collection %s/%s>' % (self.database, self.name)


    def exists(self):
        return self._exists(endpoints.collection_info(self.database, self.name))


    def get_info(self):
        return self._execute(endpoints.collection_info(self.database, self.name), CollectionEntity)


    def get_properties(self):
        request = endpoints.collection_properties(self.database, self.name)
        return self._execute(request, CollectionPropertiesEntity)


    def count(self):
        return self._execute(endpoints.collection_count(self.database, self.name), int, 'count')


    def drop(self, is_system=False):
        return self._execute(endpoints.collection_drop(self.database, self.name, is_system), serde.void)


    def truncate(self):
        return self._execute(endpoints.collection_truncate(self.database, self.name), CollectionEntity)


    def rename(self, new_name):
        """ Rename the collection on the server. This handle keeps pointing
            at the old name; obtain a new handle for the renamed collection.
        """

        request = endpoints.collection_rename(self.database, self.name, new_name)
        return self._execute(request, CollectionEntity)


    # Documents

    def _id(self, key):
        return endpoints.document_id(self.name, key)


    def insert_document(self, document, options=None):
        """ Store *document*, a mapping, :class:`msgspec.Struct` or
            dataclass instance. Returns the key, id and revision assigned by
            the server.
        """

        request = endpoints.document_insert(self.database, self.name, document, options)
        return self._execute(request, DocumentCreateEntity)


    def get_document(self, key, type=Any, options=None):
        return self._execute(endpoints.document_get(self.database, self._id(key), options), type)


    def replace_document(self, key, document, options=None):
        request = endpoints.document_replace(self.database, self._id(key), document, options)
        return self._execute(request, DocumentUpdateEntity)


    def update_document(self, key, document, options=None):
        request = endpoints.document_update(self.database, self._id(key), document, options)
        return self._execute(request, DocumentUpdateEntity)


    def delete_document(self, key, options=None):
        request = endpoints.document_delete(self.database, self._id(key), options)
        return self._execute(request, DocumentDeleteEntity)


    def document_exists(self, key, options=None):
        return self._exists(endpoints.document_head(self.database, self._id(key), options))


    # Indexes

    def get_index(self, id):
        request = endpoints.index_get(self.database, endpoints.index_id(self.name, id))
        return self._execute(request, IndexEntity)


    def delete_index(self, id):
        request = endpoints.index_delete(self.database, endpoints.index_id(self.name, id))
        return self._execute(request, str, 'id')


    def get_indexes(self):
        return self._execute(endpoints.indexes(self.database, self.name), List[IndexEntity], 'indexes')


    def ensure_persistent_index(self, fields, options=None):
        request = endpoints.persistent_index(self.database, self.name, fields, options)
        return self._execute(request, IndexEntity)


# end of class Collection


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
