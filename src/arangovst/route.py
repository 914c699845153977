""" Free-form requests against any path of a database, typically the
    endpoints of a server-side service. A :class:`Route` is immutable; the
    ``with_*`` methods return a modified copy.
"""

from typing import Any

from .executor import Executable
from .protocol import Request
from .protocol.message import path, query_value


class Route(Executable):

    def __init__(self, database, *segments, headers=None, query=None, body=None):

        Executable.__init__(self, database.executor, database.name)

        self.db = database
        self.segments = segments
        self.path = path(*segments)
        self.headers = dict(headers or {})
        self.query = dict(query or {})
        self.body = body


    def __repr__(self):
        return '<Route %s%s>' % (self.database, self.path)


    def _copy(self, headers=None, query=None, body=None):

        return Route(self.db, *self.segments,
                     headers=self.headers if headers is None else headers,
                     query=self.query if query is None else query,
                     body=self.body if body is None else body)


    def route(self, *segments):
        """ Return a route for a path below this one.
        """

        return Route(self.db, *(self.segments + segments), headers=self.headers, query=self.query)


    def with_header(self, name, value):
        headers = dict(self.headers)
        headers[name] = str(value)
        return self._copy(headers=headers)


    def with_query(self, name, value):
        parameters = dict(self.query)
        parameters[name] = query_value(value)
        return self._copy(query=parameters)


    def with_body(self, body):
        return self._copy(body=body)


    def _request(self, method, type):

        request = Request(method=method, database=self.database, path=self.path,
                          query=self.query, headers=self.headers, body=self.body)

        return self._execute(request, type)


    def get(self, type=Any):
        return self._request('GET', type)


    def post(self, type=Any):
        return self._request('POST', type)


    def put(self, type=Any):
        return self._request('PUT', type)


    def patch(self, type=Any):
        return self._request('PATCH', type)


    def delete(self, type=Any):
        return self._request('DELETE', type)


    def head(self):
        return self._request('HEAD', None)


# end of class Route


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
