import dataclasses

import pytest

import arangovst
import fakeserver
from arangovst import entities
from arangovst import options


@dataclasses.dataclass
class Part:
    name: str
    weight: float = 0.0


@pytest.fixture
def db(server, client_factory):
    return client_factory(server.host).db('inventory')


def test_handles(db):

    assert db.name == 'inventory'
    assert db.collection('parts').name == 'parts'

    for bad in ('', 'a/b', None):
        with pytest.raises(arangovst.ArgumentError):
            db.collection(bad)

    with pytest.raises(arangovst.ArgumentError):
        db.graph('')

    with pytest.raises(arangovst.ArgumentError):
        db.get_document('no-slash')

    with pytest.raises(arangovst.ArgumentError):
        arangovst.Database(db.executor, '')


def test_exists(server, db):

    server.route('GET', '/_api/database/current', body={'result': {'name': 'inventory'}})
    assert db.exists().result(5) == True

    request = server.received('GET', '/_api/database/current')[0]
    assert request.database == 'inventory'

    server.route('GET', '/_api/database/current', fakeserver.error(404, 1228, 'database not found'))
    assert db.exists().result(5) == False

    # Anything other than not-found is not an answer.

    server.route('GET', '/_api/database/current', fakeserver.error(401, 11, 'not authorized'))

    with pytest.raises(arangovst.ServerError):
        db.exists().result(5)


def test_info(server, db):

    server.route('GET', '/_api/database/current',
                 body={'result': {'id': '42', 'name': 'inventory', 'path': '/data/42', 'isSystem': False}})

    info = db.get_info().result(5)
    assert info == entities.DatabaseEntity(id='42', name='inventory', path='/data/42', is_system=False)


def test_create_drop(server, client_factory):

    server.route('POST', '/_api/database', body={'result': True})
    server.route('DELETE', '/_api/database/inventory', body={'result': True})
    server.route('GET', '/_api/database', body={'result': ['_system', 'inventory']})

    client = client_factory(server.host)

    assert client.create_database('inventory').result(5) == True
    request = server.received('POST', '/_api/database')[0]
    assert request.database == '_system'
    assert request.body == {'name': 'inventory'}

    assert client.get_databases().result(5) == ['_system', 'inventory']
    assert client.db('inventory').drop().result(5) == True


def test_access(server, db):

    server.route('PUT', '/_api/user/alice/database/inventory', body={'inventory': 'ro'})
    server.route('GET', '/_api/user/alice/database/inventory', body={'result': 'ro'})

    assert db.grant_access('alice', entities.Permissions.RO).result(5) is None
    assert db.get_permissions('alice').result(5) == entities.Permissions.RO

    db.revoke_access('alice').result(5)
    grants = server.received('PUT', '/_api/user/alice/database/inventory')
    assert [request.body for request in grants] == [{'grant': 'ro'}, {'grant': 'none'}]


def test_collections(server, db):

    server.route('POST', '/_api/collection',
                 body={'id': '9', 'name': 'parts', 'status': 3, 'type': 2, 'isSystem': False})
    server.route('GET', '/_api/collection',
                 body={'result': [{'id': '9', 'name': 'parts'}, {'id': '1', 'name': '_users', 'isSystem': True}]})
    server.route('GET', '/_api/collection/parts/count', body={'count': 42, 'name': 'parts'})

    created = db.create_collection('parts', options.CollectionCreateOptions(wait_for_sync=True)).result(5)
    assert created.name == 'parts'
    assert created.status == entities.CollectionStatus.LOADED
    assert created.type == entities.CollectionType.DOCUMENT

    listed = db.get_collections().result(5)
    assert [collection.name for collection in listed] == ['parts', '_users']
    assert listed[1].is_system == True

    assert db.collection('parts').count().result(5) == 42


def test_documents(server, db):

    server.route('POST', '/_api/document/parts', body={'_key': 'bolt', '_id': 'parts/bolt', '_rev': '_a1'})
    server.route('GET', '/_api/document/parts/bolt',
                 body={'_key': 'bolt', '_id': 'parts/bolt', '_rev': '_a1', 'name': 'bolt', 'weight': 2})
    server.route('HEAD', '/_api/document/parts/bolt')
    server.route('HEAD', '/_api/document/parts/nut', fakeserver.error(404, 1202, 'document not found'))
    server.route('DELETE', '/_api/document/parts/bolt', body={'_key': 'bolt', '_id': 'parts/bolt', '_rev': '_a2'})

    parts = db.collection('parts')

    created = parts.insert_document({'name': 'bolt', 'weight': 2}).result(5)
    assert created.key == 'bolt'
    assert created.id == 'parts/bolt'
    assert created.rev == '_a1'

    part = parts.get_document('bolt', Part).result(5)
    assert part == Part('bolt', 2.0)

    part = db.get_document('parts/bolt', Part).result(5)
    assert part.name == 'bolt'

    raw = parts.get_document('parts/bolt').result(5)
    assert raw['_rev'] == '_a1'

    assert parts.document_exists('bolt').result(5) == True
    assert parts.document_exists('nut').result(5) == False

    deleted = parts.delete_document('bolt', options.DocumentDeleteOptions(if_match='_a1')).result(5)
    assert deleted.rev == '_a2'

    request = server.received('DELETE', '/_api/document/parts/bolt')[0]
    assert request.headers['if-match'] == '_a1'


def test_indexes(server, db):

    index = {'id': 'parts/7', 'type': 'persistent', 'fields': ['name'], 'unique': True}

    server.route('POST', '/_api/index', body=dict(index, isNewlyCreated=True))
    server.route('GET', '/_api/index', body={'indexes': [index]})
    server.route('GET', '/_api/index/parts/7', body=index)
    server.route('DELETE', '/_api/index/parts/7', body={'id': 'parts/7'})

    parts = db.collection('parts')

    created = parts.ensure_persistent_index(['name'], options.PersistentIndexOptions(unique=True)).result(5)
    assert created.is_newly_created == True
    assert created.fields == ['name']

    assert [entity.id for entity in parts.get_indexes().result(5)] == ['parts/7']
    assert parts.get_index('7').result(5).type == 'persistent'
    assert db.get_index('parts/7').result(5).unique == True
    assert db.delete_index('parts/7').result(5) == 'parts/7'


def test_queries(server, db):

    server.route('POST', '/_api/explain', body={'plan': {'nodes': []}, 'cacheable': True, 'warnings': []})
    server.route('POST', '/_api/query', body={'collections': ['parts'], 'bindVars': ['limit'], 'ast': []})
    server.route('GET', '/_api/query/slow', body=[{'id': '3', 'query': 'FOR x IN y RETURN x', 'runTime': 12.5}])
    server.route('DELETE', '/_api/query/3', body={})
    server.route('PUT', '/_api/query-cache/properties', body={'mode': 'on', 'maxResults': 64})

    explained = db.explain_query('FOR p IN parts LIMIT @limit RETURN p', {'limit': 1}).result(5)
    assert explained.cacheable == True

    parsed = db.parse_query('FOR p IN parts LIMIT @limit RETURN p').result(5)
    assert parsed.bind_vars == ['limit']

    slow = db.get_slow_queries().result(5)
    assert slow[0].run_time == 12.5

    assert db.kill_query('3').result(5) is None

    properties = entities.QueryCachePropertiesEntity(mode='on', max_results=64)
    assert db.set_query_cache_properties(properties).result(5).max_results == 64

    request = server.received('PUT', '/_api/query-cache/properties')[0]
    assert request.body['mode'] == 'on'
    assert request.body['maxResults'] == 64


def test_functions(server, db):

    server.route('POST', '/_api/aqlfunction', body={'isNewlyCreated': True})
    server.route('GET', '/_api/aqlfunction',
                 body={'result': [{'name': 'myfunctions::double', 'code': 'function (x) { return 2 * x; }'}]})
    server.route('DELETE', '/_api/aqlfunction/myfunctions%3A%3Adouble', body={'deletedCount': 1})

    db.create_aql_function('myfunctions::double', 'function (x) { return 2 * x; }').result(5)

    functions = db.get_aql_functions(options.AqlFunctionGetOptions(namespace='myfunctions')).result(5)
    assert functions[0].name == 'myfunctions::double'

    request = server.received('GET', '/_api/aqlfunction')[0]
    assert request.query == {'namespace': 'myfunctions'}

    assert db.delete_aql_function('myfunctions::double').result(5) == 1


def test_transaction(server, db):

    server.route('POST', '/_api/transaction', body={'result': 5, 'error': False})

    transaction = options.TransactionOptions(write_collections=['parts'])
    assert db.transaction('function () { return 5; }', int, transaction).result(5) == 5

    request = server.received('POST', '/_api/transaction')[0]
    assert request.body['collections'] == {'write': ['parts']}


def test_graphs(server, db):

    graph = {
        '_key': 'bom',
        '_id': '_graphs/bom',
        'edgeDefinitions': [{'collection': 'links', 'from': ['parts'], 'to': ['assemblies']}],
        'orphanCollections': [],
    }

    server.route('POST', '/_api/gharial', body={'graph': graph})
    server.route('GET', '/_api/gharial', body={'graphs': [graph]})
    server.route('GET', '/_api/gharial/bom/vertex', body={'collections': ['assemblies', 'parts']})
    server.route('POST', '/_api/gharial/bom/edge', body={'graph': graph})

    definition = entities.EdgeDefinition(collection='links', from_=['parts'], to=['assemblies'])
    created = db.create_graph('bom', [definition]).result(5)

    assert created.name == 'bom'
    assert created.edge_definitions[0].from_ == ['parts']

    assert [entity.name for entity in db.get_graphs().result(5)] == ['bom']

    bom = db.graph('bom')
    assert bom.get_vertex_collections().result(5) == ['assemblies', 'parts']

    bom.add_edge_definition({'collection': 'uses', 'from': ['assemblies'], 'to': ['parts']}).result(5)
    request = server.received('POST', '/_api/gharial/bom/edge')[0]
    assert request.body == {'collection': 'uses', 'from': ['assemblies'], 'to': ['parts']}


def test_traversal(server, db):

    server.route('POST', '/_api/traversal', body={'result': {
        'visited': {'vertices': [{'_key': 'a'}], 'paths': [{'edges': [], 'vertices': [{'_key': 'a'}]}]},
    }})

    traversal = options.TraversalOptions(start_vertex='parts/a', graph_name='bom', direction='outbound')
    result = db.execute_traversal(traversal).result(5)

    assert result.visited.vertices == [{'_key': 'a'}]
    assert len(result.visited.paths) == 1

    request = server.received('POST', '/_api/traversal')[0]
    assert request.body == {'startVertex': 'parts/a', 'graphName': 'bom', 'direction': 'outbound'}


def test_views(server, db):

    server.route('POST', '/_api/view',
                 body={'id': '5', 'name': 'search', 'type': 'arangosearch', 'commitIntervalMsec': 1000})
    server.route('GET', '/_api/view', body={'result': [{'id': '5', 'name': 'search', 'type': 'arangosearch'}]})
    server.route('GET', '/_api/view/missing', fakeserver.error(404, 1203, 'view not found'))

    created = db.create_arango_search('search').result(5)
    assert created.type == entities.ViewType.ARANGO_SEARCH
    assert created.commit_interval_msec == 1000

    views = db.get_views().result(5)
    assert views[0].name == 'search'

    assert db.view('missing').exists().result(5) == False


def test_route(server, db):

    server.route('GET', '/service/parts', body={'parts': 3})
    server.route('POST', '/service/parts', lambda request: fakeserver.Reply(201, request.body))

    service = db.route('service').with_header('x-client', 'tests')
    assert service.route('parts').get().result(5) == {'parts': 3}

    created = service.route('parts').with_query('wait', True).with_body({'name': 'bolt'}).post().result(5)
    assert created == {'name': 'bolt'}

    request = server.received('POST', '/service/parts')[0]
    assert request.database == 'inventory'
    assert request.query == {'wait': 'true'}
    assert request.headers['x-client'] == 'tests'

    # The original route is unchanged.

    assert service.body is None
    assert service.query == {}


def test_host_list(servers, client_factory):

    first, second = servers
    first.route('GET', '/_api/cluster/endpoints',
                body={'endpoints': [{'endpoint': 'tcp://127.0.0.1:%d' % (second.port)}]})

    client = client_factory(first.host)
    hosts = client.acquire_host_list().result(5)

    assert hosts == [second.host]
    assert client.executor.resolver.hosts == [second.host]


def test_client_configuration():

    configuration = arangovst.Configuration()

    with pytest.raises(arangovst.ConfigError):
        arangovst.ArangoClient(configuration, timeout=5)

    with arangovst.ArangoClient(configuration) as client:
        assert client.configuration is configuration


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
