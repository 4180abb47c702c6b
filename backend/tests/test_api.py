"""
API tests for /api/v1/assemblies/ and /api/v1/parts/.

Run against the in-memory document store.
"""

import pytest

from domain.shared.exceptions import StoreUnavailableException
from domain.shared.value_objects import NodeKind

BASE = '/api/v1'


def create(api_client, resource, **body):
    response = api_client.post(f'{BASE}/{resource}/', body, format='json')
    assert response.status_code == 201, response.content
    return response.json()


def reparent(api_client, resource, node_id, parent_id):
    return api_client.put(
        f'{BASE}/{resource}/{node_id}/', {'parentAssemblyId': parent_id}, format='json'
    )


@pytest.fixture
def forest(api_client):
    root = create(api_client, 'assemblies', name='Chassis')
    sub = create(api_client, 'assemblies', name='Axle')
    bolt = create(api_client, 'parts', name='Bolt', color='silver', material='steel')
    nut = create(api_client, 'parts', name='Nut')
    reparent(api_client, 'assemblies', sub['id'], root['id'])
    reparent(api_client, 'parts', bolt['id'], root['id'])
    reparent(api_client, 'parts', nut['id'], sub['id'])
    return {'root': root, 'sub': sub, 'bolt': bolt, 'nut': nut}


# =============================================================================
# Create / read
# =============================================================================

def test_create_and_read_assembly(api_client):
    created = create(api_client, 'assemblies', name='Chassis')

    response = api_client.get(f"{BASE}/assemblies/{created['id']}/")

    assert response.status_code == 200
    assert response.json() == {
        'kind': 'Assembly', 'id': created['id'], 'name': 'Chassis', 'parentId': None,
    }


def test_create_part_includes_attributes(api_client):
    created = create(api_client, 'parts', name='Bolt', color='red', material='steel')
    assert created['kind'] == 'Part'
    assert (created['color'], created['material'], created['parentId']) == ('red', 'steel', None)


def test_create_requires_name(api_client):
    response = api_client.post(f'{BASE}/assemblies/', {}, format='json')
    assert response.status_code == 400
    assert 'name' in response.json()


def test_blank_name_is_a_validation_error(api_client, store):
    response = api_client.post(f'{BASE}/parts/', {'name': ''}, format='json')
    assert response.status_code == 400
    assert store.total_calls == 0


def test_missing_node_is_empty_404(api_client):
    response = api_client.get(f'{BASE}/parts/000000000000000000000000/')
    assert response.status_code == 404
    assert response.content == b''


# =============================================================================
# Lists and filters
# =============================================================================

def test_list_filters(api_client, forest):
    top = api_client.get(f'{BASE}/assemblies/?topLevelOnly=true').json()
    sub = api_client.get(f'{BASE}/assemblies/?subAssembliesOnly=true').json()
    parts = api_client.get(f'{BASE}/parts/?componentPartsOnly=true').json()

    assert [a['id'] for a in top] == [forest['root']['id']]
    assert [a['id'] for a in sub] == [forest['sub']['id']]
    assert len(parts) == 2
    assert api_client.get(f'{BASE}/parts/?orphanPartsOnly=true').json() == []


@pytest.mark.parametrize('url, message', [
    ('/assemblies/?topLevelOnly=true&subAssembliesOnly=true',
     'Please specify true for only one of topLevelOnly or subAssembliesOnly.'),
    ('/parts/?componentPartsOnly=true&orphanPartsOnly=true',
     'Please specify true for only one of componentPartsOnly or orphanPartsOnly.'),
])
def test_conflicting_list_flags_are_plain_text_400(api_client, store, url, message):
    response = api_client.get(BASE + url)

    assert response.status_code == 400
    assert response['Content-Type'].startswith('text/plain')
    assert response.content.decode() == message
    assert store.total_calls == 0


def test_bad_boolean_is_400(api_client):
    response = api_client.get(f'{BASE}/assemblies/?topLevelOnly=maybe')
    assert response.status_code == 400


# =============================================================================
# Hierarchy
# =============================================================================

def test_children_variants(api_client, forest):
    url = f"{BASE}/assemblies/{forest['root']['id']}/children/"

    everything = {n['id'] for n in api_client.get(url).json()}
    first_level = {n['id'] for n in api_client.get(url + '?firstLevelOnly=true').json()}
    parts_only = api_client.get(url + '?componentPartsOnly=true').json()

    assert everything == {forest['sub']['id'], forest['bolt']['id'], forest['nut']['id']}
    assert first_level == {forest['sub']['id'], forest['bolt']['id']}
    assert {n['kind'] for n in parts_only} == {'Part'}
    assert len(parts_only) == 2


def test_children_conflicting_flags(api_client, forest):
    url = f"{BASE}/assemblies/{forest['root']['id']}/children/?firstLevelOnly=true&componentPartsOnly=true"

    response = api_client.get(url)

    assert response.status_code == 400
    assert response.content.decode() == (
        'Please specify true for only one of firstLevelOnly or componentPartsOnly.'
    )


def test_children_max_depth(api_client, forest):
    url = f"{BASE}/assemblies/{forest['root']['id']}/children/?maxDepth=1"
    assert {n['id'] for n in api_client.get(url).json()} == {forest['sub']['id'], forest['bolt']['id']}

    response = api_client.get(f"{BASE}/assemblies/{forest['root']['id']}/children/?maxDepth=0")
    assert response.status_code == 400
    assert response.json()['error'] == 'VALIDATION_ERROR'


def test_tree(api_client, forest):
    response = api_client.get(f"{BASE}/assemblies/{forest['root']['id']}/tree/")

    assert response.status_code == 200
    tree = response.json()
    assert tree['id'] == forest['root']['id']
    sub = next(c for c in tree['children'] if c['id'] == forest['sub']['id'])
    assert [c['id'] for c in sub['children']] == [forest['nut']['id']]

    assert api_client.get(f'{BASE}/assemblies/000000000000000000000000/tree/').status_code == 404


def test_parent_chain(api_client, forest):
    response = api_client.get(f"{BASE}/parts/{forest['nut']['id']}/parent/")
    assert response.status_code == 200
    assert response.json() == [forest['sub']['id'], forest['root']['id']]

    top = api_client.get(f"{BASE}/assemblies/{forest['root']['id']}/parent/")
    assert top.json() == []


# =============================================================================
# Updates and deletes
# =============================================================================

def test_reparent_returns_204_and_moves_node(api_client, forest):
    response = reparent(api_client, 'parts', forest['nut']['id'], forest['root']['id'])

    assert response.status_code == 204
    nut = api_client.get(f"{BASE}/parts/{forest['nut']['id']}/").json()
    assert nut['parentId'] == forest['root']['id']


def test_reparent_to_top_level(api_client, forest):
    response = api_client.put(f"{BASE}/assemblies/{forest['sub']['id']}/", {}, format='json')

    assert response.status_code == 204
    assert api_client.get(f"{BASE}/assemblies/{forest['sub']['id']}/").json()['parentId'] is None


def test_reparent_errors(api_client, forest):
    missing = reparent(api_client, 'parts', forest['nut']['id'], '000000000000000000000000')
    cycle = reparent(api_client, 'assemblies', forest['root']['id'], forest['sub']['id'])

    assert missing.status_code == 404
    assert missing.json()['error'] == 'ENTITY_NOT_FOUND'
    assert cycle.status_code == 409
    assert cycle.json()['error'] == 'CIRCULAR_REFERENCE'


def test_patch_part_attributes_single_update(api_client, store, forest):
    store.calls.clear()

    response = api_client.patch(
        f"{BASE}/parts/{forest['bolt']['id']}/", {'color': 'black', 'material': 'brass'}, format='json'
    )

    assert response.status_code == 204
    assert store.update_calls == 1
    bolt = api_client.get(f"{BASE}/parts/{forest['bolt']['id']}/").json()
    assert (bolt['color'], bolt['material']) == ('black', 'brass')


def test_delete_orphans_children(api_client, forest):
    response = api_client.delete(f"{BASE}/assemblies/{forest['root']['id']}/")

    assert response.status_code == 204
    assert api_client.get(f"{BASE}/assemblies/{forest['root']['id']}/").status_code == 404
    assert api_client.get(f"{BASE}/parts/{forest['bolt']['id']}/").json()['parentId'] is None
    assert api_client.get(f"{BASE}/assemblies/{forest['sub']['id']}/").json()['parentId'] is None
    # Grandchildren keep their parent
    assert api_client.get(f"{BASE}/parts/{forest['nut']['id']}/").json()['parentId'] == forest['sub']['id']


def test_detail_routes_accept_missing_trailing_slash(api_client, forest):
    sub_url = f"{BASE}/assemblies/{forest['sub']['id']}"

    moved = api_client.put(sub_url, {}, format='json')
    read = api_client.get(sub_url)
    deleted = api_client.delete(f"{BASE}/parts/{forest['nut']['id']}")

    assert moved.status_code == 204
    assert read.status_code == 200
    assert read.json()['parentId'] is None
    assert deleted.status_code == 204
    assert api_client.get(f"{BASE}/parts/{forest['nut']['id']}").status_code == 404


# =============================================================================
# Errors and schema
# =============================================================================

def test_store_unavailable_is_503(api_client, store, monkeypatch):
    async def unavailable(*args, **kwargs):
        raise StoreUnavailableException('connection refused')

    monkeypatch.setattr(store, 'insert_one', unavailable)

    response = api_client.post(f'{BASE}/assemblies/', {'name': 'Chassis'}, format='json')

    assert response.status_code == 503
    assert response.json()['error'] == 'STORE_UNAVAILABLE'


def test_openapi_schema_lists_inventory_routes(api_client):
    response = api_client.get('/api/schema/?format=json')

    assert response.status_code == 200
    paths = response.json()['paths']
    assert '/api/v1/assemblies/{id}/children/' in paths
    assert '/api/v1/parts/{id}/parent/' in paths


def test_kinds_are_stored_in_separate_collections(api_client, store):
    create(api_client, 'assemblies', name='Chassis')
    create(api_client, 'parts', name='Bolt')

    assert len(store.collection(NodeKind.ASSEMBLY)) == 1
    assert len(store.collection(NodeKind.PART)) == 1
