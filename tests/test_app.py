"""Tests for the Flask API."""

import pytest

from basketmine.app import create_app

USER = {'X-User-Id': '1'}
OTHER_USER = {'X-User-Id': '2'}


@pytest.fixture
def loaded_client(client, grocery_baskets):
    response = client.put('/api/baskets', json={'baskets': [sorted(b) for b in grocery_baskets]})
    assert response.status_code == 200
    return client


class TestHealth:
    def test_health(self, client):
        response = client.get('/api/health')
        assert response.status_code == 200
        assert response.get_json()['status'] == 'ok'


class TestLoadBaskets:
    def test_load_raw_baskets(self, client):
        response = client.put('/api/baskets', json={'baskets': [['Bread', 'Milk'], ['Bread']]})
        data = response.get_json()
        assert response.status_code == 200
        assert data['stats'] == {
            'transactions': 2,
            'unique_items': 2,
            'avg_items_per_transaction': 1.5,
        }
        assert data['profile']['n_transactions'] == 2

    def test_load_transaction_records(self, client):
        response = client.put('/api/baskets', json={
            'transactions': [{'id': 1}, {'id': 2}],
            'transaction_items': [
                {'transaction_id': 1, 'item_id': 1, 'quantity': 3},
                {'transaction_id': 1, 'item_id': 2, 'quantity': 1},
                {'transaction_id': 2, 'item_id': 1, 'quantity': 1},
            ],
            'items': [{'id': 1, 'name': 'Bread'}, {'id': 2, 'name': 'Milk'}],
        })
        assert response.status_code == 200

        info = client.get('/api/dataset/info').get_json()
        assert info['stats']['top_items'][0] == {'item': 'Bread', 'count': 2}

    def test_missing_payload(self, client):
        response = client.put('/api/baskets', json={'rows': []})
        assert response.status_code == 400

    def test_not_an_object(self, client):
        response = client.put('/api/baskets', json=[['Bread']])
        assert response.status_code == 400

    def test_bad_basket(self, client):
        response = client.put('/api/baskets', json={'baskets': ['Bread,Milk']})
        assert response.status_code == 400

    def test_basket_limit(self, store):
        client = create_app({'TESTING': True, 'MAX_BASKETS': 1}, store=store).test_client()
        response = client.put('/api/baskets', json={'baskets': [['a'], ['b']]})
        assert response.status_code == 413


class TestDatasetInfo:
    def test_empty_dataset(self, client):
        data = client.get('/api/dataset/info').get_json()
        assert data['stats']['transactions'] == 0
        assert data['profile'] == {}

    def test_loaded(self, loaded_client):
        data = loaded_client.get('/api/dataset/info').get_json()
        assert data['stats']['transactions'] == 5
        assert data['profile']['n_unique_items'] == 6


class TestAlgorithms:
    def test_lists_both(self, client):
        data = client.get('/api/algorithms').get_json()
        sizes = {a['id']: a['max_itemset_size'] for a in data['algorithms']}
        assert sizes == {'apriori': 3, 'fp_growth': 2}
        assert data['lift_formula'] == 'itemset'


class TestMine:
    def test_mine_apriori(self, loaded_client):
        response = loaded_client.post('/api/mine', headers=USER, json={
            'algorithm': 'apriori', 'min_support': 0.4, 'min_confidence': 0.6,
        })
        data = response.get_json()
        assert response.status_code == 201
        assert data['id'] == 1
        assert data['algorithm'] == 'apriori'
        assert data['created_by'] == 1
        assert data['parameters'] == {'min_support': 0.4, 'min_confidence': 0.6}
        assert len(data['frequent_itemsets']) == 17
        for rule in data['association_rules']:
            assert rule['confidence'] >= 0.6

    def test_defaults(self, loaded_client):
        response = loaded_client.post('/api/mine', headers=USER, json={})
        data = response.get_json()
        assert response.status_code == 201
        assert data['algorithm'] == 'fp_growth'
        assert data['parameters'] == {'min_support': 0.1, 'min_confidence': 0.5}

    def test_fixed_algorithm_route(self, loaded_client):
        response = loaded_client.post('/api/mine/fp-growth', headers=USER, json={
            'min_support': 0.4, 'min_confidence': 0.6, 'algorithm': 'apriori',
        })
        data = response.get_json()
        assert response.status_code == 201
        assert data['algorithm'] == 'fp_growth'
        assert max(len(f['itemset']) for f in data['frequent_itemsets']) == 2

    def test_unknown_algorithm_route(self, loaded_client):
        assert loaded_client.post('/api/mine/eclat', json={}).status_code == 404

    @pytest.mark.parametrize('body', [
        {'min_support': 0, 'min_confidence': 0.5},
        {'min_support': 1.5, 'min_confidence': 0.5},
        {'min_support': 0.5, 'min_confidence': -1},
        {'min_support': 'lots', 'min_confidence': 0.5},
        {'min_support': 0.5, 'min_confidence': 0.5, 'algorithm': 'eclat'},
    ])
    def test_invalid_parameters(self, loaded_client, body):
        response = loaded_client.post('/api/mine', headers=USER, json=body)
        assert response.status_code == 400
        assert 'error' in response.get_json()

    def test_invalid_user_header(self, loaded_client):
        response = loaded_client.post('/api/mine', headers={'X-User-Id': 'abc'}, json={})
        assert response.status_code == 400

    def test_empty_dataset(self, client):
        response = client.post('/api/mine', headers=USER, json={'algorithm': 'apriori'})
        data = response.get_json()
        assert response.status_code == 201
        assert data['frequent_itemsets'] == []
        assert data['association_rules'] == []

    def test_custom_basket_source(self, store, two_baskets):
        app = create_app({'TESTING': True}, store=store, basket_source=lambda: two_baskets)
        response = app.test_client().post('/api/mine', headers=USER, json={
            'algorithm': 'apriori', 'min_support': 0.5, 'min_confidence': 0.5,
        })
        rules = response.get_json()['association_rules']
        assert {
            'antecedent': ['Bread'], 'consequent': ['Milk'],
            'support': 1.0, 'confidence': 1.0, 'lift': 1.0,
        } in rules


class TestCompare:
    def test_compare(self, loaded_client, store):
        response = loaded_client.post('/api/compare', headers=USER, json={
            'min_support': 0.4, 'min_confidence': 0.6,
        })
        data = response.get_json()
        assert response.status_code == 200

        ap = data['apriori_result']
        fp = data['fp_growth_result']
        metrics = data['comparison_metrics']
        assert ap['algorithm'] == 'apriori'
        assert fp['algorithm'] == 'fp_growth'
        assert metrics['execution_time_difference'] == pytest.approx(
            fp['execution_time_ms'] - ap['execution_time_ms']
        )
        assert metrics['itemsets_count_difference'] == -4
        assert metrics['faster_algorithm'] in ('apriori', 'fp_growth')
        assert len(store.list(1)) == 2

    def test_invalid(self, loaded_client):
        response = loaded_client.post('/api/compare', json={'min_support': 2})
        assert response.status_code == 400


class TestResults:
    def _mine(self, client, headers, algorithm):
        return client.post('/api/mine', headers=headers, json={
            'algorithm': algorithm, 'min_support': 0.4, 'min_confidence': 0.6,
        }).get_json()

    def test_list_by_owner(self, loaded_client):
        self._mine(loaded_client, USER, 'apriori')
        self._mine(loaded_client, OTHER_USER, 'fp_growth')

        mine = loaded_client.get('/api/results', headers=USER).get_json()['results']
        assert [r['algorithm'] for r in mine] == ['apriori']

        everything = loaded_client.get('/api/results').get_json()['results']
        assert {r['created_by'] for r in everything} == {1, 2}

    def test_no_results(self, client):
        assert client.get('/api/results', headers=USER).get_json()['results'] == []

    def test_get_by_id(self, loaded_client):
        created = self._mine(loaded_client, USER, 'apriori')
        response = loaded_client.get(f"/api/results/{created['id']}", headers=USER)
        assert response.status_code == 200
        assert response.get_json() == created

    def test_other_users_result(self, loaded_client):
        created = self._mine(loaded_client, USER, 'apriori')
        response = loaded_client.get(f"/api/results/{created['id']}", headers=OTHER_USER)
        assert response.status_code == 404

    def test_missing(self, client):
        assert client.get('/api/results/9999', headers=USER).status_code == 404
