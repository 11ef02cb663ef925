import pytest

from basketmine.app import create_app
from basketmine.store import MiningResultStore


@pytest.fixture
def grocery_baskets():
    return [
        {'bread', 'milk'},
        {'bread', 'diaper', 'beer', 'eggs'},
        {'milk', 'diaper', 'beer', 'cola'},
        {'bread', 'milk', 'diaper', 'beer'},
        {'bread', 'milk', 'diaper', 'cola'},
    ]


@pytest.fixture
def two_baskets():
    return [{'Bread', 'Milk', 'Butter'}, {'Bread', 'Milk'}]


@pytest.fixture
def store():
    return MiningResultStore()


@pytest.fixture
def app(store):
    app = create_app({'TESTING': True}, store=store)
    yield app


@pytest.fixture
def client(app):
    return app.test_client()
