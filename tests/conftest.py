import re
from typing import Callable
from urllib.parse import unquote

import httpretty
import pytest
import requests

from sesame.cli.context import SesameContext
from sesame.client import Connection, RepositoryClient, RepositoryDescriptor

from helpers import REPO_URL, REPOSITORY_ROWS, SERVER_URL, sparql_json


@pytest.fixture
def connection() -> Connection:
    return Connection(SERVER_URL.rstrip('/'))


@pytest.fixture
def descriptor() -> RepositoryDescriptor:
    return RepositoryDescriptor(uri=REPO_URL, id='test', title='Test repository', writable=True, readable=True)


@pytest.fixture
def repo(connection, descriptor) -> RepositoryClient:
    return RepositoryClient(connection, descriptor)


@pytest.fixture
def register_protocol() -> Callable[..., None]:
    def _register_protocol(version: int = 4):
        httpretty.register_uri(
            method=httpretty.GET,
            uri=SERVER_URL + 'protocol',
            body=str(version),
        )
    return _register_protocol


@pytest.fixture
def register_repositories() -> Callable[..., None]:
    def _register_repositories(rows: list[dict[str, str]] = None):
        httpretty.register_uri(
            method=httpretty.GET,
            uri=SERVER_URL + 'repositories',
            body=sparql_json(['uri', 'id', 'title', 'readable', 'writable'], rows or REPOSITORY_ROWS),
            adding_headers={
                'Content-Type': 'application/sparql-results+json',
            },
        )
    return _register_repositories


@pytest.fixture
def simulate_namespaces() -> Callable[[dict[str, str]], dict[str, str]]:
    """Pytest fixture that uses HTTPretty to simulate the namespace resources
    of the test repository, backed by a dictionary. GET returns 404 for
    unknown prefixes; PUT and DELETE update the dictionary and return
    204 No Content."""
    def _simulate_namespaces(namespaces: dict[str, str] = None) -> dict[str, str]:
        store = dict(namespaces or {})

        def prefix_of(uri):
            return unquote(uri.split('?', 1)[0].rsplit('/', 1)[-1])

        def get_namespace(request, uri, response_headers):
            prefix = prefix_of(uri)
            if prefix in store:
                return [200, response_headers, store[prefix]]
            return [404, response_headers, f'Undefined prefix: {prefix}']

        def put_namespace(request, uri, response_headers):
            store[prefix_of(uri)] = request.body.decode()
            return [204, response_headers, '']

        def delete_namespace(request, uri, response_headers):
            store.pop(prefix_of(uri), None)
            return [204, response_headers, '']

        def delete_all_namespaces(request, uri, response_headers):
            store.clear()
            return [204, response_headers, '']

        namespace_uri = re.compile(re.escape(REPO_URL + '/namespaces/') + r'[^/?]+')
        httpretty.register_uri(httpretty.GET, namespace_uri, body=get_namespace)
        httpretty.register_uri(httpretty.PUT, namespace_uri, body=put_namespace)
        httpretty.register_uri(httpretty.DELETE, namespace_uri, body=delete_namespace)
        httpretty.register_uri(httpretty.DELETE, REPO_URL + '/namespaces', body=delete_all_namespaces)
        return store
    return _simulate_namespaces


@pytest.fixture
def monkeypatch_request(monkeypatch):
    def _monkeypatch_request(response):
        if isinstance(response, type):
            response = response()
        monkeypatch.setattr(requests.Session, 'request', lambda *args, **kwargs: response)
    return _monkeypatch_request


@pytest.fixture
def sesame_context(connection, repo) -> SesameContext:
    return SesameContext(
        config={
            'SERVER': {
                'URL': SERVER_URL,
                'REPOSITORY': 'test',
            },
        },
        _connection=connection,
        _repo=repo,
    )
