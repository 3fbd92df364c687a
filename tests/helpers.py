import json

SERVER_URL = 'http://localhost:8080/openrdf-sesame/'
REPO_URL = SERVER_URL + 'repositories/test'


def sparql_json(variables: list[str], rows: list[dict[str, str]]) -> str:
    """Serialize rows of plain string values as a SPARQL-results-JSON document."""
    return json.dumps({
        'head': {'vars': variables},
        'results': {
            'bindings': [
                {name: {'type': 'literal', 'value': value} for name, value in row.items()}
                for row in rows
            ]
        }
    })


def repository_row(repository_id: str, title: str, writable: bool = True, readable: bool = True) -> dict[str, str]:
    return {
        'uri': SERVER_URL + 'repositories/' + repository_id,
        'id': repository_id,
        'title': title,
        'writable': 'true' if writable else 'false',
        'readable': 'true' if readable else 'false',
    }


REPOSITORY_ROWS = [
    repository_row('SYSTEM', 'System configuration repository', writable=False),
    repository_row('test', 'Test repository'),
]
