import dataclasses
import logging
import re
import threading
from dataclasses import dataclass, field
from http import HTTPStatus
from http.client import responses
from typing import Any, Iterable, Mapping, Optional, Union
from urllib.parse import quote

from rdflib import Graph
from rdflib.term import Node
from requests import Response, Session
from requests.auth import AuthBase
from requests.exceptions import ConnectionError
from urlobject import URLObject

from sesame.client.formats import FormatLike, ResultFormat, media_type, normalize_format

logger = logging.getLogger(__name__)

NULL_CONTEXT = 'null'
"""Context value that addresses statements without any context."""

UNDEFINED_PREFIX = re.compile(r'^Undefined prefix:')

FORM_URLENCODED = 'application/x-www-form-urlencoded'

Term = Union[str, Node]


def to_ntriples(value: Term) -> str:
    """Encode an RDF term for use as a request parameter. Strings are assumed
    to be N-Triples encoded already and are passed through unchanged; rdflib
    terms are encoded with their `n3()` method.

    ```pycon
    >>> to_ntriples(URIRef('http://example.com/foo'))
    '<http://example.com/foo>'

    >>> to_ntriples('"5"^^<http://www.w3.org/2001/XMLSchema#integer>')
    '"5"^^<http://www.w3.org/2001/XMLSchema#integer>'
    ```
    """
    if isinstance(value, Node):
        return value.n3()
    return str(value)


def context_params(contexts: Optional[Union[Term, Iterable[Term]]]) -> list[tuple[str, str]]:
    """Turn one context or a list of contexts into repeated `context`
    parameters. `None` means no restriction, and yields no parameters."""
    if contexts is None:
        return []
    if isinstance(contexts, (str, Node)):
        contexts = [contexts]
    return [('context', to_ntriples(c)) for c in contexts]


def reason_phrase(response: Response) -> str:
    """The response's reason phrase, or the standard phrase for its status
    code. Empty for status codes that have no standard phrase."""
    return response.reason or responses.get(response.status_code, '')


def text_of(response: Response) -> str:
    """Decode the response body. Without a charset in the `Content-Type`,
    requests would decode `text/*` bodies as ISO-8859-1; the server writes
    UTF-8."""
    if 'charset' not in response.headers.get('Content-Type', '').lower():
        response.encoding = 'utf-8'
    return response.text


class SesameError(Exception):
    """Base class for all errors raised by this library."""
    pass


class LocalValidationError(SesameError, ValueError):
    """Raised before any request is sent, when the requested operation
    is refused locally."""
    pass


class DeleteSafetyError(LocalValidationError):
    """Raised by `RepositoryClient.delete_statements()` when a delete
    without a subject, predicate, or object would remove every statement
    in the repository."""
    pass


class ProtocolError(SesameError):
    """Raised when the server responds with a status code other than the
    documented success code for the operation."""
    def __init__(self, response: Response, *args):
        super().__init__(*args)

        self.response: Response = response
        """The Requests `Response` object from the failed request."""

        self.status_code = self.response.status_code
        """The numeric HTTP status code (e.g., 400) for the failed request."""

        self.reason = reason_phrase(self.response)
        """The reason phrase (e.g., "Bad Request") for the failed request. If
        the `response` does not have a reason phrase, use the standard phrase
        for the `status_code`, or an empty string for nonstandard codes."""

    @property
    def body(self) -> str:
        """The raw response body, usually the server's error message."""
        return text_of(self.response)

    def __str__(self):
        return f'{self.status_code} {self.reason}'.rstrip()


class SessionHeaderAttribute:
    """Descriptor that maps an attribute to a session header name. Requires
    the instance to have a `session` attribute with a `headers` attribute whose
    value is a mapping that supports the methods `get()` and `update()`, plus
    the `del` operator."""

    def __init__(self, header_name: str):
        self.header_name = header_name
        """The HTTP header name"""

    def __set_name__(self, owner, name):
        self.name = name

    def __get__(self, instance, owner):
        if instance is None:
            return self
        return instance.session.headers.get(self.header_name, None)

    def __set__(self, instance, value):
        if value is not None:
            instance.session.headers.update({self.header_name: str(value)})

    def __delete__(self, instance):
        try:
            del instance.session.headers[self.header_name]
        except KeyError:
            pass


@dataclass(frozen=True)
class RepositoryDescriptor:
    """A repository as advertised by the server's repository listing."""

    uri: str
    """Absolute URL of the repository"""

    id: str
    title: str
    writable: bool
    readable: bool

    def __str__(self):
        return self.id

    @classmethod
    def from_binding(cls, binding: Mapping[str, Mapping[str, str]]) -> 'RepositoryDescriptor':
        """Build a descriptor from one `results.bindings` entry of the
        SPARQL-results-JSON repository listing."""
        return cls(
            uri=binding['uri']['value'],
            id=binding['id']['value'],
            title=binding['title']['value'],
            writable=binding['writable']['value'] == 'true',
            readable=binding['readable']['value'] == 'true',
        )


@dataclass
class StatementFilter:
    """Selects a subset of the statements in a repository, for reading or
    deleting. Every field is optional; an empty filter selects all statements.

    Term values are N-Triples encoded strings (e.g. `<http://example.com/a>`
    or `"foo"@en`) or rdflib terms. `contexts` may be a single context, a list
    of contexts (their union is selected), or `NULL_CONTEXT` for statements
    without a context. `infer` controls whether inferred statements are
    included; `None` leaves it to the server, which includes them."""

    subject: Optional[Term] = None
    predicate: Optional[Term] = None
    object: Optional[Term] = None
    contexts: Optional[Union[Term, list[Term]]] = None
    infer: Optional[bool] = None

    # wire parameter name -> field name
    FIELDS = {
        'subj': 'subject',
        'pred': 'predicate',
        'obj': 'object',
        'context': 'contexts',
        'infer': 'infer',
    }

    @classmethod
    def from_mapping(cls, options: Mapping[str, Any]) -> 'StatementFilter':
        """Build a filter from a mapping keyed by either the wire parameter
        names (`subj`, `pred`, `obj`, `context`, `infer`) or the field names.
        Any other keys are dropped."""
        values = {}
        for key, value in options.items():
            if key in cls.FIELDS:
                values[cls.FIELDS[key]] = value
            elif key in cls.FIELDS.values():
                values[key] = value
            else:
                logger.debug(f'Ignoring unknown statement filter option "{key}"')
        return cls(**values)

    @property
    def has_pattern(self) -> bool:
        """Whether at least one of subject, predicate, or object is set."""
        return any(v is not None for v in (self.subject, self.predicate, self.object))

    def to_params(self) -> list[tuple[str, str]]:
        params = []
        if self.subject is not None:
            params.append(('subj', to_ntriples(self.subject)))
        if self.predicate is not None:
            params.append(('pred', to_ntriples(self.predicate)))
        if self.object is not None:
            params.append(('obj', to_ntriples(self.object)))
        params.extend(context_params(self.contexts))
        if self.infer is not None:
            params.append(('infer', 'true' if self.infer else 'false'))
        return params


def get_filter(statement_filter: Union[StatementFilter, Mapping[str, Any], None]) -> StatementFilter:
    if statement_filter is None:
        return StatementFilter()
    if isinstance(statement_filter, StatementFilter):
        return statement_filter
    return StatementFilter.from_mapping(statement_filter)


@dataclass
class QueryOptions:
    """Settings for `RepositoryClient.query()`."""

    result_format: FormatLike = ResultFormat.JSON
    method: str = 'GET'
    """`GET` or `POST`"""

    query_language: str = 'sparql'
    """"sparql", "serql", or any other query language the server supports"""

    infer: bool = True
    """Only an explicit `False` is sent to the server; otherwise the server
    default (inference on) applies."""

    variable_bindings: dict[str, Term] = field(default_factory=dict)
    """Binds query variables outside the query text. Keys are variable
    names; values are N-Triples encoded RDF values."""

    def to_fields(self, query: str) -> list[tuple[str, str]]:
        """Build the request fields for `query`. Each variable binding
        becomes a `$<name>` field."""
        fields = [
            ('query', query),
            ('queryLn', self.query_language),
        ]
        if self.infer is False:
            fields.append(('infer', 'false'))
        for name, value in self.variable_bindings.items():
            fields.append((f'$<{name}>', to_ntriples(value)))
        return fields


class Connection:
    """Entry point for a Sesame server. The protocol is stateless, so
    creating a `Connection` does not do anything over the network unless
    `query_server_information` is true, in which case the protocol version
    and the repository listing are loaded immediately.

    ```pycon
    >>> connection = Connection('http://localhost:8080/openrdf-sesame')
    >>> connection.url
    'http://localhost:8080/openrdf-sesame/'
    ```
    """
    ua_string = SessionHeaderAttribute('User-Agent')
    """`User-Agent` header value"""
    session: Session
    """Underlying Requests library Session object, or a subclass thereof"""

    def __init__(
        self,
        url: str,
        query_server_information: bool = False,
        auth: AuthBase = None,
        server_cert: str = None,
        client_cert: tuple[str, str] = None,
        ua_string: str = None,
        timeout: float = None,
        session: Session = None,
    ):
        if not url.endswith('/'):
            url += '/'
        self.url: URLObject = URLObject(url)
        """Server URL; always ends with a slash"""

        self.timeout = timeout
        """Passed to every request; `None` waits forever"""

        if session is None:
            self.session = Session()
        else:
            self.session = session

        if auth is not None:
            self.session.auth = auth
        if server_cert is not None:
            self.session.verify = server_cert
        if client_cert is not None:
            # adapters only read `cert` from the session or the request kwargs
            self.session.cert = client_cert
        self.ua_string = ua_string

        self._protocol_version: Optional[int] = None
        self._repositories: Optional[list[RepositoryDescriptor]] = None
        self._version_lock = threading.Lock()
        self._repositories_lock = threading.Lock()

        if query_server_information:
            self.query_version()
            self.query_repositories()

        logger.debug(f'Sesame connection initialized for {self.url}')

    def __str__(self):
        return str(self.url)

    def __enter__(self) -> 'Connection':
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def request(self, method: str, url: str, **kwargs) -> Response:
        """Send an HTTP request using the configured `session`. Additional
        keyword arguments are passed to the underlying `session.request()`
        method."""
        logger.debug(f'{method} {url}')
        kwargs.setdefault('timeout', self.timeout)
        try:
            response = self.session.request(method, url, **kwargs)
        except ConnectionError as e:
            message = ' '.join(str(arg) for arg in e.args)
            logger.error(message)
            raise RuntimeError(f'Connection error: {message}') from e
        reason = reason_phrase(response)
        logger.debug(f'{response.status_code} {reason}')
        return response

    def get(self, url: str, **kwargs) -> Response:
        """Send an HTTP GET request using the configured session."""
        return self.request('GET', url, **kwargs)

    def post(self, url: str, **kwargs) -> Response:
        """Send an HTTP POST request using the configured session."""
        return self.request('POST', url, **kwargs)

    def put(self, url: str, **kwargs) -> Response:
        """Send an HTTP PUT request using the configured session."""
        return self.request('PUT', url, **kwargs)

    def delete(self, url: str, **kwargs) -> Response:
        """Send an HTTP DELETE request using the configured session."""
        return self.request('DELETE', url, **kwargs)

    def query_version(self) -> int:
        """Fetch the protocol version from the server and cache it."""
        response = self.get(self.url + 'protocol')
        if response.status_code != HTTPStatus.OK:
            logger.error(f'Unable to get protocol version from {self.url}')
            raise ProtocolError(response)
        self._protocol_version = int(response.text.strip())
        return self._protocol_version

    @property
    def protocol_version(self) -> int:
        """Protocol version of the server. Fetched on first access, then cached."""
        if self._protocol_version is None:
            with self._version_lock:
                if self._protocol_version is None:
                    self.query_version()
        return self._protocol_version

    def query_repositories(self) -> list[RepositoryDescriptor]:
        """Fetch the repository listing from the server and cache it."""
        response = self.get(self.url + 'repositories', headers={'Accept': ResultFormat.JSON.media_type})
        if response.status_code != HTTPStatus.OK:
            logger.error(f'Unable to list repositories on {self.url}')
            raise ProtocolError(response)
        bindings = response.json()['results']['bindings']
        self._repositories = [RepositoryDescriptor.from_binding(b) for b in bindings]
        logger.debug(f'Found {len(self._repositories)} repositories on {self.url}')
        return self._repositories

    @property
    def repositories(self) -> list[RepositoryDescriptor]:
        """Repositories on the server, in listing order. Fetched on first
        access, then cached."""
        if self._repositories is None:
            with self._repositories_lock:
                if self._repositories is None:
                    self.query_repositories()
        return self._repositories

    def repository(self, repository_id: str) -> Optional['RepositoryClient']:
        """Get a client for the repository with the given id. If more than
        one repository has that id, the first one in the listing is used.
        Returns `None` if there is no such repository."""
        for descriptor in self.repositories:
            if descriptor.id == repository_id:
                return RepositoryClient(self, descriptor)
        return None

    def is_reachable(self) -> bool:
        """Returns `True` if the server answers a protocol version request,
        and `False` otherwise."""
        try:
            return self.get(self.url + 'protocol').ok
        except RuntimeError as e:
            logger.error(str(e))
            return False

    def test_connection(self):
        """Test the connection to the server using `is_reachable()`. If
        it returns false, raises a `ConnectionError`."""
        logger.info(f'Testing connection to {self.url}')
        if self.is_reachable():
            logger.info('Connection successful.')
        else:
            raise ConnectionError(f'Unable to connect to {self.url}')


class RepositoryClient:
    """Operations on a single repository. All requests go through the
    `Connection` the client was created from."""

    def __init__(self, connection: Connection, descriptor: RepositoryDescriptor):
        self.connection = connection
        self.descriptor = descriptor

    def __str__(self):
        return self.uri

    @property
    def uri(self) -> str:
        return self.descriptor.uri

    @property
    def id(self) -> str:
        return self.descriptor.id

    @property
    def title(self) -> str:
        return self.descriptor.title

    @property
    def writable(self) -> bool:
        return self.descriptor.writable

    @property
    def readable(self) -> bool:
        return self.descriptor.readable

    @property
    def statements_url(self) -> str:
        return self.uri + '/statements'

    def namespace_url(self, prefix: str) -> str:
        return self.uri + '/namespaces/' + quote(prefix, safe='')

    def query(self, query: str, options: QueryOptions = None, **kwargs) -> Union[str, bytes]:
        """Run a query and return the response body as-is. Keyword arguments
        override the corresponding fields of `options`:

        ```python
        repo.query(sparql, result_format=ResultFormat.XML, method='POST')
        ```

        The body is text, except for the `BINARY` result format, which is
        returned as bytes.

        Raises a `ProtocolError` if the response status is not 200 OK."""
        options = dataclasses.replace(options or QueryOptions(), **kwargs)
        logger.debug(f'Querying {self.uri}:\n{query}\nOptions: {options}')

        fields = options.to_fields(query)
        headers = {'Accept': media_type(options.result_format)}

        if options.method.upper() == 'GET':
            response = self.connection.get(self.uri, params=fields, headers=headers)
        elif options.method.upper() == 'POST':
            headers['Content-Type'] = FORM_URLENCODED
            response = self.connection.post(self.uri, data=fields, headers=headers)
        else:
            raise LocalValidationError(f'Unsupported query method "{options.method}"; must be GET or POST')

        if response.status_code != HTTPStatus.OK:
            logger.error(f'Query on {self.uri} failed: {response.status_code} {response.reason}')
            raise ProtocolError(response)

        return body_of(response, options.result_format)

    def query_graph(self, query: str, options: QueryOptions = None, **kwargs) -> Graph:
        """Run a graph query (`CONSTRUCT` or `DESCRIBE`) and parse the result
        into an rdflib `Graph`. The result format defaults to N-Triples."""
        kwargs.setdefault('result_format', ResultFormat.NTRIPLES)
        options = dataclasses.replace(options or QueryOptions(), **kwargs)
        text = self.query(query, options)
        return parse_graph(text, options.result_format)

    def get_statements(
            self,
            statement_filter: Union[StatementFilter, Mapping[str, Any]] = None,
            result_format: FormatLike = ResultFormat.TURTLE,
    ) -> Union[str, bytes]:
        """Get statements from the repository. Without a filter, this returns
        *all* statements in the repository.

        Raises a `ProtocolError` if the response status is not 200 OK."""
        statement_filter = get_filter(statement_filter)
        response = self.connection.get(
            self.statements_url,
            params=statement_filter.to_params(),
            headers={'Accept': media_type(result_format)},
        )
        if response.status_code != HTTPStatus.OK:
            logger.error(f'Unable to get statements from {self.uri}')
            raise ProtocolError(response)
        return body_of(response, result_format)

    def get_graph(self, statement_filter: Union[StatementFilter, Mapping[str, Any]] = None) -> Graph:
        """Get statements from the repository as an rdflib `Graph`."""
        text = self.get_statements(statement_filter, result_format=ResultFormat.NTRIPLES)
        return parse_graph(text, ResultFormat.NTRIPLES)

    def delete_statements(
            self,
            statement_filter: Union[StatementFilter, Mapping[str, Any]] = None,
            safety: bool = True,
    ) -> None:
        """Delete the statements selected by `statement_filter`.

        A filter without a subject, predicate, or object would delete *all*
        statements in the repository (or in the given contexts). This is refused
        with a `DeleteSafetyError`, and no request is sent, unless `safety`
        is `False`.

        Raises a `ProtocolError` if the response status is not 204 No Content."""
        statement_filter = get_filter(statement_filter)
        if safety and not statement_filter.has_pattern:
            raise DeleteSafetyError(
                'You asked to delete all statements in the repository. '
                'Either give a subject/predicate/object qualifier, or set safety=False'
            )
        response = self.connection.delete(self.statements_url, params=statement_filter.to_params())
        if response.status_code != HTTPStatus.NO_CONTENT:
            logger.error(f'Unable to delete statements from {self.uri}')
            raise ProtocolError(response)

    def delete_all_statements(self) -> None:
        """Delete every statement in the repository."""
        self.delete_statements(None, safety=False)

    def add_statements(
            self,
            data: Union[str, bytes],
            data_format: FormatLike = ResultFormat.TURTLE,
            contexts: Optional[Union[Term, list[Term]]] = None,
            base_uri: Optional[str] = None,
    ) -> None:
        """Add RDF data to the repository. `contexts`, if given, overrides
        any contexts in the data; `base_uri` resolves relative URIs in it.

        Raises a `ProtocolError` if the response status is not 204 No Content."""
        response = self.connection.post(
            self.statements_url,
            params=upload_params(contexts, base_uri),
            headers={'Content-Type': media_type(data_format)},
            data=data,
        )
        if response.status_code != HTTPStatus.NO_CONTENT:
            logger.error(f'Unable to add statements to {self.uri}')
            raise ProtocolError(response)

    def add_graph(self, graph: Graph, contexts: Optional[Union[Term, list[Term]]] = None) -> None:
        """Add the triples of an rdflib `Graph` to the repository."""
        self.add_statements(
            graph.serialize(format='nt'),
            data_format=ResultFormat.NTRIPLES,
            contexts=contexts,
        )

    def replace_statements(
            self,
            data: Union[str, bytes],
            data_format: FormatLike = ResultFormat.N3,
            contexts: Optional[Union[Term, list[Term]]] = None,
            base_uri: Optional[str] = None,
    ) -> None:
        """Replace the statements in the repository (or in `contexts`) with
        the given RDF data.

        Raises a `ProtocolError` if the response status is not 204 No Content."""
        response = self.connection.put(
            self.statements_url,
            params=upload_params(contexts, base_uri),
            headers={'Content-Type': media_type(data_format)},
            data=data,
        )
        if response.status_code != HTTPStatus.NO_CONTENT:
            logger.error(f'Unable to replace statements in {self.uri}')
            raise ProtocolError(response)

    def get_listing(self, path: str, result_format: FormatLike = ResultFormat.JSON) -> Response:
        response = self.connection.get(self.uri + path, headers={'Accept': media_type(result_format)})
        if response.status_code != HTTPStatus.OK:
            logger.error(f'Unable to get {path} listing of {self.uri}')
            raise ProtocolError(response)
        return response

    def raw_contexts(self, result_format: FormatLike = ResultFormat.JSON) -> Union[str, bytes]:
        """Returns the context listing, unprocessed. JSON by default, though
        XML and binary are also available."""
        return body_of(self.get_listing('/contexts', result_format), result_format)

    def contexts(self) -> list[str]:
        """Returns the ids of the contexts in the repository, in server order."""
        return [b['contextID']['value'] for b in get_bindings(self.get_listing('/contexts'))]

    def raw_namespaces(self, result_format: FormatLike = ResultFormat.JSON) -> Union[str, bytes]:
        """Returns the namespace listing, unprocessed. JSON by default, though
        XML and binary are also available."""
        return body_of(self.get_listing('/namespaces', result_format), result_format)

    def namespaces(self) -> dict[str, str]:
        """Returns a dictionary mapping prefixes to namespace URIs."""
        return {b['prefix']['value']: b['namespace']['value'] for b in get_bindings(self.get_listing('/namespaces'))}

    def namespace(self, prefix: str) -> Optional[str]:
        """Returns the namespace URI for `prefix`, or `None` if the prefix
        is not defined."""
        response = self.connection.get(self.namespace_url(prefix))
        if response.status_code == HTTPStatus.NOT_FOUND:
            return None
        if response.status_code != HTTPStatus.OK:
            raise ProtocolError(response)
        # some servers answer 200 OK with an error message instead of a 404
        text = text_of(response)
        if UNDEFINED_PREFIX.match(text):
            return None
        return text

    def set_namespace(self, prefix: str, namespace: str) -> None:
        """Bind `prefix` to the `namespace` URI."""
        response = self.connection.put(
            self.namespace_url(prefix),
            headers={'Content-Type': 'text/plain'},
            data=namespace.encode('utf-8'),
        )
        if response.status_code != HTTPStatus.NO_CONTENT:
            raise ProtocolError(response)

    def delete_namespace(self, prefix: str) -> None:
        response = self.connection.delete(self.namespace_url(prefix))
        if response.status_code != HTTPStatus.NO_CONTENT:
            raise ProtocolError(response)

    def delete_all_namespaces(self) -> None:
        response = self.connection.delete(self.uri + '/namespaces')
        if response.status_code != HTTPStatus.NO_CONTENT:
            raise ProtocolError(response)

    def size(self, contexts: Optional[Union[Term, list[Term]]] = None) -> int:
        """Returns the number of statements in the repository, or in the
        given contexts."""
        response = self.connection.get(self.uri + '/size', params=context_params(contexts))
        if response.status_code != HTTPStatus.OK:
            raise ProtocolError(response)
        return int(response.text.strip())


def upload_params(contexts, base_uri: Optional[Term]) -> list[tuple[str, str]]:
    params = context_params(contexts)
    if base_uri is not None:
        base_uri = to_ntriples(base_uri)
        # the server expects an N-Triples encoded URI
        if not base_uri.startswith('<'):
            base_uri = f'<{base_uri}>'
        params.append(('baseURI', base_uri))
    return params


def body_of(response: Response, result_format: FormatLike) -> Union[str, bytes]:
    result_format = normalize_format(result_format)
    if isinstance(result_format, ResultFormat) and result_format.is_binary:
        return response.content
    return text_of(response)


def get_bindings(response: Response) -> list[dict[str, Any]]:
    """Extract the `results.bindings` list from a SPARQL-results-JSON response."""
    return response.json()['results']['bindings']


def parse_graph(text: str, result_format: FormatLike) -> Graph:
    result_format = normalize_format(result_format)
    if isinstance(result_format, ResultFormat) and result_format.rdflib_format is not None:
        rdf_format = result_format.rdflib_format
    else:
        rdf_format = media_type(result_format)
    graph = Graph()
    graph.parse(data=text, format=rdf_format)
    return graph
