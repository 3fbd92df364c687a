from enum import Enum
from typing import Optional, Union


class ResultFormat(Enum):
    """MIME types the server understands for results and uploaded data.

    The valid result formats depend on the kind of query: variable binding
    formats for tuple queries, RDF formats for graph queries, and boolean
    formats for boolean queries (`XML` is valid for those, too).

    ```pycon
    >>> ResultFormat.TURTLE.media_type
    'application/x-turtle'

    >>> str(ResultFormat.JSON)
    'application/sparql-results+json'
    ```
    """

    # variable binding formats
    XML = 'application/sparql-results+xml'
    JSON = 'application/sparql-results+json'
    BINARY = 'application/x-binary-rdf-results-table'

    # RDF formats
    RDFXML = 'application/rdf+xml'
    NTRIPLES = 'text/plain'
    TURTLE = 'application/x-turtle'
    N3 = 'text/rdf+n3'
    TRIX = 'application/trix'
    TRIG = 'application/x-trig'

    # boolean formats
    PLAIN_TEXT_BOOLEAN = 'text/boolean'

    def __str__(self):
        return self.value

    @property
    def media_type(self) -> str:
        return self.value

    @property
    def is_binary(self) -> bool:
        """Whether response bodies in this format should be handled as bytes."""
        return self is ResultFormat.BINARY

    @property
    def rdflib_format(self) -> Optional[str]:
        """Name of the rdflib parser/serializer for this format, or `None`
        if it is not an RDF serialization."""
        return _RDFLIB_FORMATS.get(self)


_RDFLIB_FORMATS = {
    ResultFormat.RDFXML: 'xml',
    ResultFormat.NTRIPLES: 'nt',
    ResultFormat.TURTLE: 'turtle',
    ResultFormat.N3: 'n3',
    ResultFormat.TRIX: 'trix',
    ResultFormat.TRIG: 'trig',
}

FormatLike = Union[ResultFormat, str]


def media_type(result_format: FormatLike) -> str:
    """Return the MIME type string for a `ResultFormat`. Any other value is
    assumed to already be a MIME type and is returned as a string."""
    if isinstance(result_format, ResultFormat):
        return result_format.media_type
    return str(result_format)


def get_format(name: str) -> ResultFormat:
    """Look up a `ResultFormat` by member name (case-insensitive) or by MIME type.

    Raises `ValueError` if there is no such format."""
    try:
        return ResultFormat[name.upper().replace('-', '_')]
    except KeyError:
        pass
    try:
        return ResultFormat(name)
    except ValueError:
        raise ValueError(f'Unknown result format "{name}"')


def normalize_format(result_format: FormatLike) -> FormatLike:
    """Return the `ResultFormat` member for a MIME type string, so that a
    format given either way is handled the same. Unknown MIME types are
    returned unchanged."""
    if isinstance(result_format, ResultFormat):
        return result_format
    try:
        return ResultFormat(str(result_format))
    except ValueError:
        return result_format
