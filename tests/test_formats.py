import pytest

from sesame.client.formats import ResultFormat, get_format, media_type, normalize_format


def test_result_format_media_types():
    assert ResultFormat.XML.media_type == 'application/sparql-results+xml'
    assert ResultFormat.JSON.media_type == 'application/sparql-results+json'
    assert ResultFormat.BINARY.media_type == 'application/x-binary-rdf-results-table'
    assert ResultFormat.RDFXML.media_type == 'application/rdf+xml'
    assert ResultFormat.NTRIPLES.media_type == 'text/plain'
    assert ResultFormat.TURTLE.media_type == 'application/x-turtle'
    assert ResultFormat.N3.media_type == 'text/rdf+n3'
    assert ResultFormat.TRIX.media_type == 'application/trix'
    assert ResultFormat.TRIG.media_type == 'application/x-trig'
    assert ResultFormat.PLAIN_TEXT_BOOLEAN.media_type == 'text/boolean'


def test_str_is_media_type():
    assert str(ResultFormat.TURTLE) == 'application/x-turtle'


def test_media_type_passes_strings_through():
    assert media_type(ResultFormat.N3) == 'text/rdf+n3'
    assert media_type('text/turtle') == 'text/turtle'


def test_rdflib_format():
    assert ResultFormat.TURTLE.rdflib_format == 'turtle'
    assert ResultFormat.NTRIPLES.rdflib_format == 'nt'
    assert ResultFormat.JSON.rdflib_format is None


def test_only_binary_is_binary():
    assert [f for f in ResultFormat if f.is_binary] == [ResultFormat.BINARY]


@pytest.mark.parametrize(
    ('name', 'expected'),
    [
        ('json', ResultFormat.JSON),
        ('Turtle', ResultFormat.TURTLE),
        ('plain-text-boolean', ResultFormat.PLAIN_TEXT_BOOLEAN),
        ('application/rdf+xml', ResultFormat.RDFXML),
    ]
)
def test_get_format(name, expected):
    assert get_format(name) is expected


def test_get_format_unknown():
    with pytest.raises(ValueError):
        get_format('application/x-unknown')


def test_normalize_format():
    assert normalize_format('application/x-binary-rdf-results-table') is ResultFormat.BINARY
    assert normalize_format(ResultFormat.TURTLE) is ResultFormat.TURTLE
    assert normalize_format('text/turtle') == 'text/turtle'
