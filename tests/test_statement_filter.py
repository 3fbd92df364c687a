from rdflib import BNode, Literal, URIRef

from sesame.client import NULL_CONTEXT, StatementFilter, get_filter, to_ntriples


def test_empty_filter():
    statement_filter = StatementFilter()
    assert statement_filter.to_params() == []
    assert not statement_filter.has_pattern


def test_full_filter():
    statement_filter = StatementFilter(
        subject='<http://example.com/s>',
        predicate='<http://example.com/p>',
        object='"o"',
        contexts=['<http://example.com/g>', NULL_CONTEXT],
        infer=True,
    )
    assert statement_filter.has_pattern
    assert statement_filter.to_params() == [
        ('subj', '<http://example.com/s>'),
        ('pred', '<http://example.com/p>'),
        ('obj', '"o"'),
        ('context', '<http://example.com/g>'),
        ('context', 'null'),
        ('infer', 'true'),
    ]


def test_single_context():
    assert StatementFilter(contexts=NULL_CONTEXT).to_params() == [('context', 'null')]


def test_context_alone_is_not_a_pattern():
    assert not StatementFilter(contexts='<http://example.com/g>').has_pattern


def test_object_alone_is_a_pattern():
    assert StatementFilter(object='"foo"').has_pattern


def test_rdflib_terms():
    statement_filter = StatementFilter(
        subject=URIRef('http://example.com/s'),
        object=Literal('foo', lang='en'),
        contexts=URIRef('http://example.com/g'),
    )
    assert statement_filter.to_params() == [
        ('subj', '<http://example.com/s>'),
        ('obj', '"foo"@en'),
        ('context', '<http://example.com/g>'),
    ]


def test_from_mapping_wire_keys():
    statement_filter = StatementFilter.from_mapping({'subj': '<a>', 'pred': '<b>', 'obj': '<c>', 'context': 'null'})
    assert statement_filter == StatementFilter(subject='<a>', predicate='<b>', object='<c>', contexts='null')


def test_from_mapping_field_names():
    assert StatementFilter.from_mapping({'predicate': '<b>', 'infer': False}) == StatementFilter(
        predicate='<b>',
        infer=False,
    )


def test_from_mapping_drops_unknown_keys():
    statement_filter = StatementFilter.from_mapping({'subj': '<a>', 'result_type': 'text/plain', 'limit': 5})
    assert statement_filter == StatementFilter(subject='<a>')


def test_get_filter():
    statement_filter = StatementFilter(subject='<a>')
    assert get_filter(statement_filter) is statement_filter
    assert get_filter(None) == StatementFilter()
    assert get_filter({'obj': '<c>'}) == StatementFilter(object='<c>')


def test_to_ntriples():
    assert to_ntriples('<http://example.com/a>') == '<http://example.com/a>'
    assert to_ntriples(URIRef('http://example.com/a')) == '<http://example.com/a>'
    assert to_ntriples(BNode('b1')) == '_:b1'
