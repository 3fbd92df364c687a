from sesame.client import Connection, SessionHeaderAttribute
from helpers import SERVER_URL


def test_ua_string_lifecycle():
    connection = Connection(SERVER_URL)
    default_agent = connection.session.headers['User-Agent']
    assert connection.ua_string == default_agent

    connection.ua_string = 'sesame-client/1.0.0'
    assert connection.session.headers['User-Agent'] == 'sesame-client/1.0.0'
    assert connection.ua_string == 'sesame-client/1.0.0'

    del connection.ua_string
    assert 'User-Agent' not in connection.session.headers
    assert connection.ua_string is None


def test_none_leaves_requests_default():
    connection = Connection(SERVER_URL, ua_string=None)
    assert connection.session.headers['User-Agent'].startswith('python-requests/')


def test_deleting_missing_header_is_harmless():
    connection = Connection(SERVER_URL)
    del connection.ua_string
    del connection.ua_string
    assert connection.ua_string is None


def test_descriptor_on_class():
    assert isinstance(Connection.ua_string, SessionHeaderAttribute)
    assert Connection.ua_string.header_name == 'User-Agent'
