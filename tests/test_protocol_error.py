from unittest.mock import MagicMock

import pytest
from requests import Response

from sesame.client import ProtocolError, SesameError


def test_protocol_error_str():
    response = MagicMock(spec=Response, status_code=404, reason='Not Found', headers={}, text='Unknown repository: foo')
    error = ProtocolError(response)
    assert str(error) == '404 Not Found'
    assert error.status_code == 404
    assert error.body == 'Unknown repository: foo'
    assert isinstance(error, SesameError)


def test_protocol_error_default_reason():
    response = MagicMock(spec=Response, status_code=409, reason=None, text='')
    assert ProtocolError(response).reason == 'Conflict'


class ServiceUnavailable(Response):
    def __init__(self):
        super().__init__()
        self.status_code = 503
        self.reason = None
        self._content = b'Server is starting up'


def test_connection_raises_protocol_error(connection, monkeypatch_request):
    monkeypatch_request(ServiceUnavailable)
    with pytest.raises(ProtocolError) as e:
        connection.query_version()
    assert str(e.value) == '503 Service Unavailable'
    assert e.value.body == 'Server is starting up'


class OriginError(Response):
    def __init__(self):
        super().__init__()
        self.status_code = 599
        self.reason = ''
        self._content = b''


def test_nonstandard_status_raises_protocol_error(repo, monkeypatch_request):
    monkeypatch_request(OriginError)
    with pytest.raises(ProtocolError) as e:
        repo.size()
    assert e.value.status_code == 599
    assert e.value.reason == ''
    assert str(e.value) == '599'
