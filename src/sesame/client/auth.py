from typing import Mapping, Any, Optional

from requests.auth import AuthBase, HTTPBasicAuth
from requests_jwtauth import HTTPBearerAuth, JWTSecretAuth


def get_authenticator(config: Mapping[str, Any]) -> Optional[AuthBase]:
    """Choose an authenticator from the keys present in a `SERVER`
    configuration section, in this order of preference:

    1. `AUTH_TOKEN`: bearer token
    2. `JWT_SECRET`: signs a fresh bearer token for each request
    3. `SESAME_USER` and `SESAME_PASSWORD`: HTTP Basic

    Returns `None` if none of these are configured. A TLS client certificate
    is not an authenticator; see `get_client_cert()`."""
    if 'AUTH_TOKEN' in config:
        return HTTPBearerAuth(token=config['AUTH_TOKEN'])
    elif 'JWT_SECRET' in config:
        return JWTSecretAuth(
            secret=config['JWT_SECRET'],
            claims={
                'sub': config.get('JWT_SUBJECT', 'sesame-client'),
                'iss': 'sesame-client',
            }
        )
    elif 'SESAME_USER' in config and 'SESAME_PASSWORD' in config:
        return HTTPBasicAuth(
            username=config['SESAME_USER'],
            password=config['SESAME_PASSWORD'],
        )
    else:
        return None


def get_client_cert(config: Mapping[str, Any]) -> Optional[tuple[str, str]]:
    """Returns the `(CLIENT_CERT, CLIENT_KEY)` pair for the session's `cert`
    setting, or `None` unless both are configured."""
    if 'CLIENT_CERT' in config and 'CLIENT_KEY' in config:
        return config['CLIENT_CERT'], config['CLIENT_KEY']
    return None
