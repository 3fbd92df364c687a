from argparse import Namespace
from dataclasses import dataclass
from importlib.metadata import version, PackageNotFoundError
from typing import Any

from sesame.client import Connection, RepositoryClient
from sesame.client.auth import get_authenticator, get_client_cert


@dataclass
class SesameContext:
    """Lazily builds the `Connection` and `RepositoryClient` for a command
    from the `SERVER` section of the configuration and the parsed command
    line arguments."""
    config: dict[str, Any] = None
    args: Namespace = None
    _connection: Connection = None
    _repo: RepositoryClient = None

    @property
    def version(self) -> str:
        try:
            return version('sesame-client')
        except PackageNotFoundError:
            return 'unknown'

    @property
    def server_config(self) -> dict[str, Any]:
        return (self.config or {}).get('SERVER', {})

    @property
    def connection(self) -> Connection:
        if self._connection is None:
            server_config = self.server_config
            try:
                self._connection = Connection(
                    url=server_config['URL'],
                    auth=get_authenticator(server_config),
                    server_cert=server_config.get('SERVER_CERT'),
                    client_cert=get_client_cert(server_config),
                    ua_string=f'sesame-client/{self.version}',
                    timeout=server_config.get('TIMEOUT'),
                )
            except KeyError as e:
                raise RuntimeError(f"Missing configuration key {e} in section 'SERVER'")

        return self._connection

    @property
    def repository_id(self) -> str:
        repository_id = getattr(self.args, 'repository', None) or self.server_config.get('REPOSITORY')
        if repository_id is None:
            raise RuntimeError("No repository given; use --repository or set REPOSITORY in section 'SERVER'")
        return repository_id

    @property
    def repo(self) -> RepositoryClient:
        if self._repo is None:
            repo = self.connection.repository(self.repository_id)
            if repo is None:
                raise RuntimeError(f'Repository "{self.repository_id}" not found on {self.connection.url}')
            self._repo = repo
        return self._repo
