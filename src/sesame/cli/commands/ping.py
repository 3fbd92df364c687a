from requests.exceptions import ConnectionError

from sesame.cli.commands import BaseCommand


def configure_cli(subparsers):
    parser_ping = subparsers.add_parser(
        name='ping',
        description='Check connection to the server and print its protocol version'
    )
    parser_ping.set_defaults(cmd_name='ping')


class Command(BaseCommand):
    def __call__(self, *args, **kwargs):
        connection = self.context.connection
        try:
            connection.test_connection()
        except ConnectionError as e:
            raise RuntimeError(str(e)) from e
        self.result = connection.protocol_version
        print(f'{connection.url} protocol version {self.result}')
