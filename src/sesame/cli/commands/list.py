import logging
from argparse import Namespace

from sesame.cli.commands import BaseCommand

logger = logging.getLogger(__name__)


def configure_cli(subparsers):
    parser = subparsers.add_parser(
        name='list',
        aliases=['ls'],
        description='List repositories on the server'
    )
    # long mode to print more than just the ids (name modeled after ls -l)
    parser.add_argument(
        '-l', '--long',
        help='Display the title, access flags, and URI of each repository',
        action='store_true'
    )
    parser.set_defaults(cmd_name='list')


def flags(descriptor) -> str:
    return ('r' if descriptor.readable else '-') + ('w' if descriptor.writable else '-')


class Command(BaseCommand):
    def __call__(self, args: Namespace):
        self.result = self.context.connection.repositories
        for descriptor in self.result:
            if args.long:
                print(f'{descriptor.id} {flags(descriptor)} {descriptor.uri} {descriptor.title}')
            else:
                print(descriptor.id)
