import logging
from argparse import Namespace

from sesame.cli.commands import BaseCommand

logger = logging.getLogger(__name__)


def configure_cli(subparsers):
    parser = subparsers.add_parser(
        name='namespace',
        aliases=['ns'],
        description=(
            'Manage namespace prefixes. With no arguments, lists all prefixes. '
            'With PREFIX, prints its namespace. With PREFIX and URI, binds the prefix.'
        )
    )
    parser.add_argument(
        '-d', '--delete',
        help='delete PREFIX, or every prefix if none is given',
        action='store_true'
    )
    parser.add_argument(
        'prefix',
        nargs='?',
        help='namespace prefix'
    )
    parser.add_argument(
        'uri',
        nargs='?',
        help='namespace URI to bind to PREFIX'
    )
    parser.set_defaults(cmd_name='namespace')


class Command(BaseCommand):
    def __call__(self, args: Namespace):
        repo = self.context.repo

        if args.delete:
            if args.uri is not None:
                raise RuntimeError('Cannot give a namespace URI when deleting')
            if args.prefix is None:
                repo.delete_all_namespaces()
                logger.info(f'Deleted all namespaces from {repo}')
            else:
                repo.delete_namespace(args.prefix)
                logger.info(f'Deleted namespace prefix "{args.prefix}" from {repo}')
        elif args.prefix is None:
            self.result = repo.namespaces()
            for prefix, namespace in sorted(self.result.items()):
                print(f'{prefix}: {namespace}')
        elif args.uri is None:
            self.result = repo.namespace(args.prefix)
            if self.result is None:
                raise RuntimeError(f'Namespace prefix "{args.prefix}" is not defined')
            print(self.result)
        else:
            repo.set_namespace(args.prefix, args.uri)
            self.result = args.uri
            logger.info(f'Set namespace prefix "{args.prefix}" to {args.uri}')
