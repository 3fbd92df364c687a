import logging
from argparse import Namespace

from sesame.cli.commands import BaseCommand
from sesame.cli.commands.export import add_filter_arguments, get_statement_filter

logger = logging.getLogger(__name__)


def configure_cli(subparsers):
    parser = subparsers.add_parser(
        name='delete',
        aliases=['rm'],
        description='Delete statements from the repository'
    )
    add_filter_arguments(parser)
    parser.add_argument(
        '--all',
        help='allow deleting every statement (in the given contexts, if any) when no subject, predicate, or object is given',
        dest='delete_all',
        action='store_true'
    )
    parser.set_defaults(cmd_name='delete')


class Command(BaseCommand):
    def __call__(self, args: Namespace):
        repo = self.context.repo
        statement_filter = get_statement_filter(args)
        before = repo.size()
        repo.delete_statements(statement_filter, safety=not args.delete_all)
        self.result = before - repo.size()
        logger.info(f'Deleted {self.result} statement(s) from {repo}')
