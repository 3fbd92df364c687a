import logging
from argparse import Namespace

from sesame.cli.commands import BaseCommand
from sesame.client import StatementFilter
from sesame.client.formats import get_format
from sesame.utils import context_term, ntriples_term

logger = logging.getLogger(__name__)


def add_filter_arguments(parser):
    parser.add_argument(
        '-s', '--subject',
        help='only statements with this N-Triples encoded subject',
        type=ntriples_term,
        action='store'
    )
    parser.add_argument(
        '-p', '--predicate',
        help='only statements with this N-Triples encoded predicate',
        type=ntriples_term,
        action='store'
    )
    parser.add_argument(
        '-o', '--object',
        help='only statements with this N-Triples encoded object',
        type=ntriples_term,
        action='store'
    )
    parser.add_argument(
        '--context',
        help='only statements in this context ("null" for statements without one); may be repeated',
        dest='contexts',
        type=context_term,
        action='append'
    )


def get_statement_filter(args: Namespace, **kwargs) -> StatementFilter:
    return StatementFilter(
        subject=args.subject,
        predicate=args.predicate,
        object=args.object,
        contexts=args.contexts,
        **kwargs,
    )


def configure_cli(subparsers):
    parser = subparsers.add_parser(
        name='export',
        description='Print statements from the repository'
    )
    add_filter_arguments(parser)
    parser.add_argument(
        '--format',
        help='RDF format name or MIME type; defaults to the FORMAT option in the EXPORT configuration section, or "turtle"',
        dest='result_format',
        type=get_format,
        action='store'
    )
    parser.add_argument(
        '--no-infer',
        help='exclude inferred statements',
        dest='infer',
        action='store_false'
    )
    parser.set_defaults(cmd_name='export')


class Command(BaseCommand):
    def __call__(self, args: Namespace):
        result_format = args.result_format or get_format(self.config.get('FORMAT', 'turtle'))
        statement_filter = get_statement_filter(args, infer=None if args.infer else False)
        logger.debug(f'Exporting statements matching {statement_filter}')
        self.result = self.context.repo.get_statements(statement_filter, result_format=result_format)
        print(self.result)
