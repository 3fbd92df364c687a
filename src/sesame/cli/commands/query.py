import logging
import sys
from argparse import FileType, Namespace

from sesame.cli.commands import BaseCommand
from sesame.client import QueryOptions
from sesame.client.formats import get_format, ResultFormat
from sesame.utils import parse_binding

logger = logging.getLogger(__name__)


def configure_cli(subparsers):
    parser = subparsers.add_parser(
        name='query',
        description='Run a SPARQL (or other) query against the repository'
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument(
        '-f', '--file',
        help='read the query from this file ("-" for STDIN)',
        dest='query_file',
        type=FileType('r'),
        action='store'
    )
    source.add_argument(
        'query',
        help='query text',
        nargs='?'
    )
    parser.add_argument(
        '--format',
        help=(
            'result format, as a format name (e.g. "json", "xml", "turtle") or a MIME type; '
            'defaults to the FORMAT option in the QUERY configuration section, or "json"'
        ),
        dest='result_format',
        type=get_format,
        action='store'
    )
    parser.add_argument(
        '--post',
        help='send the query in a POST request body instead of a GET query string',
        action='store_true'
    )
    parser.add_argument(
        '--language',
        help='query language (default: %(default)s)',
        dest='query_language',
        default='sparql',
        action='store'
    )
    parser.add_argument(
        '--no-infer',
        help='exclude inferred statements',
        dest='infer',
        action='store_false'
    )
    parser.add_argument(
        '--bind',
        help='bind the variable NAME to the N-Triples encoded VALUE; may be repeated',
        metavar='NAME=VALUE',
        dest='bindings',
        type=parse_binding,
        action='append',
        default=[]
    )
    parser.set_defaults(cmd_name='query')


class Command(BaseCommand):
    def __call__(self, args: Namespace):
        if args.query_file is not None:
            query = args.query_file.read()
        else:
            query = args.query

        result_format = args.result_format or get_format(self.config.get('FORMAT', 'json'))
        options = QueryOptions(
            result_format=result_format,
            method='POST' if args.post else 'GET',
            query_language=args.query_language,
            infer=args.infer,
            variable_bindings=dict(args.bindings),
        )
        self.result = self.context.repo.query(query, options)
        if isinstance(result_format, ResultFormat) and result_format.is_binary:
            sys.stdout.buffer.write(self.result)
        else:
            print(self.result)
