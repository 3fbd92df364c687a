import logging
from argparse import FileType, Namespace

from sesame.cli.commands import BaseCommand
from sesame.client.formats import get_format, ResultFormat
from sesame.utils import context_term

logger = logging.getLogger(__name__)

# format guesses for the common file extensions
EXTENSIONS = {
    'ttl': ResultFormat.TURTLE,
    'nt': ResultFormat.NTRIPLES,
    'n3': ResultFormat.N3,
    'rdf': ResultFormat.RDFXML,
    'xml': ResultFormat.RDFXML,
    'trix': ResultFormat.TRIX,
    'trig': ResultFormat.TRIG,
}


def guess_format(filename: str) -> ResultFormat:
    extension = filename.rsplit('.', 1)[-1].lower() if '.' in filename else ''
    return EXTENSIONS.get(extension, ResultFormat.TURTLE)


def configure_cli(subparsers):
    parser = subparsers.add_parser(
        name='load',
        description='Add RDF data from files to the repository'
    )
    parser.add_argument(
        '--format',
        help='RDF format name or MIME type of the files; guessed from the file extension if not given',
        dest='data_format',
        type=get_format,
        action='store'
    )
    parser.add_argument(
        '--replace',
        help='replace the statements in the repository (or in the given contexts) instead of adding to them',
        action='store_true'
    )
    parser.add_argument(
        '--context',
        help='put the statements in this context; may be repeated',
        dest='contexts',
        type=context_term,
        action='append'
    )
    parser.add_argument(
        '--base-uri',
        help='resolve relative URIs in the data against this URI',
        dest='base_uri',
        action='store'
    )
    parser.add_argument(
        'files',
        help='RDF files to load ("-" for STDIN)',
        nargs='+',
        type=FileType('rb')
    )
    parser.set_defaults(cmd_name='load')


class Command(BaseCommand):
    def __call__(self, args: Namespace):
        repo = self.context.repo
        self.result = []
        for file in args.files:
            data_format = args.data_format or guess_format(file.name)
            logger.info(f'Loading {file.name} as {data_format}')
            with file:
                data = file.read()
            if args.replace:
                repo.replace_statements(data, data_format=data_format, contexts=args.contexts, base_uri=args.base_uri)
            else:
                repo.add_statements(data, data_format=data_format, contexts=args.contexts, base_uri=args.base_uri)
            self.result.append(file.name)
        logger.info(f'Repository {repo.id} now has {repo.size()} statement(s)')
