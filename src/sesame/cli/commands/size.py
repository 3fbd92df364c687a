from argparse import Namespace

from sesame.cli.commands import BaseCommand
from sesame.utils import context_term


def configure_cli(subparsers):
    parser = subparsers.add_parser(
        name='size',
        description='Print the number of statements in the repository'
    )
    parser.add_argument(
        '--context',
        help='only count statements in this context; may be repeated',
        dest='contexts',
        type=context_term,
        action='append'
    )
    parser.set_defaults(cmd_name='size')


class Command(BaseCommand):
    def __call__(self, args: Namespace):
        self.result = self.context.repo.size(contexts=args.contexts)
        print(self.result)
