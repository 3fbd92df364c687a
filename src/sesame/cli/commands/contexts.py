from argparse import Namespace

from sesame.cli.commands import BaseCommand


def configure_cli(subparsers):
    parser = subparsers.add_parser(
        name='contexts',
        description='List the contexts in the repository'
    )
    parser.set_defaults(cmd_name='contexts')


class Command(BaseCommand):
    def __call__(self, args: Namespace):
        self.result = self.context.repo.contexts()
        for context_id in self.result:
            print(context_id)
