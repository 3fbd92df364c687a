import copy
import logging
import logging.config
import os
import sys
from argparse import ArgumentParser, FileType
from datetime import datetime
from importlib import import_module
from pkgutil import iter_modules

import yaml

from sesame.cli import commands
from sesame.cli.context import SesameContext
from sesame.client import ProtocolError, SesameError
from sesame.utils import DEFAULT_LOGGING_OPTIONS, FILE_HANDLER_OPTIONS, envsubst

logger = logging.getLogger(__name__)
now = datetime.now().strftime('%Y%m%d%H%M%S')


def load_commands(subparsers):
    # load all defined subcommands from the sesame.cli.commands package, using
    # introspection
    command_modules = {}
    for finder, name, ispkg in iter_modules(commands.__path__):
        module = import_module(commands.__name__ + '.' + name)
        if hasattr(module, 'configure_cli'):
            module.configure_cli(subparsers)
            command_modules[name] = module
    return command_modules


def get_parser() -> tuple[ArgumentParser, dict]:
    parser = ArgumentParser(
        prog='sesame',
        description='Command-line client for OpenRDF Sesame repositories.'
    )
    parser.set_defaults(cmd_name=None)

    common_required = parser.add_mutually_exclusive_group(required=True)
    common_required.add_argument(
        '-c', '--config',
        help='Path to configuration file.',
        action='store',
        dest='config_file',
        type=FileType('r')
    )
    common_required.add_argument(
        '-V', '--version',
        help='Print version and exit.',
        action='version',
        version=SesameContext().version
    )

    parser.add_argument(
        '-v', '--verbose',
        help='increase the verbosity of the status output',
        action='store_true'
    )
    parser.add_argument(
        '-q', '--quiet',
        help='decrease the verbosity of the status output',
        action='store_true'
    )
    parser.add_argument(
        '-r', '--repository',
        help='id of the repository to operate on; overrides REPOSITORY in the configuration file',
        action='store'
    )

    subparsers = parser.add_subparsers(title='commands')

    command_modules = load_commands(subparsers)
    return parser, command_modules


def configure_logging(config: dict, args) -> None:
    server_config = config.get('SERVER', {})
    if 'LOGGING_CONFIG' in server_config:
        with open(server_config.get('LOGGING_CONFIG'), 'r') as logging_config_file:
            logging_options = yaml.safe_load(logging_config_file)
    else:
        logging_options = copy.deepcopy(DEFAULT_LOGGING_OPTIONS)

        # log file configuration
        log_dirname = server_config.get('LOG_DIR')
        if log_dirname is not None:
            if not os.path.isdir(log_dirname):
                os.makedirs(log_dirname)
            log_filename = 'sesame.{0}.{1}.log'.format(args.cmd_name, now)
            logging_options['handlers']['file'] = {
                **FILE_HANDLER_OPTIONS,
                'filename': os.path.join(log_dirname, log_filename),
            }
            for logger_name in ('__main__', 'sesame'):
                logging_options['loggers'][logger_name]['handlers'].append('file')

    # manipulate console verbosity
    if args.verbose:
        logging_options['handlers']['console']['level'] = 'DEBUG'
    elif args.quiet:
        logging_options['handlers']['console']['level'] = 'WARNING'

    logging.config.dictConfig(logging_options)


def main(argv=None):
    """Parse args and handle options."""
    parser, command_modules = get_parser()

    # parse command line args
    args = parser.parse_args(argv)

    # if no subcommand was selected, display the help
    if args.cmd_name is None:
        parser.print_help()
        sys.exit(0)

    with args.config_file:
        config = envsubst(yaml.safe_load(args.config_file)) or {}
    configure_logging(config, args)

    context = SesameContext(config=config, args=args)
    command_module = command_modules[args.cmd_name]

    # dispatch to the selected subcommand
    try:
        if not hasattr(command_module, 'Command'):
            raise RuntimeError(f'Unable to execute command {args.cmd_name}')

        logger.debug(f'Loaded configuration from {args.config_file.name}')
        command = command_module.Command(context=context)
        command(args)
    except (RuntimeError, SesameError) as e:
        # something failed, exit with non-zero status
        logger.error(str(e))
        if isinstance(e, ProtocolError) and e.body:
            logger.error(e.body)
        sys.exit(1)
    except KeyboardInterrupt:
        # aborted due to Ctrl+C
        sys.exit(2)


if __name__ == "__main__":
    main()
