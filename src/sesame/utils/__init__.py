import logging
import os
from argparse import ArgumentTypeError
from typing import Mapping

from rdflib import URIRef
from rdflib.util import from_n3

from sesame.client import NULL_CONTEXT

DEFAULT_LOGGING_OPTIONS = {
    'version': 1,
    'formatters': {
        'full': {
            'format': '%(levelname)s|%(asctime)s|%(threadName)s|%(name)s|%(message)s'
        },
        'messageonly': {
            'format': '%(message)s'
        }
    },
    'handlers': {
        'console': {
            'class': 'logging.StreamHandler',
            'level': 'INFO',
            'formatter': 'messageonly',
            'stream': 'ext://sys.stderr'
        },
    },
    'loggers': {
        '__main__': {
            'level': 'DEBUG',
            'handlers': ['console'],
            'propagate': False
        },
        'sesame': {
            'level': 'DEBUG',
            'handlers': ['console'],
            'propagate': False
        },
        # urllib3 logs every connection at DEBUG
        'urllib3': {
            'level': 'WARNING',
        },
    },
    'root': {
        'level': 'DEBUG'
    }
}

FILE_HANDLER_OPTIONS = {
    'class': 'logging.FileHandler',
    'level': 'DEBUG',
    'formatter': 'full'
}

logger = logging.getLogger(__name__)


def envsubst(value: str | list | dict, env: Mapping[str, str] = None) -> str | list | dict:
    """
    Recursively replace `${VAR_NAME}` placeholders in value with the values of the
    corresponding keys of env. If env is not given, it defaults to the environment
    variables in os.environ.

    Any placeholders that do not have a corresponding key in the env dictionary
    are left as is.

    :param value: String, list, or dictionary to search for `${VAR_NAME}` placeholders.
    :param env: Dictionary of values to use as replacements. If not given, defaults
        to `os.environ`.
    :return: The value with placeholders replaced; lists and dictionaries are
        copied, with `envsubst()` applied to each item.
    """
    if env is None:
        env = os.environ
    if isinstance(value, str):
        if '${' in value:
            try:
                return value.replace('${', '{').format(**env)
            except KeyError as e:
                missing_key = str(e.args[0])
                logger.warning(f'Environment variable ${{{missing_key}}} not found')
                # for a missing key, just return the string without substitution
                return envsubst(value, {missing_key: f'${{{missing_key}}}', **env})
        else:
            return value
    elif isinstance(value, list):
        return [envsubst(v, env) for v in value]
    elif isinstance(value, dict):
        return {k: envsubst(v, env) for k, v in value.items()}
    else:
        return value


def ntriples_term(arg: str) -> str:
    """Validate a command-line argument as an N-Triples encoded term and
    return it in canonical form. Bare `http://` or `https://` URIs are
    accepted and wrapped in angle brackets. The bare word `null` is
    rejected; it names the null context, so only `context_term()` accepts it.

    ```pycon
    >>> ntriples_term('http://example.com/foo')
    '<http://example.com/foo>'

    >>> ntriples_term('"bar"@en')
    '"bar"@en'
    ```

    Raises `ArgumentTypeError` if the argument cannot be parsed."""
    if arg == NULL_CONTEXT:
        raise ArgumentTypeError('"null" is only valid as a context')
    if arg.startswith('http://') or arg.startswith('https://'):
        return URIRef(arg).n3()
    try:
        term = from_n3(arg)
    except Exception as e:
        raise ArgumentTypeError(f'"{arg}" is not an N-Triples term') from e
    if term is None:
        raise ArgumentTypeError(f'"{arg}" is not an N-Triples term')
    return term.n3()


def context_term(arg: str) -> str:
    """Like `ntriples_term()`, but also accepts `null` for statements
    without a context."""
    if arg == NULL_CONTEXT:
        return arg
    return ntriples_term(arg)


def parse_binding(arg: str) -> tuple[str, str]:
    """Split a `NAME=VALUE` command-line argument into a variable name
    and an N-Triples encoded value."""
    name, sep, value = arg.partition('=')
    if not sep or not name:
        raise ArgumentTypeError(f'"{arg}" must be in the form NAME=VALUE')
    return name.lstrip('?$'), ntriples_term(value)
