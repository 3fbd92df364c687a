from argparse import Namespace

import httpretty

from sesame.cli.commands.contexts import Command
from helpers import REPO_URL, sparql_json


@httpretty.activate
def test_contexts_command(capsys, sesame_context):
    httpretty.register_uri(
        httpretty.GET,
        REPO_URL + '/contexts',
        body=sparql_json(['contextID'], [
            {'contextID': 'http://example.com/g1'},
            {'contextID': 'http://example.com/g2'},
        ]),
    )
    Command(context=sesame_context)(Namespace())
    assert capsys.readouterr().out == 'http://example.com/g1\nhttp://example.com/g2\n'
