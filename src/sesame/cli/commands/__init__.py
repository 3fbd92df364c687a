from typing import Any

from sesame.cli.context import SesameContext


class BaseCommand:
    def __init__(self, context: SesameContext = None):
        self.context = context
        self.result = None

    @property
    def config(self) -> dict[str, Any]:
        """The section of the `COMMANDS` configuration named after this command."""
        name = self.__module__.split('.')[-1]
        return (self.context.config or {}).get('COMMANDS', {}).get(name.upper(), {})
