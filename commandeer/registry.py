"""
Commandeer registry: the entry point a host uses to register command trees.

    registry = create_registry(commands).set_exception_handler(MessageHandler())
    registry.register(Points())

register() compiles the root command and hands the grammar, description and aliases
to the host registrar (anything with a register(grammar, description, aliases)
method, e.g. commandeer.grammar.Commands). The registry never parses input itself.
"""
import logging

from .commands import Command
from .compiler import compile_command
from .dispatcher import Dispatcher
from .utils import *

logger = logging.getLogger(__name__)


class CommandRegistry:
    """
    Compile and register root commands against a host registrar.

    Parameters
    - registrar: object exposing register(grammar, description, aliases).
    - handler: optional exception handler (see Dispatcher).
    """

    def __init__(self, registrar, /, handler=Unset):
        if not callable(getattr(registrar, "register", None)):
            raise TypeError("registrar must provide a register() method")
        self._registrar = registrar
        self._dispatcher = Dispatcher(handler)
        self._commands = {}

    registrar = mirror("registrar")
    dispatcher = mirror("dispatcher")
    commands = mirror("commands")

    @property
    def exception_handler(self):
        return self._dispatcher.handler

    @exception_handler.setter
    def exception_handler(self, handler):
        self._dispatcher.handler = handler

    def set_exception_handler(self, handler, /):
        """
        Set the exception handler and return the registry for chaining.
        """
        self.exception_handler = handler
        return self

    def compile(self, command, /):
        """
        Compile `command` into a grammar wired to this registry's dispatcher.
        """
        return compile_command(command, self._dispatcher)

    def register(self, command, /):
        """
        Compile `command` and hand it to the registrar; returns the compiled grammar.

        Raises
        - TypeError: command is not a root Command.
        - DeclarationError: the command tree cannot be compiled.
        """
        if not isinstance(command, Command):
            raise TypeError("only root commands can be registered")
        grammar = self.compile(command)
        self._registrar.register(grammar, command.description, command.aliases)
        self._commands[command.key] = command
        logger.debug("registered command %r (aliases: %s)", command.name, ", ".join(command.aliases) or "none")
        return grammar


def create_registry(registrar, /, handler=Unset):
    return CommandRegistry(registrar, handler)


__all__ = (
    "CommandRegistry",
    "create_registry",
)
