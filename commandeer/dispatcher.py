"""
Commandeer dispatcher: run a resolved command node for one matched invocation.

Flow (one attempt, no retries)
1. resolve the effective permission and executor constraint of the target;
2. authorize the sender ("sender.no-permission", context {permission});
3. check the executor class ("executor-type.player" / "executor-type.console");
4. bind every parsed value that matches a declared argument of the target;
5. run the target with a fresh ExecutionContext;
6. report failures: CommandException → handler (or a warning log when there is no
   handler); anything else → error log with traceback.

dispatch() always returns SUCCESS or FAILURE and never lets an exception escape
into the host.

Constraint inheritance
- a target declaring a non-empty permission supplies both the permission and the
  executor constraint; otherwise both come from the root of its tree.
"""
import logging

from .commands import ExecutorType, ExecutionContext
from .faults import CommandException
from .utils import *

logger = logging.getLogger(__name__)

SUCCESS = 1
FAILURE = 0


def _constraint_source(target):
    return target if target.restricted else target.root


def resolve_permission(target, /):
    """
    Return the effective permission of `target`, or None when nothing is required.
    """
    return _constraint_source(target).permission


def resolve_executor(target, /):
    """
    Return the effective ExecutorType of `target`.
    """
    return _constraint_source(target).executor


def check_executor(sender, executor, /):
    """
    Raise a CommandException when `sender` does not belong to the class `executor` admits.
    """
    match executor:
        case ExecutorType.INTERACTIVE_ONLY if not sender.interactive:
            raise CommandException("executor-type.player")
        case ExecutorType.NONINTERACTIVE_ONLY if not sender.automated:
            raise CommandException("executor-type.console")


class Dispatcher:
    """
    Authorize, bind and invoke command nodes, routing failures to a handler.

    Parameters
    - handler: callable(sender, exception) receiving every CommandException, or
      None/Unset to only log the error id.
    """

    def __init__(self, handler=Unset, /):
        self.handler = handler

    @property
    def handler(self):
        return self._handler

    @handler.setter
    def handler(self, handler):
        handler = coalesce(handler)
        if handler is not None and not callable(handler):
            raise TypeError("exception handler must be callable")
        self._handler = handler

    def dispatch(self, sender, target, raw=Unset, /, args=Unset):
        """
        Run `target` for `sender`.

        Parameters
        - sender: the invoking principal (has_permission, interactive, automated).
        - target: the resolved CommandNode (root or sub-command).
        - raw: mapping of argument name → raw value (string token or typed value);
          names the target does not declare are ignored.
        - args: raw tokens exposed as ExecutionContext.args; defaults to the string
          form of every raw value.

        Returns
        - SUCCESS when run() completed, FAILURE otherwise.
        """
        raw = dict(coalesce(raw, {}))
        try:
            if (permission := resolve_permission(target)) is not None and not sender.has_permission(permission):
                raise CommandException("sender.no-permission", permission=permission)

            check_executor(sender, resolve_executor(target))

            values = {}
            for name, value in raw.items():
                if (argument := target.argument(name)) is not None:
                    values[argument.key] = argument.bind(value)

            context = ExecutionContext(
                sender,
                target,
                values,
                args=coalesce(args, tuple(map(str, raw.values()))),
            )
            target.run(context)
            return SUCCESS
        except CommandException as exception:
            self._report(sender, exception)
            return FAILURE
        except Exception as exception:
            logger.exception("command execution error: %s", exception)
            return FAILURE

    def _report(self, sender, exception):
        if self._handler is None:
            logger.warning("[CommandException] %s", exception.error_id)
            return
        try:
            self._handler(sender, exception)
        except Exception:
            logger.exception("exception handler failed while handling %r", exception.error_id)


__all__ = (
    "SUCCESS",
    "FAILURE",
    "resolve_permission",
    "resolve_executor",
    "check_executor",
    "Dispatcher",
)
