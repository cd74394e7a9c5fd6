from rich.pretty import pprint

from commandeer import *

__messages__ = {
    "points.too-many": "you can give at most {limit} points at once (tried {amount})",
}


class Add(SubCommand):
    def __init__(self):
        super().__init__("add", "points.add", aliases=["give"])
        self.register_argument(Argument("player", min_len=3, max_len=16))
        self.register_argument(Argument.builder("amount").type(ArgType.INTEGER).min(1).optional().build())

    def run(self, context):
        amount = context["amount"].as_int() or 1
        if amount > 100:
            raise CommandException("points.too-many", limit=100).with_("amount", amount)
        context.sender.send_message(f"gave {amount} points to {context['player'].as_string()}")


class Points(Command):
    def __init__(self):
        super().__init__("points", description="manage points", aliases=["pts"])
        self.register_child(Add())

    def run(self, context):
        context.sender.send_message(f"usage: {self.usage}")


if __name__ == '__main__':
    install_logging()
    commands = Commands()
    registry = create_registry(commands).set_exception_handler(MessageHandler())
    registry.register(points := Points())
    pprint(points)

    steve = Player("Steve", ["points.add"])
    for line in ("points", "pts give Alex 5", "points add Alex 500"):
        commands.execute(steve, line)
    commands.execute(Player("Alex"), "points add Steve 5")
