"""
Operator commands and their dispatch onto simulator operations.

Commands are a closed enum; key bindings map raw console input onto them
separately, so the dispatch table never sees input codes.
"""

import enum
import inspect


class Command(enum.Enum):
    BOOT_NOTIFICATION = "boot"
    BOOT_NOTIFICATION_FULL = "boot-full"
    DATA_TRANSFER = "data-transfer"
    DISCONNECT = "disconnect"
    STATUS_AVAILABLE = "available"
    STATUS_UNAVAILABLE = "unavailable"
    STATUS_PREPARING = "preparing"
    STATUS_CHARGING = "charging"
    STATUS_FINISHING = "finishing"
    STATUS_SUSPENDED_EV = "suspended-ev"
    AUTHORIZE = "authorize"
    START_TRANSACTION = "start"
    STOP_TRANSACTION = "stop"
    PRINT_CONFIGURATION = "config"
    QUIT = "quit"


KEY_BINDINGS = {
    "b": Command.BOOT_NOTIFICATION,
    "o": Command.BOOT_NOTIFICATION_FULL,
    "d": Command.DATA_TRANSFER,
    "D": Command.DISCONNECT,
    "A": Command.STATUS_AVAILABLE,
    "U": Command.STATUS_UNAVAILABLE,
    "P": Command.STATUS_PREPARING,
    "C": Command.STATUS_CHARGING,
    "F": Command.STATUS_FINISHING,
    "E": Command.STATUS_SUSPENDED_EV,
    "u": Command.AUTHORIZE,
    "s": Command.START_TRANSACTION,
    "t": Command.STOP_TRANSACTION,
    "p": Command.PRINT_CONFIGURATION,
    "q": Command.QUIT,
}


def parse_command(text):
    """Resolve a key binding or a command name; None if unknown."""
    text = text.strip()
    if text in KEY_BINDINGS:
        return KEY_BINDINGS[text]
    try:
        return Command(text.lower())
    except ValueError:
        return None


def build_dispatch(simulator, id_tag):
    """
    Map every command except QUIT to a simulator operation.

    Args:
        simulator: ChargerSimulator to act on
        id_tag: Authorization tag used for Authorize and StartTransaction

    Returns:
        dict: Command -> zero-argument callable
    """
    return {
        Command.BOOT_NOTIFICATION: lambda: simulator.boot_notification(),
        Command.BOOT_NOTIFICATION_FULL: lambda: simulator.boot_notification(with_optional_fields=True),
        Command.DATA_TRANSFER: simulator.data_transfer,
        Command.DISCONNECT: simulator.disconnect,
        Command.STATUS_AVAILABLE: lambda: simulator.send_status("Available"),
        Command.STATUS_UNAVAILABLE: lambda: simulator.send_status("Unavailable"),
        Command.STATUS_PREPARING: lambda: simulator.send_status("Preparing"),
        Command.STATUS_CHARGING: lambda: simulator.send_status("Charging"),
        Command.STATUS_FINISHING: lambda: simulator.send_status("Finishing"),
        Command.STATUS_SUSPENDED_EV: lambda: simulator.send_status("SuspendedEV"),
        Command.AUTHORIZE: lambda: simulator.authorize(id_tag),
        Command.START_TRANSACTION: lambda: simulator.start_transaction(id_tag),
        Command.STOP_TRANSACTION: lambda: simulator.stop_transaction(),
        Command.PRINT_CONFIGURATION: simulator.print_configuration,
    }


async def execute(dispatch, command):
    """Run one command, awaiting it if the operation is a coroutine."""
    result = dispatch[command]()
    if inspect.isawaitable(result):
        result = await result
    return result
