#
# Front-end side of the vending machine: purchase log, action interpreter,
# the I/O handler interface and the terminal driver loop.
#

from datetime import datetime

import vending_machine
from vending_machine import (
    Input,
    VendingMachine,
    action_effect,
    describe_effect,
    log,
)

SEPARATOR = "-" * 85
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
LOG_HEADER = "Soda Purchase Log:"
EMPTY_LOG = "No sodas were purchased."


#   PURCHASE LOG
class PurchaseLog(object):
    """Append-only record of dispensed sodas, listed newest first."""

    def __init__(self):
        self._entries = []

    def record(self, product_name):
        self._entries.append(product_name)

    def entries(self):
        return list(reversed(self._entries))

    def render(self):
        """Lines to display, with an explicit marker when nothing was bought."""
        lines = [LOG_HEADER]
        if not self._entries:
            lines.append(EMPTY_LOG)
            return lines
        lines.extend(f"- {name}" for name in self.entries())
        return lines

    def __len__(self):
        return len(self._entries)


#   ACTION INTERPRETER
class ActionInterpreter(object):
    """Carries out the side effects of an action. Never touches the machine."""

    def __init__(self, purchase_log=None):
        self.purchase_log = purchase_log if purchase_log is not None else PurchaseLog()

    def execute(self, action):
        effect = action_effect(action)
        if effect.product:
            self.purchase_log.record(effect.product)
        return effect


#   I/O HANDLER INTERFACE
class IOHandler(object):
    """Base front end. Subclasses provide the input source and the output."""
    def obtain_input(self):
        """Next validated Input, or None when the session is over."""
        return None
    def execute_action(self, action): pass
    def display_message(self, message): pass
    def display_log(self): pass


def state_to_string(state):
    return state.name


def process_input(machine, io_handler, user_input):
    """Run one input through the machine and report the outcome."""
    if user_input is Input.QUERY_LOG:
        io_handler.display_log()
        return None

    next_state, action = machine.apply(user_input)
    io_handler.display_message("Next state: " + state_to_string(next_state))
    io_handler.execute_action(action)
    return next_state, action


def run_machine(machine, io_handler):
    """Driver loop. Runs until the handler runs out of input."""
    while True:
        io_handler.display_message(SEPARATOR)
        io_handler.display_message(f"You have {machine.current_money()} cents.")

        user_input = io_handler.obtain_input()
        if user_input is None:
            log("Input closed, leaving driver loop")
            return machine.current_state()

        process_input(machine, io_handler, user_input)


#   TERMINAL FRONT END
# Menu choice -> Input
MENU = {
    "0": ("Show LOG", Input.QUERY_LOG),
    "1": ("Insert $0.25", Input.INSERT_25),
    "2": ("Insert $0.50", Input.INSERT_50),
    "3": ("Insert $1.00", Input.INSERT_100),
    "4": ("Refund", Input.REFUND),
    "5": ("Buy Meet", Input.BUY_MEET),
    "6": ("Buy ETIRPS", Input.BUY_ETIRPS),
}

INVALID_CHOICE = "Invalid input. Please enter a number between 0 and 6."


class TerminalIOHandler(IOHandler):
    """Console front end. Input and output functions can be swapped for tests."""

    def __init__(self, input_func=input, output_func=print, clock=datetime.now,
                 purchase_log=None):
        self.input_func = input_func
        self.output_func = output_func
        self.clock = clock
        self.interpreter = ActionInterpreter(purchase_log)

    @property
    def purchase_log(self):
        return self.interpreter.purchase_log

    def obtain_input(self):
        self.display_message("Select an option:")
        for key, (label, _) in MENU.items():
            self.output_func(f"{key} - {label}")

        while True:
            self.display_message("Your choice: ")
            try:
                choice = self.input_func().strip()
            except EOFError:
                return None

            if choice in MENU:
                return MENU[choice][1]
            self.display_message(INVALID_CHOICE)

    def execute_action(self, action):
        effect = self.interpreter.execute(action)
        self.display_message(describe_effect(effect))
        return effect

    def display_message(self, message):
        self.output_func(f"{self.clock().strftime(TIMESTAMP_FORMAT)} - {message}")

    def display_log(self):
        self.output_func("")
        for line in self.purchase_log.render():
            self.output_func(line)


def run_terminal(io_handler=None):
    """Run the machine on the console until EOF or Ctrl-C."""
    # Transition traces would interleave with the menu
    vending_machine.TESTING = False

    machine = VendingMachine()
    if io_handler is None:
        io_handler = TerminalIOHandler()
    try:
        run_machine(machine, io_handler)
    except KeyboardInterrupt:
        pass
    print("Normal exit")
