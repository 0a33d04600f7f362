#
# GUI front end for the soda vending machine, for use on the Pi500.
# Uses the FreeSimpleGUI lib, with an optional servo dispenser and a
# physical REFUND button when running on a Raspberry Pi.
#

# PySimpleGUI recipes used:
#
# Persistent GUI example
# https://pysimplegui.readthedocs.io/en/latest/cookbook/#recipe-pattern-2a-persistent-window-multiple-reads-using-an-event-loop
#
# Asynchronous Window With Periodic Update
# https://pysimplegui.readthedocs.io/en/latest/cookbook/#asynchronous-window-with-periodic-update

import argparse
from time import sleep

import FreeSimpleGUI as sg

from vending_machine import Action, Input, VendingMachine, describe_effect, log
from vending_io import ActionInterpreter, IOHandler, process_input, run_terminal, state_to_string

# Hardware interface module
# Checks if on Raspberry Pi, if not program runs in GUI only mode
hardware_present = False
try:
    from gpiozero.pins.pigpio import PiGPIOFactory
    from gpiozero import Button, Servo
    hardware_present = True
except ModuleNotFoundError:
    print("Not on a Raspberry Pi or gpiozero not installed.")

SERVO_PIN = 17
REFUND_BUTTON_PIN = 5
THEME = "BluePurple"

# GUI button key -> (label, Input)
COIN_BUTTONS = {
    "25": ("25¢", Input.INSERT_25),
    "50": ("50¢", Input.INSERT_50),
    "100": ("$1", Input.INSERT_100),
}

PRODUCT_BUTTONS = {
    "meet": ("MEET", Input.BUY_MEET),
    "etirps": ("ETIRPS", Input.BUY_ETIRPS),
}

EVENT_INPUTS = {key: user_input for key, (_, user_input) in COIN_BUTTONS.items()}
EVENT_INPUTS.update({key: user_input for key, (_, user_input) in PRODUCT_BUTTONS.items()})
EVENT_INPUTS["REFUND"] = Input.REFUND
EVENT_INPUTS["LOG"] = Input.QUERY_LOG

PRODUCT_ACTIONS = (Action.DISPENSE_MEET, Action.DISPENSE_ETIRPS)


def gui_log(window, message):
    """Send output text into the GUI Multiline display."""
    window["-OUTPUT-"].update(message + "\n", append=True)


def event_to_input(event):
    """Input for a window event, or None for events the machine ignores."""
    return EVENT_INPUTS.get(event)


#   GUI I/O HANDLER
class GuiIOHandler(IOHandler):
    """Drives the machine from window events and reports into the Multiline."""

    def __init__(self, window, servo=None, purchase_log=None):
        self.window = window
        self.servo = servo
        self.interpreter = ActionInterpreter(purchase_log)

    @property
    def purchase_log(self):
        return self.interpreter.purchase_log

    def obtain_input(self):
        """Block until a button maps to an Input. None once the window closes."""
        while True:
            event, _ = self.window.read()
            if event in (sg.WIN_CLOSED, "Exit"):
                return None
            user_input = event_to_input(event)
            if user_input is not None:
                return user_input
            log(f"Ignoring event {event!r}")

    def execute_action(self, action):
        effect = self.interpreter.execute(action)
        self.display_message(describe_effect(effect))
        if action in PRODUCT_ACTIONS:
            self.dispense_servo()
        return effect

    def display_message(self, message):
        gui_log(self.window, message)

    def display_log(self):
        for line in self.purchase_log.render():
            gui_log(self.window, line)

    def show_money(self, cents):
        self.window["-MONEY-"].update(f"You have {cents} cents.")

    def dispense_servo(self):
        """Move servo 3 times to simulate vending."""
        if self.servo:
            for _ in range(3):
                self.servo.mid(); sleep(0.3)
                self.servo.max(); sleep(0.3)
                self.servo.min(); sleep(0.3)


def build_window():
    sg.theme(THEME)

    # Coin buttons
    coin_col = [[sg.Text("ENTER COINS", font=("Helvetica", 24))]]
    for key, (label, _) in COIN_BUTTONS.items():
        coin_col.append([sg.Button(label, key=key, font=("Helvetica", 18))])

    # Product buttons, both sodas sell at $1.50
    prod_col = [[sg.Text("SELECT SODA", font=("Helvetica", 24))]]
    for key, (label, _) in PRODUCT_BUTTONS.items():
        prod_col.append([
            sg.Button(label, key=key, font=("Helvetica", 18), size=(10, 1)),
            sg.Text("$1.50", font=("Helvetica", 18), pad=((20, 0), (5, 5)))
        ])

    layout = [
        [sg.Column(coin_col), sg.VSeparator(), sg.Column(prod_col)],
        [sg.Button("REFUND", font=("Helvetica", 14)), sg.Button("LOG", font=("Helvetica", 14))],
        [sg.Text("You have 0 cents.", key="-MONEY-", font=("Helvetica", 14), size=(30, 1))],
        [sg.Multiline(key="-OUTPUT-", autoscroll=True, size=(60, 10), disabled=True)]
    ]

    return sg.Window("Soda Vending Machine", layout)


def setup_hardware(window):
    """Servo on GPIO17 and REFUND button on GPIO5. Returns (servo, button)."""
    if not hardware_present:
        return None, None

    try:
        factory = PiGPIOFactory()
        servo = Servo(SERVO_PIN, pin_factory=factory)
        button = Button(REFUND_BUTTON_PIN, pull_up=True, pin_factory=factory)
    except Exception as e:
        print(f"GPIO failed to initialize: {e}")
        return None, None

    # Button callbacks run on the gpiozero thread, hand the press to the event loop
    button.when_pressed = lambda: window.write_event_value("REFUND", None)
    print("GPIO REFUND button enabled.")
    return servo, button


def run_gui():
    window = build_window()
    servo, button = setup_hardware(window)

    machine = VendingMachine()
    io_handler = GuiIOHandler(window, servo=servo)

    # Main event loop
    while True:
        user_input = io_handler.obtain_input()
        if user_input is None:
            break

        result = process_input(machine, io_handler, user_input)
        if result is not None:
            log(f"Now in {state_to_string(result[0])}")
        io_handler.show_money(machine.current_money())

    window.close()
    print("Normal exit")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Soda vending machine")
    parser.add_argument("--terminal", action="store_true",
                        help="run the console front end instead of the GUI")
    args = parser.parse_args(argv)

    if args.terminal:
        run_terminal()
    else:
        run_gui()


if __name__ == "__main__":
    main()
