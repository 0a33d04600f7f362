"""
PyTest for testing the GUI front end in vending_gui.py
Uses a fake window so tests run without a display or Raspberry Pi hardware.
"""

import pytest

pytest.importorskip("FreeSimpleGUI")

import vending_gui
from vending_gui import GuiIOHandler, event_to_input
from vending_io import EMPTY_LOG, process_input
from vending_machine import Action, Input, State, VendingMachine


class FakeElement(object):
    def __init__(self):
        self.values = []

    def update(self, value, append=False):
        self.values.append(value)


class FakeWindow(object):
    """Replays a fixed list of events, then reports the window closed."""

    def __init__(self, events):
        self.events = list(events)
        self.elements = {"-OUTPUT-": FakeElement(), "-MONEY-": FakeElement()}

    def read(self, timeout=None):
        if not self.events:
            return vending_gui.sg.WIN_CLOSED, None
        return self.events.pop(0), {}

    def __getitem__(self, key):
        return self.elements[key]

    def output(self):
        return "".join(self.elements["-OUTPUT-"].values)


class FakeServo(object):
    def __init__(self):
        self.moves = 0

    def mid(self):
        self.moves += 1

    def max(self):
        pass

    def min(self):
        pass


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    monkeypatch.setattr(vending_gui, "sleep", lambda _: None)


# TEST 1 - Button keys map to inputs
def test_event_to_input():
    assert event_to_input("25") == Input.INSERT_25
    assert event_to_input("100") == Input.INSERT_100
    assert event_to_input("meet") == Input.BUY_MEET
    assert event_to_input("REFUND") == Input.REFUND
    assert event_to_input("LOG") == Input.QUERY_LOG
    assert event_to_input("__TIMEOUT__") is None


# TEST 2 - Unknown events are skipped, closing ends input
def test_obtain_input_skips_unknown_events():
    handler = GuiIOHandler(FakeWindow(["bogus", "50"]))
    assert handler.obtain_input() == Input.INSERT_50
    assert handler.obtain_input() is None


# TEST 3 - Buying Meet at $1.50 logs it and runs the servo
def test_gui_purchase():
    window = FakeWindow([])
    servo = FakeServo()
    handler = GuiIOHandler(window, servo=servo)
    machine = VendingMachine(State.S150)

    assert process_input(machine, handler, Input.BUY_MEET) == (State.S000, Action.DISPENSE_MEET)
    assert handler.purchase_log.entries() == ["Meet"]
    assert servo.moves == 3
    assert "Meet soda dispensed" in window.output()


# TEST 4 - Log button with no purchases
def test_gui_empty_log():
    window = FakeWindow([])
    handler = GuiIOHandler(window)
    machine = VendingMachine(State.S025)

    process_input(machine, handler, Input.QUERY_LOG)
    assert machine.current_state() == State.S025
    assert EMPTY_LOG in window.output()


# TEST 5 - Money read-out
def test_show_money():
    window = FakeWindow([])
    GuiIOHandler(window).show_money(75)
    assert window["-MONEY-"].values == ["You have 75 cents."]


# TEST 6 - Command line picks the front end
def test_main_terminal_flag(monkeypatch):
    calls = []
    monkeypatch.setattr(vending_gui, "run_terminal", lambda: calls.append("terminal"))
    monkeypatch.setattr(vending_gui, "run_gui", lambda: calls.append("gui"))
    vending_gui.main(["--terminal"])
    vending_gui.main([])
    assert calls == ["terminal", "gui"]


class FakeButton(object):
    def __init__(self, pin, pull_up=True, pin_factory=None):
        self.pin = pin
        self.when_pressed = None


class EventWindow(FakeWindow):
    """Records events posted from other threads."""

    def __init__(self):
        super().__init__([])
        self.posted = []

    def write_event_value(self, key, value):
        self.posted.append((key, value))


@pytest.fixture
def fake_gpio(monkeypatch):
    monkeypatch.setattr(vending_gui, "hardware_present", True)
    monkeypatch.setattr(vending_gui, "PiGPIOFactory", lambda: "factory", raising=False)
    monkeypatch.setattr(vending_gui, "Servo", lambda pin, pin_factory=None: FakeServo(), raising=False)
    monkeypatch.setattr(vending_gui, "Button", FakeButton, raising=False)


# TEST 7 - REFUND button posts an event into the window queue
def test_refund_button_posts_event(fake_gpio):
    window = EventWindow()
    servo, button = vending_gui.setup_hardware(window)

    assert isinstance(servo, FakeServo)
    assert button.pin == vending_gui.REFUND_BUTTON_PIN
    button.when_pressed()
    assert window.posted == [("REFUND", None)]
    assert event_to_input(window.posted[0][0]) == Input.REFUND


# TEST 8 - GPIO failure falls back to GUI only
def test_gpio_failure_runs_gui_only(fake_gpio, monkeypatch, capsys):
    def broken_servo(pin, pin_factory=None):
        raise RuntimeError("no pigpio daemon")
    monkeypatch.setattr(vending_gui, "Servo", broken_servo)

    assert vending_gui.setup_hardware(EventWindow()) == (None, None)
    assert "GPIO failed to initialize" in capsys.readouterr().out


# TEST 9 - No hardware, no GPIO set-up
def test_no_hardware(monkeypatch):
    monkeypatch.setattr(vending_gui, "hardware_present", False)
    assert vending_gui.setup_hardware(EventWindow()) == (None, None)
