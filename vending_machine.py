#
# Soda vending machine - finite state machine core.
#
# The machine holds money in 25 cent steps (0 to 150 cents). Every input is
# looked up in two fixed tables: one gives the next state, the other the
# action to perform. Nothing in this module does console or GUI I/O, the
# front ends live in vending_io.py and vending_gui.py.
#

from collections import namedtuple
from enum import Enum
from types import MappingProxyType

# Testing flag
TESTING = True

def log(s):
    """Print debugging messages when TESTING=True."""
    if TESTING:
        print(s)


#   STATES, INPUTS AND ACTIONS
class State(Enum):
    """Accumulated money, value is the amount in cents."""
    S000 = 0
    S025 = 25
    S050 = 50
    S075 = 75
    S100 = 100
    S125 = 125
    S150 = 150


class Input(Enum):
    """External events offered to the machine."""
    INSERT_25 = "insert_25"
    INSERT_50 = "insert_50"
    INSERT_100 = "insert_100"
    REFUND = "refund"
    BUY_MEET = "buy_meet"		# product A
    BUY_ETIRPS = "buy_etirps"	# product B
    QUERY_LOG = "query_log"		# handled by the driver, never by the tables


class Action(Enum):
    """Output of a transition."""
    NO_ACTION = "no_action"
    DISPENSE_25 = "dispense_25"
    DISPENSE_50 = "dispense_50"
    DISPENSE_75 = "dispense_75"
    DISPENSE_100 = "dispense_100"
    DISPENSE_125 = "dispense_125"
    DISPENSE_150 = "dispense_150"
    DISPENSE_MEET = "dispense_meet"
    DISPENSE_ETIRPS = "dispense_etirps"


#   TRANSITION AND ACTION TABLES
# Column order for the rows below
TABLE_INPUTS = (
    Input.INSERT_25,
    Input.INSERT_50,
    Input.INSERT_100,
    Input.REFUND,
    Input.BUY_MEET,
    Input.BUY_ETIRPS,
)

S000, S025, S050, S075, S100, S125, S150 = State
NO = Action.NO_ACTION

#                +25   +50   +100  refund meet  etirps
_NEXT_STATES = {
    S000:       (S025, S050, S100, S000, S000, S000),
    S025:       (S050, S075, S125, S000, S025, S025),
    S050:       (S075, S100, S150, S000, S050, S050),
    S075:       (S100, S125, S150, S000, S075, S075),
    S100:       (S125, S150, S150, S000, S100, S100),
    S125:       (S150, S150, S150, S000, S125, S125),
    S150:       (S150, S150, S150, S000, S000, S150),
}

#                +25  +50  +100  refund                meet                  etirps
_ACTIONS = {
    S000:       (NO,  NO,  NO,   NO,                   NO,                   NO),
    S025:       (NO,  NO,  NO,   Action.DISPENSE_25,   NO,                   NO),
    S050:       (NO,  NO,  NO,   Action.DISPENSE_50,   NO,                   NO),
    S075:       (NO,  NO,  NO,   Action.DISPENSE_75,   NO,                   NO),
    S100:       (NO,  NO,  NO,   Action.DISPENSE_100,  NO,                   NO),
    S125:       (NO,  NO,  NO,   Action.DISPENSE_125,  NO,                   NO),
    S150:       (NO,  NO,  NO,   Action.DISPENSE_150,  Action.DISPENSE_MEET, NO),
}

del S000, S025, S050, S075, S100, S125, S150, NO


def _build_table(rows):
    """Flatten per-state rows into a read-only {(state, input): value} mapping."""
    table = {}
    for state, row in rows.items():
        for user_input, value in zip(TABLE_INPUTS, row):
            table[(state, user_input)] = value
    return MappingProxyType(table)


TRANSITION_TABLE = _build_table(_NEXT_STATES)
ACTION_TABLE = _build_table(_ACTIONS)


def next_state(state, user_input):
    """State reached from `state` on `user_input`."""
    return TRANSITION_TABLE[(state, user_input)]


def action_for(state, user_input):
    """Action performed when `user_input` arrives in `state`."""
    return ACTION_TABLE[(state, user_input)]


def money_for(state):
    """Amount of money in cents represented by `state`."""
    return state.value


#   ACTION EFFECTS
ActionEffect = namedtuple("ActionEffect", ["dispensed_cents", "product"])

DISPENSED_CENTS = {
    Action.DISPENSE_25: 25,
    Action.DISPENSE_50: 50,
    Action.DISPENSE_75: 75,
    Action.DISPENSE_100: 100,
    Action.DISPENSE_125: 125,
    Action.DISPENSE_150: 150,
}

PRODUCTS = {
    Action.DISPENSE_MEET: "Meet",
    Action.DISPENSE_ETIRPS: "Etirps",
}


def action_effect(action):
    """
    Describe what an action hands out: cents of change and/or a product name.
    Pure, the machine and the purchase log are left alone.
    """
    return ActionEffect(DISPENSED_CENTS.get(action, 0), PRODUCTS.get(action))


def describe_effect(effect):
    """Human readable line for an ActionEffect."""
    if effect.product:
        return f"{effect.product} soda dispensed"
    if effect.dispensed_cents:
        return f"Dispensing ${effect.dispensed_cents/100:.2f}"
    return "No action"


#   VENDING MACHINE CLASS
class VendingMachine(object):
    """Holds the current state and applies one input at a time."""

    def __init__(self, state=State.S000):
        self._state = state

    def apply(self, user_input):
        """
        Apply one input and return (next_state, action).

        QUERY_LOG belongs to the driver. If it gets here anyway the state is
        kept and NO_ACTION is returned.
        """
        if user_input is Input.QUERY_LOG:
            log("QUERY_LOG reached the machine, ignoring")
            return self._state, Action.NO_ACTION

        new_state = next_state(self._state, user_input)
        action = action_for(self._state, user_input)
        log(f"{self._state.name} --{user_input.value}--> {new_state.name} ({action.value})")
        self._state = new_state
        return new_state, action

    def current_state(self):
        return self._state

    def current_money(self, state=None):
        """Money in cents for `state`, or for the current state if omitted."""
        return money_for(self._state if state is None else state)
