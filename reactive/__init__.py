"""
Reactive state layer for the dashboard engine.

StateMachine tables declare the legal edges; ObservableState holds the
current state in a reaktiv Signal and notifies subscribers on change.
"""

from reactive.state_machine import StateMachine, Transition, InvalidTransition, GuardFailure
from reactive.observable import ObservableState
