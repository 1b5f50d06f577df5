from enum import Enum


class SimulationType(str, Enum):
    PROPOSED = "proposed"   # state overrides force the proposal through voting and the timelock
    EXECUTED = "executed"   # replay of the historical execution transaction
