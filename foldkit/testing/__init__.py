from .core import Outcome
from .dispatch_scenario import DispatchScenario

__all__ = [
    "DispatchScenario",
    "Outcome",
]
