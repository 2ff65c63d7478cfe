from .planner import Planner
from .executor import Executor, EXHAUSTED_OUTPUT
__all__ = ["Planner", "Executor", "EXHAUSTED_OUTPUT"]
