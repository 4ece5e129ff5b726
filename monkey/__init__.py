from monkey.monkey_environment import Environment, new_environment as new_global_environment
from monkey.monkey_interpreter import Evaluator, evaluate
from monkey.monkey_parser import parse
from monkey.monkey_runtime import ExecutionResult, ScriptRunner

__all__ = [
    "Environment",
    "Evaluator",
    "ExecutionResult",
    "ScriptRunner",
    "evaluate",
    "new_global_environment",
    "parse",
]
