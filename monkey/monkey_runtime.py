"""
Runs Monkey source end to end: parse, evaluate, and report.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Literal, Optional

from monkey.monkey_environment import Environment, new_environment
from monkey.monkey_interpreter import Evaluator
from monkey.monkey_objects import Error, Object
from monkey.monkey_parser import parse
from monkey.monkey_printer import Printer


@dataclass
class ExecutionResult:
    """The structured result of a script execution."""
    status: Literal['success', 'error']
    value: Optional[Object] = None
    error_message: Optional[str] = None
    parse_errors: List[str] = field(default_factory=list)
    side_effects: List[Dict] = field(default_factory=list)

    def format_error(self) -> str:
        if self.status != 'error':
            return ""
        return str(self.error_message or "Unknown error")


class ScriptRunner:
    """Parses and executes Monkey code against one persistent global environment.

    Bindings made by one `handle_script` call stay visible to the next, which
    is what the REPL relies on.
    """

    def __init__(self, evaluator: Optional[Evaluator] = None, printer: Optional[Printer] = None):
        self.evaluator = evaluator or Evaluator()
        self.printer = printer or Printer()
        self.root_env: Environment = new_environment()

    def _format_runtime_error(self, e: BaseException) -> str:
        match e:
            case RecursionError():
                return "RecursionError: maximum recursion depth exceeded"
            case _:
                return f"InternalError: {type(e).__name__}: {e}"

    async def handle_script(self, source_code: str) -> ExecutionResult:
        """The main entry point to execute a script."""
        self.evaluator.side_effects.clear()
        # Output is only recorded while a run is in progress; interval ticks
        # that fire between runs are streamed but never accumulate.
        self.evaluator.recording = True
        try:
            return await self._run(source_code)
        finally:
            self.evaluator.recording = False

    async def _run(self, source_code: str) -> ExecutionResult:
        program, errors = parse(source_code)
        if errors:
            report = self.printer.format_parse_errors(errors)
            self.evaluator.side_effects.append({'topics': ['stderr'], 'message': report})
            return ExecutionResult(
                status='error',
                error_message=report,
                parse_errors=list(errors),
                side_effects=list(self.evaluator.side_effects),
            )

        try:
            value = await self.evaluator.eval(program, self.root_env)
        except Exception as e:
            self.evaluator._dbg("host exception during evaluation:", repr(e))
            msg = self._format_runtime_error(e)
            self.evaluator.side_effects.append({'topics': ['stderr'], 'message': msg})
            return ExecutionResult(
                status='error',
                error_message=msg,
                side_effects=list(self.evaluator.side_effects),
            )

        if isinstance(value, Error):
            return ExecutionResult(
                status='error',
                value=value,
                error_message=value.inspect(),
                side_effects=list(self.evaluator.side_effects),
            )
        return ExecutionResult(
            status='success',
            value=value,
            side_effects=list(self.evaluator.side_effects),
        )

    async def wait_for_timers(self):
        """Blocks until every interval started by the scripts has stopped."""
        await self.evaluator.timers.wait_idle()

    def cancel_timers(self):
        self.evaluator.timers.cancel_all()
