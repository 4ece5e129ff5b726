"""
The core Monkey interpreter: an asynchronous tree-walking Evaluator.

Evaluation is a chain of coroutines so that builtins such as `input` and
`interval` can suspend or schedule work on the running event loop without
blocking it. Runtime errors are ordinary `Error` values: every composite
rule checks each sub-result and hands an error (or a pending `return`)
straight back to its caller.
"""
import asyncio
import inspect
import os
import sys
from typing import Any, Awaitable, Callable, Dict, List, Optional, TextIO, Union

from monkey.monkey_ast import (
    ArrayLiteral, AssignStatement, BlockStatement, BooleanLiteral, CallExpression,
    ExpressionStatement, FunctionLiteral, Identifier, IfExpression,
    IndexExpression, InfixExpression, IntegerLiteral, LetStatement, Node,
    PrefixExpression, Program, ReturnStatement, StringLiteral, WhileExpression,
)
from monkey.monkey_builtins import INT64_MAX, INT64_MIN, Builtins
from monkey.monkey_environment import Environment, new_enclosed_environment
from monkey.monkey_objects import (
    FALSE, NULL, TRUE, UNDEFINED, VOID, Array, Builtin, Error, Function,
    Integer, Object, ObjectType, ReturnValue, String, is_abrupt, is_truthy,
    native_bool_to_boolean,
)
from monkey.monkey_timers import TimerRegistry

InputReader = Callable[[str], Awaitable[Optional[str]]]

# Kinds whose values are fully described by their tag (and bool value).
_VALUE_COMPARED = (ObjectType.BOOLEAN, ObjectType.NULL, ObjectType.VOID, ObjectType.UNDEFINED)


def strip_line(raw: str) -> Optional[str]:
    """Turns a raw `readline()` result into an input line. None at EOF."""
    if raw == "":
        return None
    return raw.rstrip("\r\n")


async def ainput(prompt: str) -> Optional[str]:
    """Reads one line from stdin without blocking the event loop. None at EOF."""
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return strip_line(await loop.run_in_executor(None, sys.stdin.readline))


def unwrap_return_value(obj: Object) -> Object:
    return obj.value if isinstance(obj, ReturnValue) else obj


class Evaluator:
    """The Monkey execution engine.

    One evaluator owns the builtin table, the live interval timers and the
    record of everything printed. Environments are passed in explicitly, so
    several sessions can share the process.
    """

    def __init__(self, output: Optional[TextIO] = None, input_reader: Optional[InputReader] = None):
        # When set, printed text is also streamed here as it is produced.
        self.output = output
        self.input_reader: InputReader = input_reader or ainput
        self.side_effects: List[Dict[str, Any]] = []
        self.timers = TimerRegistry()
        self.builtins: Dict[str, Builtin] = Builtins(self).table()
        # Cleared by ScriptRunner between runs so interval ticks after a run are only streamed.
        self.recording = True

    def _dbg(self, *parts):
        if os.environ.get("MONKEY_DEBUG"):
            print("[DBG]", *parts, file=sys.stderr)

    def emit(self, topic: str, message: str):
        """Records an output side effect and streams it when an output is attached."""
        if self.recording:
            self.side_effects.append({"topics": [topic], "message": message})
        if self.output is None:
            return
        stream = sys.stderr if topic == "stderr" else self.output
        stream.write(message + "\n")
        stream.flush()

    async def read_line(self, prompt: str) -> Optional[str]:
        return await self.input_reader(prompt)

    async def eval(self, node: Node, env: Environment) -> Object:
        """Public entry point for evaluation. Unwraps 'return' values."""
        result = await self._eval(node, env)
        return unwrap_return_value(result)

    async def _eval(self, node: Node, env: Environment) -> Object:
        """Recursive dispatcher for evaluating any AST node."""
        match node:
            # Statements
            case Program():
                return await self._eval_program(node, env)
            case BlockStatement():
                return await self._eval_block_statement(node, env)
            case ExpressionStatement():
                return await self._eval(node.expression, env)
            case LetStatement():
                value = await self._eval(node.value, env)
                if is_abrupt(value):
                    return value
                return env.set(node.name.value, value)
            case AssignStatement():
                return await self._eval_assign_statement(node, env)
            case ReturnStatement():
                value = await self._eval(node.return_value, env)
                if is_abrupt(value):
                    return value
                return ReturnValue(value)

            # Literals
            case IntegerLiteral():
                return Integer(node.value)
            case StringLiteral():
                return String(node.value)
            case BooleanLiteral():
                return native_bool_to_boolean(node.value)
            case ArrayLiteral():
                elements = await self._eval_expressions(node.elements, env)
                if not isinstance(elements, list):
                    return elements
                return Array(elements)
            case FunctionLiteral():
                return Function(node.parameters, node.body, env)

            # Expressions
            case Identifier():
                return self._eval_identifier(node, env)
            case PrefixExpression():
                right = await self._eval(node.right, env)
                if is_abrupt(right):
                    return right
                return self._eval_prefix_expression(node.operator, right)
            case InfixExpression():
                left = await self._eval(node.left, env)
                if is_abrupt(left):
                    return left
                right = await self._eval(node.right, env)
                if is_abrupt(right):
                    return right
                return self._eval_infix_expression(node.operator, left, right)
            case IfExpression():
                return await self._eval_if_expression(node, env)
            case WhileExpression():
                return await self._eval_while_expression(node, env)
            case CallExpression():
                return await self._eval_call_expression(node, env)
            case IndexExpression():
                left = await self._eval(node.left, env)
                if is_abrupt(left):
                    return left
                index = await self._eval(node.index, env)
                if is_abrupt(index):
                    return index
                return self._eval_index_expression(left, index)

            case _:
                # Only reachable with a malformed tree, e.g. one that still
                # holds the None placeholders of a failed parse.
                raise TypeError(f"cannot evaluate {type(node).__name__} node")

    # --- Statements ---

    async def _eval_program(self, program: Program, env: Environment) -> Object:
        result: Object = VOID
        for stmt in program.statements:
            result = await self._eval(stmt, env)
            if isinstance(result, ReturnValue):
                return result.value
            if isinstance(result, Error):
                return result
        return result

    async def _eval_block_statement(self, block: BlockStatement, env: Environment) -> Object:
        for stmt in block.statements:
            result = await self._eval(stmt, env)
            # ReturnValue stays wrapped so the call boundary can unwrap it.
            if is_abrupt(result):
                return result
        return VOID

    async def _eval_function_body(self, body: BlockStatement, env: Environment) -> Object:
        """Like a block, but a body that runs to its end yields its last statement's value."""
        # Without this `fn(x){ fn(y){ x + y } }` would return void instead of its inner closure.
        result: Object = VOID
        for stmt in body.statements:
            result = await self._eval(stmt, env)
            if is_abrupt(result):
                return result
        return result

    async def _eval_assign_statement(self, node: AssignStatement, env: Environment) -> Object:
        value = await self._eval(node.value, env)
        if is_abrupt(value):
            return value
        name = node.name.value
        owner = env.find_owner(name)
        if owner is None:
            # Undeclared names are created in the global frame, whatever the nesting.
            owner = env.root()
            self._dbg("assign", name, "->", value.inspect(), "(global)")
        return owner.set(name, value)

    # --- Expressions ---

    def _eval_identifier(self, node: Identifier, env: Environment) -> Object:
        value = env.get(node.value)
        if value is not None:
            return value
        builtin = self.builtins.get(node.value)
        if builtin is not None:
            return builtin
        return UNDEFINED

    def _eval_prefix_expression(self, operator: str, right: Object) -> Object:
        match operator:
            case "!":
                return FALSE if is_truthy(right) else TRUE
            case "-":
                if not isinstance(right, Integer):
                    return Error(f"unknown operator: -{right.type()}")
                return self._checked_integer(-right.value, f"-{right.value}")
            case _:
                return Error(f"unknown operator: {operator}{right.type()}")

    def _eval_infix_expression(self, operator: str, left: Object, right: Object) -> Object:
        if isinstance(left, Integer) and isinstance(right, Integer):
            return self._eval_integer_infix_expression(operator, left, right)
        if isinstance(left, String) and isinstance(right, String):
            return self._eval_string_infix_expression(operator, left, right)
        if left.type() != right.type():
            return Error(f"type mismatch: {left.type()} {operator} {right.type()}")
        match operator:
            case "==":
                return native_bool_to_boolean(self._same_object(left, right))
            case "!=":
                return native_bool_to_boolean(not self._same_object(left, right))
            case _:
                return Error(f"unknown operator: {left.type()} {operator} {right.type()}")

    def _same_object(self, left: Object, right: Object) -> bool:
        if left.type() in _VALUE_COMPARED:
            return left == right
        return left is right

    def _eval_integer_infix_expression(self, operator: str, left: Integer, right: Integer) -> Object:
        a, b = left.value, right.value
        match operator:
            case "+":
                return self._checked_integer(a + b, f"{a} + {b}")
            case "-":
                return self._checked_integer(a - b, f"{a} - {b}")
            case "*":
                return self._checked_integer(a * b, f"{a} * {b}")
            case "/":
                if b == 0:
                    return Error("division by zero")
                # Truncate toward zero.
                quotient = abs(a) // abs(b)
                if (a < 0) != (b < 0):
                    quotient = -quotient
                return self._checked_integer(quotient, f"{a} / {b}")
            case "<":
                return native_bool_to_boolean(a < b)
            case ">":
                return native_bool_to_boolean(a > b)
            case "==":
                return native_bool_to_boolean(a == b)
            case "!=":
                return native_bool_to_boolean(a != b)
            case _:
                return Error(f"unknown operator: {left.type()} {operator} {right.type()}")

    def _checked_integer(self, value: int, expr: str) -> Object:
        if not INT64_MIN <= value <= INT64_MAX:
            return Error(f"integer overflow: {expr}")
        return Integer(value)

    def _eval_string_infix_expression(self, operator: str, left: String, right: String) -> Object:
        match operator:
            case "+":
                return String(left.value + right.value)
            case "==":
                return native_bool_to_boolean(left.value == right.value)
            case "!=":
                return native_bool_to_boolean(left.value != right.value)
            case _:
                return Error(f"unknown operator: {left.type()} {operator} {right.type()}")

    async def _eval_if_expression(self, node: IfExpression, env: Environment) -> Object:
        condition = await self._eval(node.condition, env)
        if is_abrupt(condition):
            return condition
        if is_truthy(condition):
            return await self._eval(node.consequence, env)
        if node.alternative is not None:
            return await self._eval(node.alternative, env)
        return VOID

    async def _eval_while_expression(self, node: WhileExpression, env: Environment) -> Object:
        max_iters_env = os.environ.get("MONKEY_MAX_LOOP_ITERS")
        try:
            max_iters = int(max_iters_env) if max_iters_env else None
        except ValueError:
            self._dbg("ignoring MONKEY_MAX_LOOP_ITERS:", repr(max_iters_env))
            max_iters = None
        iter_count = 0
        while True:
            condition = await self._eval(node.condition, env)
            if is_abrupt(condition):
                return condition
            if not is_truthy(condition):
                return VOID

            result = await self._eval(node.body, env)
            # A return leaves the loop and the enclosing function.
            if is_abrupt(result):
                return result

            iter_count += 1
            if max_iters is not None and iter_count >= max_iters:
                return Error("while: iteration limit exceeded")

            # Let timers and pending input run before the next check.
            await asyncio.sleep(0)

    async def _eval_call_expression(self, node: CallExpression, env: Environment) -> Object:
        func = await self._eval(node.function, env)
        if is_abrupt(func):
            return func
        if not isinstance(func, (Function, Builtin)):
            return Error(f"not a function: {func.type()}")
        args = await self._eval_expressions(node.arguments, env)
        if not isinstance(args, list):
            return args
        return await self.apply_function(func, args)

    async def _eval_expressions(self, expressions, env: Environment) -> Union[List[Object], Object]:
        """Evaluates left to right; returns the first error (or return) instead of a list."""
        results: List[Object] = []
        for expression in expressions:
            value = await self._eval(expression, env)
            if is_abrupt(value):
                return value
            results.append(value)
        return results

    def _eval_index_expression(self, left: Object, index: Object) -> Object:
        if isinstance(left, Array) and isinstance(index, Integer):
            idx = index.value
            if idx < 0 or idx >= len(left.elements):
                return NULL
            return left.elements[idx]
        return Error(f"index operator not supported: {left.type()}")

    # --- Function application ---

    async def apply_function(self, func: Object, args: List[Object]) -> Object:
        match func:
            case Function():
                call_env = self._extend_function_env(func, args)
                result = await self._eval_function_body(func.body, call_env)
                return unwrap_return_value(result)
            case Builtin():
                result = func.fn(args)
                if inspect.isawaitable(result):
                    result = await result
                return result
            case _:
                return Error(f"not a function: {func.type()}")

    def _extend_function_env(self, func: Function, args: List[Object]) -> Environment:
        env = new_enclosed_environment(func.env)
        for i, param in enumerate(func.parameters):
            # No arity check: extra arguments are dropped, missing ones are undefined.
            env.set(param.value, args[i] if i < len(args) else UNDEFINED)
        return env


async def evaluate(node: Node, env: Environment, evaluator: Optional[Evaluator] = None) -> Object:
    """Evaluates `node` against `env` with `evaluator` (a fresh one by default)."""
    if evaluator is None:
        evaluator = Evaluator()
    return await evaluator.eval(node, env)
