"""
The native functions every Monkey program can call.

Builtins are methods of `Builtins` marked with `@monkey_builtin`; the
evaluator collects them once into a fixed name table. Each builtin checks
its own arguments and reports misuse by returning an Error value, never by
raising.
"""
from __future__ import annotations

import asyncio
import datetime
import inspect
import re
import time
from typing import TYPE_CHECKING, Dict, List

from monkey.monkey_objects import (
    NULL, VOID, Array, Boolean, Builtin, Error, Function, Integer, Object, String,
    is_error,
)

if TYPE_CHECKING:
    from monkey.monkey_interpreter import Evaluator

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def monkey_builtin(name: str):
    """Marks a `Builtins` method as the native function `name`."""
    def decorator(func):
        func._monkey_builtin = name
        return func
    return decorator


def wrong_arg_count(got: int, want: str) -> Error:
    return Error(f"wrong number of arguments. got={got}, want={want}")


def unsupported_arg(where: str, obj: Object) -> Error:
    return Error(f"argument to {where} not supported, got {obj.type()}")


def _deep_len(array: Array) -> int:
    total = len(array.elements)
    for element in array.elements:
        if isinstance(element, Array):
            total += _deep_len(element)
    return total


class Builtins:
    """Native function implementations bound to one evaluator."""

    def __init__(self, evaluator: "Evaluator"):
        self.evaluator = evaluator

    def table(self) -> Dict[str, Builtin]:
        out: Dict[str, Builtin] = {}
        for _, member in inspect.getmembers(self, callable):
            name = getattr(member, "_monkey_builtin", None)
            if name:
                out[name] = Builtin(name, member)
        return out

    # --- Strings and arrays ---

    @monkey_builtin("len")
    def builtin_len(self, args: List[Object]) -> Object:
        if len(args) not in (1, 2):
            return wrong_arg_count(len(args), "1 || 2")
        obj = args[0]
        deep = args[1] if len(args) == 2 else Boolean(False)
        if not isinstance(deep, Boolean):
            return unsupported_arg("len[deep]", deep)
        match obj:
            case String():
                return Integer(len(obj.value))
            case Array():
                return Integer(_deep_len(obj) if deep.value else len(obj.elements))
            case _:
                return unsupported_arg("len[obj]", obj)

    @monkey_builtin("str")
    def builtin_str(self, args: List[Object]) -> Object:
        if len(args) != 1:
            return wrong_arg_count(len(args), "1")
        return String(args[0].inspect())

    @monkey_builtin("int")
    def builtin_int(self, args: List[Object]) -> Object:
        if len(args) != 1:
            return wrong_arg_count(len(args), "1")
        obj = args[0]
        match obj:
            case Integer():
                return Integer(obj.value)
            case String():
                m = _LEADING_INT.match(obj.value)
                if m is None:
                    return Error(f'invalid int: "{obj.value}"')
                value = int(m.group(1))
                if not INT64_MIN <= value <= INT64_MAX:
                    return Error(f"integer overflow: {m.group(1)}")
                return Integer(value)
            case _:
                return unsupported_arg("int[value]", obj)

    @monkey_builtin("push_arr")
    def builtin_push_arr(self, args: List[Object]) -> Object:
        if len(args) < 2:
            return wrong_arg_count(len(args), ">= 2")
        array, pushed = args[0], args[1:]
        if not isinstance(array, Array):
            return unsupported_arg("push_arr[arr]", array)
        array.elements.extend(pushed)
        return pushed[0] if len(pushed) == 1 else Array(list(pushed))

    @monkey_builtin("pop_arr")
    def builtin_pop_arr(self, args: List[Object]) -> Object:
        if len(args) != 1:
            return wrong_arg_count(len(args), "1")
        array = args[0]
        if not isinstance(array, Array):
            return unsupported_arg("pop_arr[arr]", array)
        if not array.elements:
            return NULL
        return array.elements.pop()

    @monkey_builtin("each")
    async def builtin_each(self, args: List[Object]) -> Object:
        if len(args) != 2:
            return wrong_arg_count(len(args), "2")
        array, func = args
        if not isinstance(array, Array):
            return unsupported_arg("each[arr]", array)
        if not isinstance(func, (Function, Builtin)):
            return unsupported_arg("each[func]", func)
        for i, element in enumerate(list(array.elements)):
            result = await self.evaluator.apply_function(func, [element, Integer(i), array])
            if is_error(result):
                return result
        return VOID

    # --- Time and timers ---

    @monkey_builtin("time")
    def builtin_time(self, args: List[Object]) -> Object:
        if len(args) > 1:
            return wrong_arg_count(len(args), "0 || 1")
        if not args:
            return Integer(int(time.time() * 1000))
        unit = args[0]
        if not isinstance(unit, String):
            return unsupported_arg("time[flag]", unit)
        now = datetime.datetime.now()
        match unit.value:
            case "year":
                return Integer(now.year)
            case "month":
                return Integer(now.month)
            case "day":
                return Integer(now.day)
            case "week":
                # Sunday is 0
                return Integer((now.weekday() + 1) % 7)
            case "hour":
                return Integer(now.hour)
            case "minute":
                return Integer(now.minute)
            case "second":
                return Integer(now.second)
            case _:
                return Error(f"unknown time unit: {unit.value}")

    @monkey_builtin("interval")
    def builtin_interval(self, args: List[Object]) -> Object:
        if not 1 <= len(args) <= 3:
            return wrong_arg_count(len(args), "1 || 2 || 3")
        func = args[0]
        if not isinstance(func, (Function, Builtin)):
            return unsupported_arg("interval[func]", func)
        timeout = args[1] if len(args) > 1 else Integer(0)
        if not isinstance(timeout, Integer):
            return unsupported_arg("interval[timeout]", timeout)
        params = args[2] if len(args) > 2 else Array([])
        if not isinstance(params, Array):
            return unsupported_arg("interval[params]", params)

        evaluator = self.evaluator
        delay = max(timeout.value, 0) / 1000

        async def _runner():
            # Runs first right away, then once per delay, until cancelled.
            while True:
                try:
                    result = await evaluator.apply_function(func, list(params.elements))
                except Exception as e:
                    evaluator._dbg("interval callback failed:", repr(e))
                    evaluator.emit("stderr", f"InternalError: {e}")
                    return
                if result is not VOID:
                    evaluator.emit("stdout", result.inspect())
                await asyncio.sleep(delay)

        handle = evaluator.timers.register(asyncio.create_task(_runner()))
        return Integer(handle)

    @monkey_builtin("clearInterval")
    def builtin_clear_interval(self, args: List[Object]) -> Object:
        if len(args) != 1:
            return wrong_arg_count(len(args), "1")
        handle = args[0]
        if not isinstance(handle, Integer):
            return unsupported_arg("clearInterval[id]", handle)
        self.evaluator.timers.cancel(handle.value)
        return VOID

    # --- I/O ---

    @monkey_builtin("print")
    def builtin_print(self, args: List[Object]) -> Object:
        self.evaluator.emit("stdout", " ".join(arg.inspect() for arg in args))
        return VOID

    @monkey_builtin("input")
    async def builtin_input(self, args: List[Object]) -> Object:
        if len(args) > 1:
            return wrong_arg_count(len(args), "<= 1")
        prompt = "User Input: "
        if args:
            if not isinstance(args[0], String):
                return unsupported_arg("input[prompt]", args[0])
            prompt = args[0].value
        line = await self.evaluator.read_line(prompt)
        if line is None:
            return NULL
        return String(line)
