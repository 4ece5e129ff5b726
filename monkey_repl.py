import asyncio
import sys
from pathlib import Path
from typing import Optional

from monkey.monkey_interpreter import Evaluator, strip_line
from monkey.monkey_printer import Printer
from monkey.monkey_runtime import ScriptRunner

# A basic awaitable input prompt.
async def ainput(prompt: str) -> str:
    loop = asyncio.get_running_loop()
    sys.stdout.write(prompt)
    sys.stdout.flush()
    return await loop.run_in_executor(None, sys.stdin.readline)

async def _read_guest_line(prompt: str) -> Optional[str]:
    """Line reader for the `input` builtin. None at end of input."""
    return strip_line(await ainput(prompt))

def _make_runner() -> ScriptRunner:
    # Guest output is streamed as it happens so interval ticks show up between prompts.
    evaluator = Evaluator(output=sys.stdout, input_reader=_read_guest_line)
    return ScriptRunner(evaluator=evaluator)

async def run_script_file(file_path: str):
    """Run a Monkey script file non-interactively and exit with appropriate status."""
    runner = _make_runner()
    printer = Printer()
    p = Path(file_path)
    try:
        source = p.read_text(encoding="utf-8")
    except FileNotFoundError:
        print(f"Error: file not found: {file_path}", file=sys.stderr)
        raise SystemExit(1)
    result = await runner.handle_script(source)
    if result.status == 'error':
        runner.cancel_timers()
        print(result.format_error(), file=sys.stderr)
        raise SystemExit(1)
    line = printer.format_result(result.value)
    if line is not None:
        print(line)
    # Live intervals keep the script running until they are cleared.
    await runner.wait_for_timers()

async def main():
    """Run a script file when provided, otherwise start the interactive REPL."""
    if len(sys.argv) > 1:
        arg = sys.argv[1]
        if not arg.startswith("-"):
            await run_script_file(arg)
            return

    print("Monkey REPL v0.1")
    print("Type 'exit' or press Ctrl+D to quit.")

    runner = _make_runner()
    printer = Printer()

    try:
        while True:
            raw = await ainput(">> ")
            if raw == "":
                print("\nExiting.")
                break
            line = raw.strip()

            if not line:
                continue
            if line == "exit":
                break

            result = await runner.handle_script(line)

            if result.status == 'error':
                print(result.format_error(), file=sys.stderr)
                continue

            shown = printer.format_result(result.value)
            if shown is not None:
                print(shown)
    finally:
        runner.cancel_timers()

def run():
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        print("\nExiting.")

if __name__ == "__main__":
    run()
