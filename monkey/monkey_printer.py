"""
Formats Monkey values, syntax trees and error reports for people to read.
"""
from typing import List, Optional

import pystache

from monkey.monkey_ast import Node
from monkey.monkey_objects import VOID, Object

MONKEY_FACE = r'''
            __,__
   .--.  .-"     "-.  .--.
  / .. \/  .-. .-.  \/ .. \
 | |  '|  /   Y   \  |'  | |
 | \   \  \ 0 | 0 /  /   / |
  \ '- ,\.-"""""""-./, -' /
   ''-' /_   ^ ^   _\ '-''
       |  \._   _./  |
       \   \ '~' /   /
        '._ '-=-' _.'
           '-----'
'''.strip("\n")

PARSE_ERRORS_TEMPLATE = """{{face}}

Woops! We ran into some monkey business here!
parser errors:
{{#errors}}
\t{{.}}
{{/errors}}"""


class Printer:
    """Renders results for the REPL and the script runner."""

    def __init__(self, show_face: bool = True):
        self.show_face = show_face
        # Source text and messages are shown verbatim, never HTML-escaped.
        self._renderer = pystache.Renderer(escape=lambda u: u)

    def pformat(self, obj) -> str:
        """Public entry point to format a value or a syntax tree."""
        match obj:
            case Object():
                return obj.inspect()
            case Node():
                return str(obj)
            case None:
                return ""
            case _:
                return repr(obj)

    def format_result(self, value: Optional[Object]) -> Optional[str]:
        """The REPL line for an evaluation result, or None when nothing should be shown."""
        if value is None or value is VOID:
            return None
        return self.pformat(value)

    def format_parse_errors(self, errors: List[str]) -> str:
        context = {
            "face": MONKEY_FACE if self.show_face else "",
            "errors": list(errors),
        }
        return self._renderer.render(PARSE_ERRORS_TEMPLATE, context).strip("\n")
