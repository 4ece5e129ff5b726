"""
Lexical scopes for the Monkey evaluator.
"""
from typing import Dict, Optional

from monkey.monkey_objects import Object


class Environment:
    """A frame of name bindings chained to its enclosing frame.

    Lookups walk outward through `outer`; writes through `set` always land
    in this frame. A closure holds a live reference to its defining frame,
    so later writes to that frame (new names included) stay visible to it.
    """

    def __init__(self, outer: Optional["Environment"] = None):
        self.store: Dict[str, Object] = {}
        self.outer = outer

    def get(self, name: str) -> Optional[Object]:
        """Returns the bound value, or None when no frame in the chain binds `name`."""
        owner = self.find_owner(name)
        if owner is None:
            return None
        return owner.store[name]

    def set(self, name: str, value: Object) -> Object:
        self.store[name] = value
        return value

    def find_owner(self, name: str) -> Optional["Environment"]:
        """Finds the innermost frame in the chain that binds `name`."""
        env: Optional[Environment] = self
        while env is not None:
            if name in env.store:
                return env
            env = env.outer
        return None

    def root(self) -> "Environment":
        """The global frame at the end of the chain."""
        env = self
        while env.outer is not None:
            env = env.outer
        return env

    def __contains__(self, name: str) -> bool:
        return self.find_owner(name) is not None

    def __repr__(self) -> str:
        keys = ", ".join(self.store.keys())
        outer_id = f", outer=#{id(self.outer)}" if self.outer else ""
        return f"<Environment bindings=[{keys}]{outer_id}>"


def new_environment() -> Environment:
    """Creates a global environment: a frame without an outer frame."""
    return Environment()


def new_enclosed_environment(outer: Environment) -> Environment:
    return Environment(outer)
