from monkey.monkey_environment import Environment, new_enclosed_environment, new_environment
from monkey.monkey_objects import Integer


def test_get_and_set():
    env = new_environment()
    assert env.get("x") is None
    assert env.set("x", Integer(1)) == Integer(1)
    assert env.get("x") == Integer(1)
    assert "x" in env
    assert "y" not in env


def test_lookup_walks_outward_and_set_is_local():
    outer = new_environment()
    outer.set("x", Integer(1))
    inner = new_enclosed_environment(outer)
    assert inner.get("x") == Integer(1)

    inner.set("x", Integer(2))
    assert inner.get("x") == Integer(2)
    assert outer.get("x") == Integer(1)


def test_closures_see_later_writes():
    outer = new_environment()
    inner = new_enclosed_environment(outer)
    outer.set("late", Integer(9))
    assert inner.get("late") == Integer(9)


def test_find_owner_and_root():
    root = new_environment()
    middle = new_enclosed_environment(root)
    leaf = new_enclosed_environment(middle)
    middle.set("m", Integer(1))

    assert leaf.find_owner("m") is middle
    assert leaf.find_owner("nope") is None
    assert leaf.root() is root
    assert root.root() is root


def test_sessions_are_independent():
    a, b = new_environment(), new_environment()
    a.set("x", Integer(1))
    assert b.get("x") is None
    assert isinstance(a, Environment) and a.outer is None
