"""
Scope model tests
Lookup order, snapshots, write-back on pop and unwinding
"""

import pytest

import ast_nodes as ast
from frame import IMMUTABLE, MUTABLE, Frame, FrameStack
from values import FunctionValue, make_integer


class TestFrame:
  """Lookup inside a single frame"""

  def test_own_immutable_wins(self):
    frame = Frame(
      mutables={"x": make_integer(1)},
      immutables={"x": make_integer(2)},
      inherited_mutables={"x": make_integer(3)},
    )
    assert frame.resolve("x") == (IMMUTABLE, make_integer(2))

  def test_own_shadows_inherited(self):
    frame = Frame(mutables={"x": make_integer(1)}, inherited_immutables={"x": make_integer(2)})
    assert frame.is_mutable("x")
    assert frame.get("x") == make_integer(1)

  def test_inherited_immutable_before_inherited_mutable(self):
    frame = Frame(
      inherited_mutables={"x": make_integer(1)},
      inherited_immutables={"x": make_integer(2)},
    )
    assert frame.is_immutable("x")

  def test_missing_name(self):
    frame = Frame()
    assert frame.resolve("x") is None
    assert not frame.is_visible("x")
    assert not frame.is_mutable("x")

  def test_has_only_checks_own_tables(self):
    frame = Frame(inherited_mutables={"x": make_integer(1)})
    assert not frame.has("x")
    frame.declare_immutable("y", make_integer(2))
    assert frame.has("y")

  def test_snapshot_flattens_visible_names(self):
    parent = Frame(
      mutables={"a": make_integer(1)},
      immutables={"b": make_integer(2)},
      inherited_immutables={"a": make_integer(9)},
    )
    child = parent.snapshot()
    assert child.mutables == {} and child.immutables == {}
    assert child.resolve("a") == (MUTABLE, make_integer(1))
    assert child.resolve("b") == (IMMUTABLE, make_integer(2))

  def test_snapshot_inherits_functions(self):
    f = FunctionValue("f", (), ast.block([]))
    parent = Frame()
    parent.declare_function("f", f)
    child = parent.snapshot()
    child.declare_function("g", f)
    assert "g" not in parent.functions
    assert "f" not in child.functions
    assert child.get_function("f") is f
    assert not child.declares("f")

  def test_own_function_shadows_inherited(self):
    outer = FunctionValue("f", (), ast.block([]))
    inner = FunctionValue("f", ("x",), ast.block([]))
    frame = Frame(inherited_functions={"f": outer})
    frame.declare_function("f", inner)
    assert frame.get_function("f") is inner

  def test_declares_covers_variables_and_functions(self):
    frame = Frame(inherited_mutables={"x": make_integer(1)})
    frame.declare_function("f", FunctionValue("f", (), ast.block([])))
    assert frame.declares("f")
    assert not frame.declares("x")

  def test_bindings_follow_lookup_order(self):
    frame = Frame(mutables={"x": make_integer(1)}, inherited_immutables={"x": make_integer(2)})
    assert list(frame.bindings()) == [("x", MUTABLE, make_integer(1))]


class TestFrameStack:
  """Push, pop and unwind"""

  def test_starts_with_global_frame(self):
    stack = FrameStack()
    assert len(stack) == 1
    assert stack.current is stack.global_frame

  def test_cannot_pop_global_frame(self):
    with pytest.raises(IndexError):
      FrameStack().pop()

  def test_pop_writes_back_mutations(self):
    stack = FrameStack()
    stack.global_frame.declare_mutable("y", make_integer(0))
    stack.push().assign("y", make_integer(1))
    stack.pop()
    assert stack.current.get("y") == make_integer(1)

  def test_pop_drops_locals(self):
    stack = FrameStack()
    stack.push().declare_mutable("z", make_integer(1))
    stack.pop()
    assert not stack.current.is_visible("z")

  def test_pop_never_overwrites_immutables(self):
    stack = FrameStack()
    stack.global_frame.declare_immutable("y", make_integer(0))
    stack.push().declare_mutable("y", make_integer(5))
    stack.pop()
    assert stack.current.resolve("y") == (IMMUTABLE, make_integer(0))

  def test_write_back_through_nested_frames(self):
    stack = FrameStack()
    stack.global_frame.declare_mutable("y", make_integer(0))
    stack.push()
    stack.push().assign("y", make_integer(7))
    stack.pop()
    stack.pop()
    assert stack.global_frame.mutables["y"] == make_integer(7)

  def test_unwind_discards_without_write_back(self):
    stack = FrameStack()
    stack.global_frame.declare_mutable("y", make_integer(0))
    stack.push()
    stack.push().assign("y", make_integer(3))
    stack.unwind(1)
    assert len(stack) == 1
    assert stack.current.get("y") == make_integer(0)

  def test_unwind_keeps_global_frame(self):
    stack = FrameStack()
    stack.unwind(0)
    assert len(stack) == 1

  def test_reset(self):
    stack = FrameStack()
    stack.global_frame.declare_mutable("x", make_integer(1))
    stack.push()
    stack.reset()
    assert len(stack) == 1
    assert not stack.current.is_visible("x")

  def test_debug_output(self, capsys):
    stack = FrameStack(debug=True)
    stack.push()
    stack.pop()
    out = capsys.readouterr().out
    assert "Frame push: depth 2" in out
    assert "Frame pop: depth 1" in out
