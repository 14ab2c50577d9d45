"""
Block, conditional and loop tests
Scoping and write-back of mutations through begin/end blocks
"""

import pytest

from error_handling import AlreadyDefinedError, UnknownNameError
from interpreter import evaluate


class TestBlocks:
  """Test blocks end to end"""

  def test_simple_block(self):
    assert evaluate("begin mut x=10; mut y=x+5; return y+5 end") == "20"

  def test_brace_block(self):
    assert evaluate("{ mut x = 2; x * 3 }") == "6"

  def test_last_statement_wins(self):
    """Return does not end the block early"""
    assert evaluate("begin return 1; 2 end") == "2"

  def test_trailing_separator_yields_nil(self):
    assert evaluate("begin 1; end") == ""

  def test_nested_blocks(self):
    source = """
    begin
      mut x = 1;
      begin
        mut y = x + 1;
        begin
          return x + y
        end
      end
    end
    """
    assert evaluate(source) == "3"

  def test_mutation_escapes_block(self):
    assert evaluate("mut y=0; begin y=1 end; return y") == "1"

  def test_mutation_escapes_nested_blocks(self):
    assert evaluate("mut y = 0; begin begin begin y = 5 end end end; y") == "5"

  def test_locals_do_not_escape(self, interpreter):
    with pytest.raises(UnknownNameError):
      interpreter.run("begin mut x = 0; begin let y = 1 end; return y end")

  def test_shadowing_local_is_discarded(self):
    """A block-local immutable hides the outer name and leaves it untouched"""
    assert evaluate("mut y = 1; begin let y = 2; y end; y") == "1"

  def test_shadowing_local_value(self):
    assert evaluate("mut y = 1; begin let y = 2; y end") == "2"

  def test_redeclare_in_inner_block_is_allowed(self):
    assert evaluate("let x = 1; begin let x = 2; x end") == "2"

  def test_redeclare_in_same_block(self, interpreter):
    with pytest.raises(AlreadyDefinedError):
      interpreter.run("begin mut x = 1; mut x = 2 end")


class TestConditionals:
  """Test if/else"""

  def test_if_true(self):
    assert evaluate("mut y = 0; if true begin y = 4 else y = 10 end; y") == "4"

  def test_if_false(self):
    assert evaluate("mut y = 0; if false begin y = 4 else y = 10 end; y") == "10"

  def test_if_without_else_yields_nil(self):
    assert evaluate("if 1 == 2 begin 5 end") == ""

  def test_if_yields_branch_value(self):
    assert evaluate("if 1 < 2 begin 5 else 6 end") == "5"

  def test_if_with_comparison(self):
    source = "mut x = 3; mut r = 0; if x > 2 and x < 5 begin r = 1 end; r"
    assert evaluate(source) == "1"

  def test_branch_locals_stay_local(self, interpreter):
    with pytest.raises(UnknownNameError):
      interpreter.run("if true begin mut z = 1 end; z")


class TestLoops:
  """Test while"""

  def test_while_loop(self):
    assert evaluate("mut y = 0; while y < 4 begin y = y + 1 end; y") == "4"

  def test_loop_yields_nil(self):
    assert evaluate("mut y = 0; while y < 4 begin y = y + 1 end") == ""

  def test_loop_never_runs(self):
    assert evaluate("mut y = 7; while false begin y = 0 end; y") == "7"

  def test_loop_accumulates(self):
    source = """
    mut total = 0;
    mut i = 1;
    while i < 6 begin
      total = total + i;
      i = i + 1
    end;
    total
    """
    assert evaluate(source) == "15"

  def test_nested_loops(self):
    source = """
    mut count = 0;
    mut i = 0;
    while i < 3 begin
      mut j = 0;
      while j < 4 begin
        count = count + 1;
        j = j + 1
      end;
      i = i + 1
    end;
    count
    """
    assert evaluate(source) == "12"
