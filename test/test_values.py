"""
Runtime value tests
"""

import pytest

import ast_nodes as ast
from values import NIL, FunctionValue, NilValue, make_boolean, make_integer, value_from_token


class TestValues:
  """String forms and literal conversion"""

  def test_string_forms(self):
    assert str(make_integer(-12)) == "-12"
    assert str(make_boolean(False)) == "false"
    assert str(FunctionValue("f", ("x",), ast.block([]))) == "function"
    assert str(NIL) == ""

  def test_nil_is_singleton(self):
    assert NilValue() is NIL

  def test_integer_and_boolean_differ(self):
    assert make_integer(1) != make_boolean(True)

  def test_value_from_token(self):
    assert value_from_token("INTEGER", "42") == make_integer(42)
    assert value_from_token("BOOLEAN", "true") == make_boolean(True)
    with pytest.raises(ValueError):
      value_from_token("ID", "x")
