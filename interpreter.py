"""
Rascal Interpreter
Tree-walking evaluation functions over the AST. Each eval_* function takes
the node, the Frame Stack it runs against, the debug flag and an execution
context, and returns a Value.
"""

from typing import Dict, List, Optional, TextIO, Tuple

import ast_nodes
from ast_nodes import Node
from error_handling import (
  AlreadyDefinedError,
  ArityMismatchError,
  ImmutableReassignError,
  NotCallableError,
  RascalError,
  RascalRuntimeError,
  RecursionLimitError,
  UndeclaredNameError,
  UnknownNameError,
)
from frame import FrameStack
from parsing import RascalParser, create_debug_parser, create_parser
from stdlib import rascal_print, rascal_show
from utilities import (
  binary_arithmetic_op,
  binary_comparison_op,
  is_truthy,
  unary_arithmetic_op,
)
from values import NIL, FunctionValue, Value


def make_execution_context(output: Optional[TextIO] = None) -> Dict:
  """Create the context dictionary threaded through evaluation"""
  return {
      'output': output,
  }


# ============================================================================
# EVALUATION FUNCTIONS
# ============================================================================

def eval_ast(node: Node, stack: FrameStack, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """
  Evaluate an AST node against the current frame of the stack.
  Faults propagate as RascalError; the caller restores the stack.
  """
  if context is None:
    context = make_execution_context()

  if debug:
    print(f"Evaluating: {ast_nodes.node_label(node)}")

  if isinstance(node, ast_nodes.Constant):
    return node.value
  elif isinstance(node, ast_nodes.Identifier):
    return eval_identifier(node, stack, debug, context)
  elif isinstance(node, ast_nodes.Binary):
    return eval_binary(node, stack, debug, context)
  elif isinstance(node, ast_nodes.Comparison):
    return eval_comparison(node, stack, debug, context)
  elif isinstance(node, ast_nodes.Unary):
    return unary_arithmetic_op(node.operator, eval_ast(node.operand, stack, debug, context))
  elif isinstance(node, (ast_nodes.DefineImut, ast_nodes.DefineVar)):
    return eval_declaration(node, stack, debug, context)
  elif isinstance(node, ast_nodes.ReAssign):
    return eval_reassign(node, stack, debug, context)
  elif isinstance(node, ast_nodes.IfElse):
    return eval_ifelse(node, stack, debug, context)
  elif isinstance(node, ast_nodes.Loop):
    return eval_loop(node, stack, debug, context)
  elif isinstance(node, ast_nodes.Block):
    return eval_block(node, stack, debug, context)
  elif isinstance(node, ast_nodes.Program):
    return eval_statements(node.statements, stack, debug, context)
  elif isinstance(node, ast_nodes.DefineFunc):
    return eval_function_def(node, stack, debug, context)
  elif isinstance(node, ast_nodes.CallFunc):
    return eval_function_call(node, stack, debug, context)
  elif isinstance(node, ast_nodes.Return):
    # Pass-through: sibling statements still run
    return eval_ast(node.expr, stack, debug, context)
  elif isinstance(node, ast_nodes.Print):
    return rascal_print(eval_ast(node.expr, stack, debug, context), context['output'])
  elif isinstance(node, ast_nodes.Empty):
    return NIL
  else:
    raise RascalRuntimeError(f"Interpreter error: unknown node {type(node).__name__}")


def eval_identifier(node: ast_nodes.Identifier, stack: FrameStack, debug: bool = False,
                    context: Optional[Dict] = None) -> Value:
  """Variables first, then functions referenced by name"""
  value = stack.current.get(node.name)
  if value is not None:
    return value
  function = stack.current.get_function(node.name)
  if function is not None:
    return function
  raise UnknownNameError(node.name)


def eval_binary(node: ast_nodes.Binary, stack: FrameStack, debug: bool = False,
                context: Optional[Dict] = None) -> Value:
  left = eval_ast(node.left, stack, debug, context)
  right = eval_ast(node.right, stack, debug, context)
  return binary_arithmetic_op(node.operator, left, right)


def eval_comparison(node: ast_nodes.Comparison, stack: FrameStack, debug: bool = False,
                    context: Optional[Dict] = None) -> Value:
  # Both sides always run; and/or do not short-circuit
  left = eval_ast(node.left, stack, debug, context)
  right = eval_ast(node.right, stack, debug, context)
  return binary_comparison_op(node.operator, left, right)


def eval_declaration(node, stack: FrameStack, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """mut yields the bound value, let yields Nil"""
  value = eval_ast(node.expr, stack, debug, context)
  frame = stack.current
  if frame.declares(node.name):
    raise AlreadyDefinedError(node.name)
  if isinstance(node, ast_nodes.DefineVar):
    frame.declare_mutable(node.name, value)
    return value
  frame.declare_immutable(node.name, value)
  return NIL


def eval_reassign(node: ast_nodes.ReAssign, stack: FrameStack, debug: bool = False,
                  context: Optional[Dict] = None) -> Value:
  frame = stack.current
  if not frame.is_visible(node.name):
    raise UndeclaredNameError(node.name)
  if frame.is_immutable(node.name):
    raise ImmutableReassignError(node.name)
  value = eval_ast(node.expr, stack, debug, context)
  stack.current.assign(node.name, value)
  return NIL


def eval_function_def(node: ast_nodes.DefineFunc, stack: FrameStack, debug: bool = False,
                      context: Optional[Dict] = None) -> Value:
  frame = stack.current
  if frame.declares(node.name):
    raise AlreadyDefinedError(node.name)
  frame.declare_function(node.name, FunctionValue(node.name, node.params, node.body))
  return NIL


def eval_statements(statements, stack: FrameStack, debug: bool = False, context: Optional[Dict] = None) -> Value:
  """Run statements in order; the last statement's value wins"""
  result: Value = NIL
  for statement in statements:
    result = eval_ast(statement, stack, debug, context)
  return result


def eval_block(node: ast_nodes.Block, stack: FrameStack, debug: bool = False,
               context: Optional[Dict] = None) -> Value:
  stack.push()
  result = eval_statements(node.statements, stack, debug, context)
  stack.pop()
  return result


def eval_ifelse(node: ast_nodes.IfElse, stack: FrameStack, debug: bool = False,
                context: Optional[Dict] = None) -> Value:
  if is_truthy(eval_ast(node.condition, stack, debug, context)):
    return eval_ast(node.then_branch, stack, debug, context)
  return eval_ast(node.else_branch, stack, debug, context)


def eval_loop(node: ast_nodes.Loop, stack: FrameStack, debug: bool = False,
              context: Optional[Dict] = None) -> Value:
  while is_truthy(eval_ast(node.condition, stack, debug, context)):
    eval_ast(node.body, stack, debug, context)
  return NIL


def resolve_callable(name: str, stack: FrameStack) -> FunctionValue:
  """Find a declared function, or a variable holding a function"""
  function = stack.current.get_function(name)
  if function is None:
    value = stack.current.get(name)
    if isinstance(value, FunctionValue):
      function = value
  if function is None:
    raise NotCallableError(name)
  return function


def eval_function_call(node: ast_nodes.CallFunc, stack: FrameStack, debug: bool = False,
                       context: Optional[Dict] = None) -> Value:
  """
  Call with the caller's frame as environment.
  Arguments are evaluated in the caller's frame, then bound as mutable
  locals of a snapshot of that same frame.
  """
  function = resolve_callable(node.name, stack)
  if len(node.args) != function.arity:
    raise ArityMismatchError(node.name, function.arity, len(node.args))
  args = [eval_ast(arg, stack, debug, context) for arg in node.args]

  frame = stack.push()
  for param, value in zip(function.params, args):
    if frame.has(param):
      raise AlreadyDefinedError(param)
    frame.declare_mutable(param, value)
  result = eval_ast(function.body, stack, debug, context)
  stack.pop()
  return result


# ============================================================================
# INTERPRETER
# ============================================================================

class RascalInterpreter:
  """Owns one Frame Stack across evaluations.

  `evaluate` builds on whatever earlier calls declared in the global frame,
  which is what the REPL relies on. A fault discards the frames pushed by
  the failing evaluation.
  """

  def __init__(self, debug: bool = False, output: Optional[TextIO] = None,
               parser: Optional[RascalParser] = None):
    self.debug = debug
    self.parser = parser if parser is not None else create_parser(debug)
    self.stack = FrameStack(debug)
    self.context = make_execution_context(output)
    self.closed = False

  def __enter__(self) -> "RascalInterpreter":
    return self

  def __exit__(self, exc_type, exc, tb) -> None:
    self.close()

  def close(self) -> None:
    """Drop every binding; the instance cannot be used afterwards"""
    self.stack.reset()
    self.closed = True

  def evaluate(self, source: str) -> str:
    """Tokenize, parse and evaluate source, returning the result string.

    A fault is returned as its message instead of being raised.
    """
    try:
      return self.run(source)
    except RascalError as e:
      if self.debug:
        print(f"{e.category}: {e.message}")
      return e.message

  def run(self, source: str) -> str:
    """Like evaluate, but faults propagate as RascalError"""
    try:
      tree = self.parser.parse_string(source)
    except RecursionError as e:
      raise RecursionLimitError() from e
    return self.eval(tree)

  def eval(self, tree: Node) -> str:
    return rascal_show(self.execute(tree))

  def execute(self, tree: Node) -> Value:
    """Evaluate a tree to a Value, restoring the stack depth on faults"""
    if self.closed:
      raise RuntimeError("interpreter is closed")
    depth = len(self.stack)
    try:
      return eval_ast(tree, self.stack, self.debug, self.context)
    except RecursionError as e:
      self.stack.unwind(depth)
      raise RecursionLimitError() from e
    except RascalError:
      self.stack.unwind(depth)
      raise

  def global_bindings(self) -> List[Tuple[str, str, Value]]:
    """(name, kind, value) for everything declared in the global frame"""
    frame = self.stack.global_frame
    entries = list(frame.bindings())
    entries.extend((name, "function", function) for name, function in frame.functions.items())
    return sorted(entries, key=lambda entry: entry[0])


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(debug: bool = False, output: Optional[TextIO] = None) -> RascalInterpreter:
  """Factory function returning an interpreter"""
  return RascalInterpreter(debug=debug, output=output)


def create_debug_interpreter(output: Optional[TextIO] = None) -> RascalInterpreter:
  """Factory function returning an interpreter that traces evaluation"""
  return RascalInterpreter(debug=True, output=output, parser=create_debug_parser())


def evaluate(source: str, debug: bool = False) -> str:
  """Evaluate source with a fresh interpreter and return the result string"""
  interpreter = create_debug_interpreter() if debug else create_interpreter()
  with interpreter:
    return interpreter.evaluate(source)
