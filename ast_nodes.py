"""
Rascal Abstract Syntax Tree
One frozen dataclass per syntactic construct. Children are owned by value
and equality is structural, so trees compare by shape.
"""

from dataclasses import dataclass
from typing import Iterable, Iterator, Optional, Tuple, Union

from values import Value


# ============================================================================
# NODE VARIANTS
# ============================================================================

@dataclass(frozen=True)
class Program:
  statements: Tuple["Node", ...]


@dataclass(frozen=True)
class Identifier:
  name: str


@dataclass(frozen=True)
class Constant:
  value: Value


@dataclass(frozen=True)
class Binary:
  operator: str
  left: "Node"
  right: "Node"


@dataclass(frozen=True)
class Comparison:
  operator: str
  left: "Node"
  right: "Node"


@dataclass(frozen=True)
class Unary:
  operator: str
  operand: "Node"


@dataclass(frozen=True)
class DefineImut:
  name: str
  expr: "Node"


@dataclass(frozen=True)
class DefineVar:
  name: str
  expr: "Node"


@dataclass(frozen=True)
class ReAssign:
  name: str
  expr: "Node"


@dataclass(frozen=True)
class IfElse:
  condition: "Node"
  then_branch: "Node"
  else_branch: "Node"


@dataclass(frozen=True)
class Loop:
  condition: "Node"
  body: "Node"


@dataclass(frozen=True)
class Block:
  statements: Tuple["Node", ...]


@dataclass(frozen=True)
class DefineFunc:
  name: str
  params: Tuple[str, ...]
  body: "Node"


@dataclass(frozen=True)
class CallFunc:
  name: str
  args: Tuple["Node", ...]


@dataclass(frozen=True)
class Return:
  expr: "Node"


@dataclass(frozen=True)
class Print:
  expr: "Node"


@dataclass(frozen=True)
class Empty:
  pass


Node = Union[
    Program, Identifier, Constant, Binary, Comparison, Unary, DefineImut,
    DefineVar, ReAssign, IfElse, Loop, Block, DefineFunc, CallFunc, Return,
    Print, Empty,
]


# ============================================================================
# BUILDERS (allocation only, no validation)
# ============================================================================

def program(statements: Iterable[Node]) -> Program:
  return Program(tuple(statements))


def identifier(name: str) -> Identifier:
  return Identifier(name)


def constant(value: Value) -> Constant:
  return Constant(value)


def binary(left: Node, operator: str, right: Node) -> Binary:
  return Binary(operator, left, right)


def comparison(left: Node, operator: str, right: Node) -> Comparison:
  return Comparison(operator, left, right)


def unary(operator: str, operand: Node) -> Unary:
  return Unary(operator, operand)


def define_immutable(name: str, expr: Node) -> DefineImut:
  return DefineImut(name, expr)


def define_mutable(name: str, expr: Node) -> DefineVar:
  return DefineVar(name, expr)


def reassign(name: str, expr: Node) -> ReAssign:
  return ReAssign(name, expr)


def ifelse(condition: Node, then_branch: Node, else_branch: Optional[Node] = None) -> IfElse:
  return IfElse(condition, then_branch, else_branch if else_branch is not None else empty())


def loop(condition: Node, body: Node) -> Loop:
  return Loop(condition, body)


def block(statements: Iterable[Node]) -> Block:
  return Block(tuple(statements))


def define_function(name: str, params: Iterable[str], body: Node) -> DefineFunc:
  return DefineFunc(name, tuple(params), body)


def call_function(name: str, args: Iterable[Node]) -> CallFunc:
  return CallFunc(name, tuple(args))


def return_(expr: Node) -> Return:
  return Return(expr)


def print_(expr: Node) -> Print:
  return Print(expr)


def empty() -> Empty:
  return Empty()


# ============================================================================
# TRAVERSAL
# ============================================================================

def children(node: Node) -> Iterator[Node]:
  """Yield the direct child nodes of a node in evaluation order"""
  if isinstance(node, (Program, Block)):
    yield from node.statements
  elif isinstance(node, (Binary, Comparison)):
    yield node.left
    yield node.right
  elif isinstance(node, Unary):
    yield node.operand
  elif isinstance(node, (DefineImut, DefineVar, ReAssign, Return, Print)):
    yield node.expr
  elif isinstance(node, IfElse):
    yield node.condition
    yield node.then_branch
    yield node.else_branch
  elif isinstance(node, Loop):
    yield node.condition
    yield node.body
  elif isinstance(node, DefineFunc):
    yield node.body
  elif isinstance(node, CallFunc):
    yield from node.args


def node_label(node: Node) -> str:
  """One-line description of a node without its children"""
  kind = type(node).__name__
  if isinstance(node, Identifier):
    return f"{kind}({node.name})"
  if isinstance(node, Constant):
    return f"{kind}({node.value.type_name} {node.value})"
  if isinstance(node, (Binary, Comparison, Unary)):
    return f"{kind}({node.operator})"
  if isinstance(node, (DefineImut, DefineVar, ReAssign, CallFunc)):
    return f"{kind}({node.name})"
  if isinstance(node, DefineFunc):
    return f"{kind}({node.name} [{', '.join(node.params)}])"
  return kind
