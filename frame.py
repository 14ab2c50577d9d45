"""
Rascal scope model
A Frame is one lexical scope; the FrameStack is the LIFO sequence of active
frames for one interpreter.
"""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional, Tuple

from values import FunctionValue, Value


MUTABLE = "mutable"
IMMUTABLE = "immutable"


@dataclass
class Frame:
  """Bindings of one scope, split by mutability and by ownership.

  Own tables hold names declared in this scope. Inherited tables are a
  flattened view of everything visible from the enclosing scopes at the time
  the frame was created.
  """
  mutables: Dict[str, Value] = field(default_factory=dict)
  immutables: Dict[str, Value] = field(default_factory=dict)
  inherited_mutables: Dict[str, Value] = field(default_factory=dict)
  inherited_immutables: Dict[str, Value] = field(default_factory=dict)
  functions: Dict[str, FunctionValue] = field(default_factory=dict)
  inherited_functions: Dict[str, FunctionValue] = field(default_factory=dict)

  # -- Queries --------------------------------------------------------

  def has(self, name: str) -> bool:
    """True when the name is declared in this frame's own tables"""
    return name in self.immutables or name in self.mutables

  def declares(self, name: str) -> bool:
    """True when this frame itself binds the name as a variable or function"""
    return self.has(name) or name in self.functions

  def resolve(self, name: str) -> Optional[Tuple[str, Value]]:
    """Find a binding as (mutability, value) following the lookup order"""
    if name in self.immutables:
      return IMMUTABLE, self.immutables[name]
    if name in self.mutables:
      return MUTABLE, self.mutables[name]
    if name in self.inherited_immutables:
      return IMMUTABLE, self.inherited_immutables[name]
    if name in self.inherited_mutables:
      return MUTABLE, self.inherited_mutables[name]
    return None

  def get(self, name: str) -> Optional[Value]:
    found = self.resolve(name)
    return found[1] if found else None

  def is_visible(self, name: str) -> bool:
    return self.resolve(name) is not None

  def is_immutable(self, name: str) -> bool:
    found = self.resolve(name)
    return found is not None and found[0] == IMMUTABLE

  def is_mutable(self, name: str) -> bool:
    found = self.resolve(name)
    return found is not None and found[0] == MUTABLE

  def get_function(self, name: str) -> Optional[FunctionValue]:
    if name in self.functions:
      return self.functions[name]
    return self.inherited_functions.get(name)

  # -- Declarations ---------------------------------------------------

  def declare_mutable(self, name: str, value: Value) -> None:
    self.mutables[name] = value

  def declare_immutable(self, name: str, value: Value) -> None:
    self.immutables[name] = value

  def declare_function(self, name: str, function: FunctionValue) -> None:
    self.functions[name] = function

  def assign(self, name: str, value: Value) -> None:
    """Write a mutable binding into this frame, shadowing inherited ones"""
    self.mutables[name] = value

  # -- Scoping --------------------------------------------------------

  def snapshot(self) -> "Frame":
    """New child frame whose inherited tables see everything visible here"""
    inherited_mutables = dict(self.inherited_mutables)
    inherited_immutables = dict(self.inherited_immutables)
    for name, value in self.mutables.items():
      inherited_immutables.pop(name, None)
      inherited_mutables[name] = value
    for name, value in self.immutables.items():
      inherited_mutables.pop(name, None)
      inherited_immutables[name] = value
    return Frame(
        inherited_mutables=inherited_mutables,
        inherited_immutables=inherited_immutables,
        inherited_functions={**self.inherited_functions, **self.functions},
    )

  def bindings(self) -> Iterator[Tuple[str, str, Value]]:
    """Yield (name, mutability, value) for every visible variable"""
    seen = set()
    for mutability, table in ((IMMUTABLE, self.immutables),
                              (MUTABLE, self.mutables),
                              (IMMUTABLE, self.inherited_immutables),
                              (MUTABLE, self.inherited_mutables)):
      for name, value in table.items():
        if name not in seen:
          seen.add(name)
          yield name, mutability, value


class FrameStack:
  """Non-empty LIFO stack of frames; the bottom frame is the global scope"""

  def __init__(self, debug: bool = False):
    self.debug = debug
    self._frames: List[Frame] = [Frame()]

  def __len__(self) -> int:
    return len(self._frames)

  @property
  def current(self) -> Frame:
    return self._frames[-1]

  @property
  def global_frame(self) -> Frame:
    return self._frames[0]

  def push(self, frame: Optional[Frame] = None) -> Frame:
    """Push a frame, by default a snapshot of the current one"""
    if frame is None:
      frame = self.current.snapshot()
    self._frames.append(frame)
    if self.debug:
      print(f"Frame push: depth {len(self._frames)}")
    return frame

  def pop(self) -> Frame:
    """Pop the current frame and write its mutations back.

    Every own-mutable binding of the popped frame whose name is visible as
    a mutable binding in the new current frame is copied into that frame's
    own-mutable table.
    """
    if len(self._frames) == 1:
      raise IndexError("cannot pop the global frame")
    old = self._frames.pop()
    current = self.current
    for name, value in old.mutables.items():
      if current.is_mutable(name):
        current.assign(name, value)
    if self.debug:
      print(f"Frame pop: depth {len(self._frames)}")
    return old

  def unwind(self, depth: int) -> None:
    """Discard frames above the given depth without writing anything back"""
    depth = max(1, depth)
    del self._frames[depth:]

  def reset(self) -> None:
    self._frames = [Frame()]
