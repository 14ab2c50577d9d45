"""
Rascal Standard Library
The single output primitive and value stringification
"""

import sys
from typing import Optional, TextIO

from values import NIL, NilValue, Value


# ============================================================================
# STRINGIFICATION
# ============================================================================

def rascal_show(value: Value) -> str:
  """Convert a value to its result-string form.

  Integer -> decimal digits, Boolean -> true/false, Function -> "function",
  Nil -> empty string.
  """
  return str(value)


# ============================================================================
# PRINT
# ============================================================================

def rascal_print(value: Value, stream: Optional[TextIO] = None) -> NilValue:
  """Print a value followed by a newline"""
  stream = stream if stream is not None else sys.stdout
  stream.write(rascal_show(value) + "\n")
  stream.flush()
  return NIL
