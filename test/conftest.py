"""
Test configuration for the Rascal interpreter tests
"""

import pytest
import sys
from pathlib import Path

# Add the project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from interpreter import create_interpreter
from parsing import create_parser


@pytest.fixture
def parser():
  """Provide a fresh parser for each test"""
  return create_parser()


@pytest.fixture
def interpreter():
  """Provide a fresh interpreter for each test"""
  with create_interpreter() as instance:
    yield instance


@pytest.fixture
def examples_dir():
  """Get the examples directory path"""
  return project_root / "examples"
