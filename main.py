"""
Rascal Programming Language - Main Entry Point
Runs a source file, opens the REPL, or dumps the parsed tree
"""

import sys
import argparse
from pathlib import Path
from typing import Callable, List, Optional
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from error_handling import RascalError, format_error_report, make_error_report
from interpreter import RascalInterpreter, create_debug_interpreter, create_interpreter
from parsing import create_debug_parser, create_parser, pretty_print_ast


VERSION = "0.1.0"
HISTORY_FILE = "~/.rascal_history"
PROMPT = "rascal> "


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      prog='rascal',
      description='Rascal - a small scripting language with a tree-walking interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s script.rl              # Run a Rascal script
  %(prog)s -r                     # Open the REPL
  %(prog)s --parse script.rl      # Parse and show the AST
  %(prog)s --debug script.rl      # Run with debug output
        """
  )

  parser.add_argument(
      'source',
      nargs='?',
      help='Rascal source file to execute'
  )

  parser.add_argument(
      '-r', '--repl',
      action='store_true',
      help='Open the REPL'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show the AST (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '-v', '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_source(script_path: str) -> str:
  """Read a script, exiting with a message when it cannot be read"""
  try:
    return Path(script_path).read_text(encoding='utf-8')
  except FileNotFoundError:
    print(f"Error: no such script '{script_path}'")
  except PermissionError:
    print(f"Error: cannot read '{script_path}' (permission denied)")
  except UnicodeDecodeError as e:
    print(f"Error: '{script_path}' is not UTF-8 text: {e}")
  except IsADirectoryError:
    print(f"Error: '{script_path}' is a directory")
  sys.exit(1)


def report_error(error: RascalError, source: str, script_path: str) -> None:
  print(f"Error in '{script_path}':")
  print(format_error_report(make_error_report(error, source)))


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a Rascal script file and show the AST"""
  source = read_source(script_path)
  parser = create_debug_parser() if debug else create_parser()
  try:
    tree = parser.parse_string(source)
  except RascalError as e:
    report_error(e, source, script_path)
    sys.exit(1)
  print(pretty_print_ast(tree), end='')


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Run a Rascal script file and print its result"""
  source = read_source(script_path)
  interpreter = create_debug_interpreter() if debug else create_interpreter()
  with interpreter:
    try:
      result = interpreter.run(source)
    except RascalError as e:
      report_error(e, source, script_path)
      sys.exit(1)
  print(f">> {result}")


def setup_readline() -> None:
  """Setup readline with history and keyword completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except (FileNotFoundError, PermissionError, OSError):
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  completions = [
      "begin", "end", "if", "else", "while", "return", "print",
      "fn", "mut", "var", "let", "true", "false", "and", "or",
      ":help", ":env", ":ast", "exit",
  ]

  def completer(text, state):
    options = [cmd for cmd in completions if cmd.startswith(text)]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def show_help() -> None:
  print("REPL Commands:")
  print("  :ast <source>     - Show the parsed AST")
  print("  :env              - Show global bindings")
  print("  :help             - Show this help")
  print("  exit              - Exit REPL")
  print()
  print("Language features:")
  print("  mut x = 5                      - Mutable variable")
  print("  let y = 10                     - Immutable variable")
  print("  fn add = [a, b] { a + b }      - Function definition")
  print("  add(1, 2)                      - Function call")
  print("  while x < 10 begin x = x + 1 end")
  print("  if x == 10 begin 1 else 0 end")
  print("  print x                        - Output")


def show_env(interpreter: RascalInterpreter) -> None:
  print("Current environment:")
  entries = interpreter.global_bindings()
  if not entries:
    print("  (no user-defined bindings)")
    return
  for name, kind, value in entries:
    print(f"  {name} = {value} ({kind})")


def run_interactive_mode(debug: bool = False, read_line: Optional[Callable[[str], str]] = None) -> None:
  """Run the REPL; declarations accumulate across lines"""
  print(f"Rascal {VERSION} - Interactive Mode")
  print("Type 'exit' to quit, ':help' for commands")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()
  parser = create_debug_parser() if debug else create_parser()
  if read_line is None:
    read_line = input

  interpreter = create_debug_interpreter() if debug else create_interpreter()
  with interpreter:
    while True:
      try:
        code = read_line(PROMPT)
      except (KeyboardInterrupt, EOFError):
        print("\nGoodbye!")
        break

      command = code.strip()
      if command == "exit":
        break
      if not command:
        continue

      if command == ":help":
        show_help()
        continue

      if command == ":env":
        show_env(interpreter)
        continue

      if command.startswith(":ast"):
        try:
          print(pretty_print_ast(parser.parse_string(command[4:])), end='')
        except RascalError as e:
          print(f"{e.category}: {e.message}")
        continue

      print(f">> {interpreter.evaluate(code)}")


def main(argv: Optional[List[str]] = None) -> None:
  """Main entry point for Rascal"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args(argv)

  if args.repl:
    run_interactive_mode(debug=args.debug)
    return

  if args.source:
    if args.parse:
      parse_file(args.source, debug=args.debug)
    else:
      run_script_file(args.source, debug=args.debug)
    return

  # No source and no flags: start the REPL
  run_interactive_mode(debug=args.debug)


if __name__ == "__main__":
  main()
