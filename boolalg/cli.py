#!/usr/bin/env python3
"""
boolalg Command-Line Interface

Provides interactive REPL, script execution, and pipe/filter modes.

Usage:
    boolalg                                # Start REPL
    boolalg script.bool                    # Run script
    boolalg -e "(or p (not p))"            # Simplify expression
    boolalg -l 2 -e "(and p (or q (not p)))"  # Deeper lookahead
    echo "(not (not p))" | boolalg         # Filter mode

Script Format (.bool files):
    #!/usr/bin/env boolalg
    :lookahead 2
    :disable term-distribution

    (or p (not p))
    (and p (or q (not p)))

REPL Commands:
    :help              Show help
    :lookahead N       Set lookahead depth
    :trace on|off      Toggle tracing
    :format NAME       Output format (sexpr, pretty)
    :rules             List rules
    :enable RULE       Enable rule
    :disable RULE      Disable rule
    :quit              Exit
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from . import __version__
from .expr import format_sexpr, from_sexpr, parse_sexpr, pretty_print
from .solver import BooleanAlgebraSolver

# Try to import readline for better REPL experience
try:
    import readline
    HAS_READLINE = True
except ImportError:
    HAS_READLINE = False

FORMATS = ["sexpr", "pretty"]

logger = logging.getLogger(__name__)


class BoolalgCompleter:
    """Tab completer for the boolalg REPL."""

    # Commands that can be completed
    COMMANDS = [
        ":help", ":quit", ":exit", ":q",
        ":lookahead", ":trace", ":format",
        ":rules", ":enable", ":disable",
    ]

    TRACE_OPTIONS = ["on", "off"]

    def __init__(self, repl: 'BoolalgREPL'):
        self.repl = repl

    def complete(self, text: str, state: int) -> Optional[str]:
        """Return the next possible completion for 'text'."""
        if state == 0:
            line = readline.get_line_buffer() if HAS_READLINE else ""
            self.matches = self._get_matches(text, line)

        try:
            return self.matches[state]
        except IndexError:
            return None

    def _get_matches(self, text: str, line: str) -> list:
        """Get list of matches for the current input."""
        line = line.lstrip()

        if line.startswith(":format "):
            return [f for f in FORMATS if f.startswith(text)]

        if line.startswith(":trace "):
            return [t for t in self.TRACE_OPTIONS if t.startswith(text)]

        if line.startswith(":enable ") or line.startswith(":disable "):
            return [r for r in self.repl.solver.catalogue.names() if r.startswith(text)]

        if text.startswith(":") or (line.startswith(":") and " " not in line):
            return [c for c in self.COMMANDS if c.startswith(text)]

        return []


def count_parens(text: str) -> int:
    """Count unbalanced parentheses. Returns >0 if more open than close."""
    depth = 0
    for c in text:
        if c == '(':
            depth += 1
        elif c == ')':
            depth -= 1
    return depth


class BoolalgREPL:
    """Interactive REPL for boolalg."""

    def __init__(self):
        self.solver = BooleanAlgebraSolver()
        self.trace = False
        self.output_format = "sexpr"
        self.running = True
        self.multi_line_buffer = ""

        # Set up readline history and completion
        if HAS_READLINE:
            self.history_file = Path.home() / ".boolalg_history"
            try:
                readline.read_history_file(self.history_file)
            except FileNotFoundError:
                pass
            readline.set_history_length(1000)

            self.completer = BoolalgCompleter(self)
            readline.set_completer(self.completer.complete)
            readline.parse_and_bind("tab: complete")

            # Don't break on colons or dashes in commands and rule names
            readline.set_completer_delims(" \t\n")

    def save_history(self):
        """Save readline history."""
        if HAS_READLINE:
            try:
                readline.write_history_file(self.history_file)
            except OSError as e:
                logger.debug("could not save history: %s", e)

    def set_look_ahead(self, value: int):
        """Replace the solver, keeping the disabled rules."""
        disabled = [n for n in self.solver.catalogue.names()
                    if n not in {r.name for r in self.solver.active_rules}]
        solver = BooleanAlgebraSolver(look_ahead=value,
                                      max_iterations=self.solver.max_iterations)
        for name in disabled:
            solver.disable_rule(name)
        self.solver = solver

    def format_tree(self, node) -> str:
        if self.output_format == "pretty":
            return pretty_print(node)
        return format_sexpr(node)

    def handle_command(self, line: str) -> Optional[str]:
        """
        Handle a REPL command (starts with :).

        Returns a message to print, or None.
        """
        parts = line[1:].split(None, 1)
        if not parts:
            return "Unknown command. Type :help for help."

        cmd = parts[0].lower()
        arg = parts[1].strip() if len(parts) > 1 else ""

        if cmd == "help":
            return self.help_text()

        elif cmd == "quit" or cmd == "exit" or cmd == "q":
            self.running = False
            return None

        elif cmd == "lookahead":
            if not arg:
                return f"Lookahead: {self.solver.look_ahead}"
            try:
                self.set_look_ahead(int(arg))
            except ValueError as e:
                return f"Error: {e}"
            return f"Lookahead set to: {self.solver.look_ahead}"

        elif cmd == "trace":
            if arg.lower() in ("on", "true", "1"):
                self.trace = True
                return "Tracing enabled"
            elif arg.lower() in ("off", "false", "0"):
                self.trace = False
                return "Tracing disabled"
            else:
                self.trace = not self.trace
                return f"Tracing {'enabled' if self.trace else 'disabled'}"

        elif cmd == "format":
            if arg.lower() in FORMATS:
                self.output_format = arg.lower()
                return f"Format set to: {self.output_format}"
            return f"Unknown format. Options: {', '.join(FORMATS)}"

        elif cmd == "rules":
            active = {r.name for r in self.solver.active_rules}
            lines = []
            for item in self.solver.catalogue:
                marker = " " if item.name in active else "-"
                lines.append(f"{marker} {item.name}: {item.description}")
            return "\n".join(lines)

        elif cmd == "enable" or cmd == "disable":
            if not arg:
                return f"Usage: :{cmd} RULE"
            try:
                if cmd == "enable":
                    self.solver.enable_rule(arg)
                else:
                    self.solver.disable_rule(arg)
            except KeyError:
                return f"Unknown rule: {arg}"
            return f"{'Enabled' if cmd == 'enable' else 'Disabled'} rule: {arg}"

        else:
            return f"Unknown command: {cmd}. Type :help for help."

    def help_text(self) -> str:
        """Return help text."""
        return """boolalg REPL Commands:
  :help              Show this help
  :lookahead N       Set lookahead depth (rules composed per round)
  :trace on|off      Toggle tracing
  :format NAME       Output format (sexpr, pretty)
  :rules             List rules (- marks disabled ones)
  :enable RULE       Enable a rule
  :disable RULE      Disable a rule
  :quit              Exit

Syntax:
  (and a b)   (or a b)   (not a)   T   F
  Aliases: all/* for and, any/+ for or, ! for not
"""

    def process_line(self, line: str) -> Optional[str]:
        """
        Process a single line of input.

        Returns the result to print, or None.
        """
        line = line.strip()

        # Empty line or comment
        if not line or line.startswith("#"):
            return None

        # Command
        if line.startswith(":"):
            return self.handle_command(line)

        # Expression to simplify
        try:
            parsed = parse_sexpr(line)
            if parsed is None:
                return None
            tree = from_sexpr(parsed)

            if self.trace:
                result, trace = self.solver.solve(tree, trace=True)
                output = self.format_tree(result)
                if trace:
                    return f"{output}\n{trace.format('rules')}"
                return output

            return self.format_tree(self.solver.solve(tree))

        except (ValueError, KeyError) as e:
            return f"Error: {e}"

    def run(self):
        """Run the REPL loop."""
        print("boolalg - Boolean algebra simplification")
        print("Type :help for help, :quit to exit")
        print("Multi-line input: expressions with unbalanced parens continue on next line")
        print()

        while self.running:
            try:
                if self.multi_line_buffer:
                    prompt = "...... "
                else:
                    prompt = "bool> "

                line = input(prompt)

                if self.multi_line_buffer:
                    self.multi_line_buffer += "\n" + line
                else:
                    self.multi_line_buffer = line

                paren_count = count_parens(self.multi_line_buffer)

                if paren_count > 0:
                    # More open parens than close - continue reading
                    continue
                elif paren_count < 0:
                    print("Error: Unbalanced parentheses (too many closing)")
                    self.multi_line_buffer = ""
                    continue

                complete_input = self.multi_line_buffer
                self.multi_line_buffer = ""

                result = self.process_line(complete_input)
                if result:
                    print(result)

            except EOFError:
                print()
                break
            except KeyboardInterrupt:
                # Cancel multi-line input on Ctrl+C
                if self.multi_line_buffer:
                    print("\nInput cancelled")
                    self.multi_line_buffer = ""
                else:
                    print()
                continue

        self.save_history()


class ScriptRunner:
    """Runs boolalg scripts."""

    def __init__(self):
        self.repl = BoolalgREPL()

    def run_script(self, path: Path, quiet: bool = False) -> int:
        """
        Run a script file.

        Args:
            path: Path to the script
            quiet: If True, don't print expression results

        Returns:
            Exit code (0 for success)
        """
        try:
            lines = path.read_text().splitlines()
        except OSError as e:
            print(f"Error reading {path}: {e}", file=sys.stderr)
            return 1

        for lineno, line in enumerate(lines, 1):
            line = line.strip()

            # Skip empty lines, comments, and shebang
            if not line or line.startswith("#"):
                continue

            if line.startswith(":"):
                result = self.repl.handle_command(line)
                if result and ("Error" in result or "Unknown" in result):
                    print(f"{path}:{lineno}: {result}", file=sys.stderr)
                    return 1
                continue

            result = self.repl.process_line(line)
            if result and result.startswith("Error"):
                print(f"{path}:{lineno}: {result}", file=sys.stderr)
                return 1
            if result and not quiet:
                print(result)

        return 0

    def run_expression(self, expr_str: str) -> int:
        """
        Simplify a single expression.

        Returns:
            Exit code (0 for success)
        """
        result = self.repl.process_line(expr_str)
        if result:
            print(result)
            if result.startswith("Error"):
                return 1
        return 0

    def run_stdin(self) -> int:
        """
        Read expressions from stdin, one per line, and simplify them.

        Returns:
            Exit code (0 for success)
        """
        for line in sys.stdin:
            line = line.strip()
            if not line or line.startswith("#"):
                continue

            result = self.repl.process_line(line)
            if result:
                print(result)
                if result.startswith("Error"):
                    return 1

        return 0


def main(argv=None):
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="boolalg",
        description="boolalg - Boolean algebra simplification",
        epilog="Examples:\n"
               "  boolalg                              Start REPL\n"
               "  boolalg script.bool                  Run script\n"
               "  boolalg -e '(or p (not p))'          Simplify expression\n"
               "  boolalg -f pretty -e '(and a b)'     Infix output\n"
               "  echo '(not (not p))' | boolalg       Filter mode\n",
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument(
        "script",
        nargs="?",
        help="Script file to run (.bool)"
    )

    parser.add_argument(
        "-e", "--expr",
        help="Simplify a single expression"
    )

    parser.add_argument(
        "-l", "--look-ahead",
        type=int,
        default=1,
        help="Rule applications composed per search round (default: 1)"
    )

    parser.add_argument(
        "-m", "--max-iterations",
        type=int,
        default=1000,
        help="Maximum search rounds per expression (default: 1000)"
    )

    parser.add_argument(
        "-t", "--trace",
        action="store_true",
        help="Enable tracing"
    )

    parser.add_argument(
        "-f", "--format",
        default="sexpr",
        choices=FORMATS,
        help="Output format"
    )

    parser.add_argument(
        "--disable",
        action="append",
        default=[],
        metavar="RULE",
        help="Disable a rule (can be specified multiple times)"
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (suppress script output)"
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log solver iterations"
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}"
    )

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    runner = ScriptRunner()

    try:
        runner.repl.solver = BooleanAlgebraSolver(
            look_ahead=args.look_ahead, max_iterations=args.max_iterations)
        for name in args.disable:
            runner.repl.solver.disable_rule(name)
    except (ValueError, KeyError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    runner.repl.trace = args.trace
    runner.repl.output_format = args.format

    if args.script:
        return runner.run_script(Path(args.script), quiet=args.quiet)

    elif args.expr:
        return runner.run_expression(args.expr)

    elif not sys.stdin.isatty():
        # Pipe/filter mode (stdin is not a terminal)
        return runner.run_stdin()

    else:
        runner.repl.run()
        return 0


if __name__ == "__main__":
    sys.exit(main())
