"""
This is an interpreter for the Lox scripting language.

{0}

For example:

    lox program.lox

will run program.lox if possible, or else try to explain why not.

    lox

with no program will start an interactive prompt.

    lox -h

will explain all the arguments.
"""
import sys, argparse
from pathlib import Path

parser = argparse.ArgumentParser(
	prog="lox",
	description="Interpreter for the Lox scripting language.",
)
parser.add_argument("program", nargs="?", help="try examples/classes.lox for example. Leave it out for a prompt.")
parser.add_argument('-c', "--check", action="count", help="Check the program verbosely but do not actually execute the program.")
parser.add_argument('-w', "--no-warnings", action="store_true", help="Keep quiet about unused or undefined local variables.")

def run(args):
	from .diagnostics import Report
	from .executive import run_text, repl
	from .tree_walker.evaluator import Interpreter
	report = Report(verbose=args.check)
	interpreter = Interpreter(report)
	warnings = not args.no_warnings
	if args.program is None:
		print(__doc__.strip().format(parser.format_usage()), file=sys.stderr)
		repl(interpreter, warnings=warnings)
		return 0
	path = Path.cwd() / args.program
	try: text = path.read_text(encoding="utf-8")
	except OSError as ex:
		print("Could not read %s: %s" % (path, ex.strerror), file=sys.stderr)
		return 1
	if not run_text(interpreter, text, path, warnings=warnings, execute=not args.check):
		return 1
	if args.check:
		print("Looks plausible to me.", file=sys.stderr)
	return 0

def main():
	exit(run(parser.parse_args()))
