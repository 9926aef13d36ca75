"""
This is the overall control: take some text, push it through each phase in turn,
and say something sensible to the console about whatever went wrong.
A file and a line typed into the REPL go the same way.
"""
import sys
from pathlib import Path
from typing import Optional
from .diagnostics import TooManyIssues
from .resolution import resolve_text, Yuck
from .tree_walker.evaluator import Interpreter

def run_text(interpreter:Interpreter, text:str, path:Optional[Path]=None, *, warnings=True, execute=True) -> bool:
	"""
	True if the text made it all the way through without complaint.
	Top-level definitions land in the interpreter's globals, so later texts can use them.
	"""
	report = interpreter.report
	try:
		try:
			statements = resolve_text(text, path, interpreter, report)
		except Yuck as ex:
			assert report.sick(), ex
			report.complain_to_console()
			return False
		finally:
			if warnings: report.caution_to_console()
	except TooManyIssues:
		report.complain_to_console()
		print(" *"*35, file=sys.stderr)
		print("Giving up after a few issues. One crisis at a time, eh?", file=sys.stderr)
		return False
	report.info("Resolved %d top-level statement(s) from %s." % (len(statements), path or "the prompt"))
	if not execute:
		return True
	if interpreter.interpret(statements):
		return True
	report.complain_to_console()
	return False

def repl(interpreter:Interpreter, *, warnings=True):
	""" Read, evaluate, print, loop. A bare expression gets its value echoed. """
	report = interpreter.report
	while True:
		try: line = input("> ")
		except EOFError:
			print()
			return
		if run_text(interpreter, line, warnings=warnings):
			interpreter.echo()
		report.reset()
