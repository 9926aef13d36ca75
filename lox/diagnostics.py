import sys, random
from typing import Sequence, Optional
from boozetools.support.failureprone import illustration

from .location import lookup_span
from .ontology import Phrase, Token, ScriptError

class TooManyIssues(Exception):
	pass

def _outburst():
	particle = ["Oh, ", "Well, ", "Aw, ", "", ""]

	minced_oaths = [
		'Ack', 'ARGH', 'Blargh', 'Confound it', 'Crud', 'Curses', "Crikey",
		'Dag Nabbit', 'Drat', 'Fiddlesticks', 'Gack', 'Good Grief', "Great Scott",
		'Jeepers', 'Heavens', "Mercy", 'Nuts', 'Rats', 'Woe is me',
	]

	resignations = [
		'I am undone.',
		'I cannot continue.',
		'The path before me fades into darkness.',
		'I need to ask for help.',
	]

	return "%s%s! %s"%tuple(map(random.choice, (particle, minced_oaths, resignations)))

class Report:
	"""
	Collects everything that goes wrong, from whichever pass notices.
	Errors make the report sick; warnings merely get mentioned.
	"""
	issues : list["Pic"]
	warnings : list["Pic"]

	def __init__(self, *, verbose:int, max_issues=10):
		self._verbose = verbose or 0   # Because None is incomparable.
		self.issues = []
		self.warnings = []
		self._redefined = {}
		self._max_issues = max_issues

	def ok(self): return not self.issues
	def sick(self): return bool(self.issues)

	def issue(self, it:"Pic"):
		self.issues.append(it)
		if len(self.issues) == self._max_issues:
			raise TooManyIssues(self)

	def warn(self, it:"Pic"):
		self.warnings.append(it)

	def reset(self):
		self.issues.clear()
		self.warnings.clear()
		self._redefined.clear()

	def info(self, *args):
		if self._verbose:
			print(*args, file=sys.stderr)

	def error(self, guilty: Sequence[Phrase], msg: str):
		""" Actually make an entry of an issue """
		for g in guilty: assert isinstance(g, Phrase), g
		problem = [Annotation(g, "") for g in guilty]
		self.issue(Pic(msg, problem))

	def complain_to_console(self):
		""" Emit all the issues to the console. """
		_bemoan(self.issues)

	def caution_to_console(self):
		""" Emit all the warnings to the console, minus the drama. """
		for w in self.warnings:
			print("Warning: "+w.as_text(), file=sys.stderr)
		sys.stderr.flush()

	def assert_no_issues(self, message):
		""" Does what it says on the tin """
		if self.issues:
			self.complain_to_console()
			raise AssertionError(_outburst()+" "+message)

	# Methods the front-end is likely to call:
	def unexpected_character(self, token:Token):
		intro = "[line %d] Unexpected character %r." % (token.line, token.lexeme)
		self.issue(Pic(intro, [Annotation(token)]))

	def unterminated_string(self, token:Token):
		intro = "[line %d] Unterminated string." % token.line
		self.issue(Pic(intro, [Annotation(token, "This never ends.")]))

	def parse_error(self, token:Token, message:str):
		where = "at end" if token.kind == "<END>" else "at '%s'" % token.lexeme
		intro = "[line %d] Error %s: %s" % (token.line, where, message)
		problem = [Annotation(token, "got confused here")]
		self.issue(Pic(intro, problem))

	# Methods the resolver calls:
	def redefined(self, first:Optional[Token], guilty:Token):
		key = guilty.lexeme, first
		if key not in self._redefined:
			intro = "[line %d] Variable '%s' is already declared in this scope." % (guilty.line, guilty.lexeme)
			issue = Pic(intro, [] if first is None else [Annotation(first, "Earliest declaration")])
			self.issue(issue)
			self._redefined[key] = issue
		self._redefined[key].also(guilty)

	def read_in_own_initializer(self, guilty:Token):
		self._complain(guilty, "Cannot read local variable in its own initializer.")

	def return_outside_function(self, keyword:Token):
		self._complain(keyword, "Cannot return from top-level code.")

	def return_value_from_initializer(self, keyword:Token):
		self._complain(keyword, "Cannot return a value from an initializer.")

	def this_outside_class(self, keyword:Token):
		self._complain(keyword, "Cannot use 'this' outside of a class.")

	def super_outside_class(self, keyword:Token):
		self._complain(keyword, "Cannot use 'super' outside of a class.")

	def super_without_superclass(self, keyword:Token):
		self._complain(keyword, "Cannot use 'super' in a class with no superclass.")

	def inherits_from_itself(self, name:Token):
		self._complain(name, "A class cannot inherit from itself.")

	def break_outside_loop(self, keyword:Token):
		self._complain(keyword, "Cannot use 'break' outside of a loop.")

	def _complain(self, guilty:Token, message:str):
		intro = "[line %d] %s" % (guilty.line, message)
		self.issue(Pic(intro, [Annotation(guilty)]))

	def never_defined(self, name:Token):
		intro = "[line %d] Local variable '%s' never defined." % (name.line, name.lexeme)
		self.warn(Pic(intro, [Annotation(name)]))

	def never_used(self, name:Token):
		intro = "[line %d] Local variable '%s' never used." % (name.line, name.lexeme)
		self.warn(Pic(intro, [Annotation(name)]))

	# The run-time calls this, at most once per run:
	def runtime_error(self, error:ScriptError):
		problem = [Annotation(error.token, "Died here")]
		self.issue(Pic(str(error), problem))


class Annotation:
	def __init__(self, node:Phrase, caption:str=""):
		self.path, self.source, self.slice = lookup_span(*node.span())
		self.caption = caption
	def illustrate(self):
		row, col = self.source.find_row_col(self.slice.start)
		single_line = self.source.line_of_text(row)
		width = self.slice.stop - self.slice.start
		return illustration(single_line, col, width, prefix='% 6d |' % row, caption=self.caption)

class Pic:
	def __init__(self, intro:str, anns:list[Annotation], footer=()):
		self.intro, self._anns, self._footer = intro, anns, footer
	def also(self, node, caption:str=""): self._anns.append(Annotation(node, caption))
	def as_text(self):
		lines = [self.intro, ""]
		path = None
		for ann in self._anns:
			if ann.path != path:
				path = ann.path
				lines.append(str(path))
			lines.append(ann.illustrate())
		lines.extend(self._footer)
		return '\n'.join(lines)

def _bemoan(issues):
	""" Emit all the issues to the console. """
	if issues:
		print("*"*60, file=sys.stderr)
		print(_outburst(), file=sys.stderr)
	for i in issues:
		print("  -"*20, file=sys.stderr)
		print(i.as_text(), file=sys.stderr)
	sys.stderr.flush()
