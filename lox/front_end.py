"""
Scanner and parser: text in, list of statements out.
Both are table-driven, built from the grammar in Lox.md.
Every token gets an entry in the location index, so diagnostics can point at it.
"""
import sys
from pathlib import Path
from typing import Optional

from boozetools.macroparse.runtime import TypicalApplication, make_tables
from boozetools.scanning.engine import IterableScanner
from boozetools.parsing.interface import ParseError, END_OF_TOKENS
from boozetools.support.pretty import DOT
from . import syntax
from .diagnostics import Report
from .location import start_segment, insert_token
from .ontology import Token

class LoxParseError(ParseError):
	pass

_tables = make_tables(Path(__file__).parent/"Lox.md")
_parse_table = _tables['parser']
_KEYWORDS = frozenset(t for t in _parse_table["terminals"] if t.isupper() and t.isalpha())
RESERVED = frozenset(k.lower() for k in _KEYWORDS)
_LITERAL_WORDS = {"true": True, "false": False, "nil": None}

MAX_ARGS = 32

class LoxParser(TypicalApplication):
	"""
	One of these serves every parse. The report, the line counter,
	and the tokens seen so far belong to whichever segment is being parsed.
	"""
	_report: Report
	_line: int
	_tokens: dict[int, Token]

	def parse_segment(self, text:str, path:Optional[Path], report:Report) -> list[syntax.Stmt]:
		self._report, self._line, self._tokens = report, 1, {}
		return self.parse(text, filename=None if path is None else str(path))

	def _emit(self, yy:IterableScanner, kind:str, literal=None):
		token = Token(kind, yy.match(), literal, self._line, insert_token(yy.slice()))
		self._tokens[token.spot] = token
		yy.token(kind, token)

	def scan_newline(self, yy:IterableScanner): self._line += 1
	def scan_ignore(self, yy:IterableScanner): pass

	def scan_number(self, yy:IterableScanner): self._emit(yy, "number", float(yy.match()))

	def scan_string(self, yy:IterableScanner):
		self._emit(yy, "string", yy.match()[1:-1])
		self._line += yy.match().count("\n")

	def scan_unterminated(self, yy:IterableScanner):
		opening = Token("string", '"', None, self._line, insert_token(slice(yy.left, yy.left+1)))
		self._report.unterminated_string(opening)
		self._line += yy.match().count("\n")

	def scan_word(self, yy:IterableScanner):
		word = yy.match()
		if word in RESERVED: self._emit(yy, word.upper(), _LITERAL_WORDS.get(word))
		else: self._emit(yy, "name")

	def scan_punctuation(self, yy:IterableScanner):
		self._emit(yy, sys.intern(yy.match()))

	def on_stuck(self, yy:IterableScanner):
		stray = Token("stray", yy.match(), None, self._line, insert_token(yy.slice()))
		self._report.unexpected_character(stray)

	###########################################################################
	# Reductions

	@staticmethod
	def parse_nothing(): return None
	@staticmethod
	def parse_empty(): return []
	@staticmethod
	def parse_first(item): return [item]
	@staticmethod
	def parse_more(some, another):
		if another is not None: some.append(another)
		return some

	@staticmethod
	def default_parse(ctor, *args):
		return getattr(syntax, ctor)(*args)

	@staticmethod
	def parse_literal(token:Token): return syntax.Literal(token.literal, token)

	@staticmethod
	def parse_prefix(op:Token, operand): return syntax.Unary(op, operand, False)
	@staticmethod
	def parse_suffix(operand, op:Token): return syntax.Unary(op, operand, True)

	@staticmethod
	def parse_index(obj, index, bracket:Token): return syntax.Index(obj, bracket, index)

	def parse_call(self, callee, arguments, paren:Token):
		self._check_count(arguments, "arguments")
		return syntax.Call(callee, paren, arguments)

	def parse_assign(self, target, equals:Token, value):
		if isinstance(target, syntax.Variable): return syntax.Assign(target.name, value)
		if isinstance(target, syntax.Get): return syntax.Set(target.obj, target.name, value)
		if isinstance(target, syntax.Index): return syntax.SetIndex(target.obj, target.bracket, target.index, value)
		self._report.parse_error(equals, "Invalid assignment target.")
		return target

	def parse_lambda_expression(self, keyword:Token, params, body:syntax.Block):
		self._check_count(params, "parameters")
		return syntax.Lambda(keyword, params, body.statements, body.closing)

	def parse_function(self, name:Token, params, body:syntax.Block):
		self._check_count(params, "parameters")
		return syntax.Function(name, syntax.Lambda(name, params, body.statements, body.closing))

	@staticmethod
	def parse_getter(name:Token, body:syntax.Block):
		return syntax.Function(name, syntax.Lambda(name, None, body.statements, body.closing))

	@staticmethod
	def parse_instance_member(method): return False, method
	@staticmethod
	def parse_class_member(method): return True, method

	@staticmethod
	def parse_class_declaration(name:Token, superclass, members, closing:Token):
		methods = [m for is_class_method, m in members if not is_class_method]
		class_methods = [m for is_class_method, m in members if is_class_method]
		return syntax.Class(name, superclass, methods, class_methods, closing)

	def parse_print_nothing(self, keyword:Token, paren:Token, semicolon:Token):
		return self._print_call(keyword, [], paren, semicolon)

	def parse_print_several(self, keyword:Token, first, more, paren:Token, semicolon:Token):
		more.insert(0, first)
		return self._print_call(keyword, more, paren, semicolon)

	def _print_call(self, keyword, arguments, paren, semicolon):
		""" The native function, called at the start of a statement. """
		return syntax.Expression(self.parse_call(syntax.Variable(keyword), arguments, paren), semicolon)

	@staticmethod
	def parse_if_then(keyword:Token, condition, then_branch):
		return syntax.If(keyword, condition, then_branch, None)

	@staticmethod
	def parse_for_loop(keyword:Token, initializer, condition, increment, closing:Token, body):
		""" There is no for-loop node: it becomes a while-loop inside a block or two. """
		if increment is not None:
			body = syntax.Block(keyword, [body, syntax.Expression(increment, closing)], closing)
		if condition is None:
			condition = syntax.Literal(True, keyword)
		loop = syntax.While(keyword, condition, body)
		if initializer is not None:
			loop = syntax.Block(keyword, [initializer, loop], closing)
		return loop

	def _check_count(self, items, what:str):
		if len(items) > MAX_ARGS:
			culprit = self._tokens[items[MAX_ARGS].left()]
			self._report.parse_error(culprit, "Cannot have more than %d %s." % (MAX_ARGS, what))

	###########################################################################
	# When things go wrong

	def unexpected_token(self, kind, semantic, pds):
		self._report.parse_error(semantic, self._advice(pds, kind))

	def unexpected_eof(self, pds):
		end = len(self.source.content)
		self.unexpected_token(END_OF_TOKENS, Token(END_OF_TOKENS, "", None, self._line, insert_token(slice(end, end))), pds)

	def will_recover(self, tokens):
		""" The statement that could not be parsed is simply left out. """
		return None

	def did_not_recover(self):
		raise LoxParseError()

	def log_error(self, *parts):
		self._report.info(*parts)

	def _advice(self, pds, lookahead:str) -> str:
		stack_symbols = self.stack_symbols(pds)
		expected = self.expected_tokens(pds)
		advice = _best_hint(stack_symbols, lookahead)
		if advice: return advice
		if "number" in expected: return "Expect expression."
		advice = _best_hint(stack_symbols, ETC)
		if advice: return advice
		for closer, advice in _CLOSERS:
			if closer in expected: return advice
		self._report.info("Guru Meditation:", " ".join(stack_symbols + [DOT, lookahead]))
		return "Unexpected token."

lox_parser = LoxParser(_tables)

def parse_text(text:str, path:Optional[Path], report:Report) -> list[syntax.Stmt]:
	""" Scan and parse a segment of source text: a file, or one line at the REPL. """
	assert isinstance(path, Path) or path is None
	start_segment(path, text)
	try:
		return lox_parser.parse_segment(text, path, report)
	except LoxParseError:
		assert report.sick()
		return []

##########################
#
#  Parse error messages come from a small table of hints.
#  Each hint shows the top of the parse stack, a dot, and the look-ahead token.
#  A "???" in the stack part soaks up any run of partly-reduced expression,
#  but never a keyword, a name, or a bracket. The first hint to fit wins.
#

_vocabulary = set(_parse_table["terminals"]).union(_parse_table["nonterminals"], [END_OF_TOKENS])
ETC = "???"
assert ETC not in _vocabulary
_LANDMARKS = _KEYWORDS.union(["name", "(", ")", "[", "]", "{", "}", ";", "."])
_hints = []

def _hint(path, text):
	stack_part, lookahead = path.split(DOT)
	pattern, lookahead = stack_part.split(), lookahead.strip()
	for symbol in pattern + [lookahead]:
		assert symbol == ETC or symbol in _vocabulary, symbol
	_hints.append((pattern, lookahead, text))

def _fits(pattern, stack) -> bool:
	if not pattern: return True
	if pattern[-1] == ETC:
		depth = len(stack)
		while not _fits(pattern[:-1], stack[:depth]):
			if not depth or stack[depth-1] in _LANDMARKS: return False
			depth -= 1
		return True
	return bool(stack) and stack[-1] == pattern[-1] and _fits(pattern[:-1], stack[:-1])

def _best_hint(stack_symbols, lookahead) -> Optional[str]:
	for pattern, expect, text in _hints:
		if expect == lookahead and _fits(pattern, stack_symbols):
			return text

_CLOSERS = [
	(";", "Expect ';' after expression."),
	(")", "Expect ')' after expression."),
	("]", "Expect ']' after expression."),
	("}", "Expect '}' after block."),
]

_hint("CLASS name ??? { ??? ● <END>", "Expect '}' after class body.")
_hint("{ ??? ● <END>", "Expect '}' after block.")

_hint("FUN name ● ???", "Expect '(' after function name.")
_hint("FUN name parameters ● ???", "Expect '{' before function body.")
_hint("FUN ( ● ???", "Expect parameter name.")
_hint("FUN ( ??? , ● ???", "Expect parameter name.")
_hint("FUN ( ??? ● ???", "Expect ')' after parameters.")
_hint("FUN ● ???", "Expect function name.")
_hint("name ( ● ???", "Expect parameter name.")
_hint("name ( ??? , ● ???", "Expect parameter name.")
_hint("name ( ??? ● ???", "Expect ')' after parameters.")
_hint("CLASS ● ???", "Expect class name.")
_hint("CLASS name < ● ???", "Expect superclass name.")
_hint("CLASS name ● ???", "Expect '{' before class body.")
_hint("CLASS name < name ● ???", "Expect '{' before class body.")
_hint("CLASS name ??? { ??? ● ???", "Expect method name.")
_hint("VAR ● ???", "Expect variable name.")
_hint("VAR name ??? ● ???", "Expect ';' after variable declaration.")
_hint("PRINT ??? ● ???", "Expect ';' after value.")
_hint("RETURN ??? ● ???", "Expect ';' after return value.")
_hint("BREAK ● ???", "Expect ';' after 'break'.")
_hint("SUPER ● ???", "Expect '.' after 'super'.")
_hint("SUPER . ● ???", "Expect superclass method name.")
_hint(". ● ???", "Expect property name after '.'.")
_hint("IF ● ???", "Expect '(' after 'if'.")
_hint("IF ( ??? ● ???", "Expect ')' after if condition.")
_hint("WHILE ● ???", "Expect '(' after 'while'.")
_hint("WHILE ( ??? ● ???", "Expect ')' after condition.")
_hint("FOR ● ???", "Expect '(' after 'for'.")
_hint("FOR ( ??? ; ??? ● ???", "Expect ')' after for clauses.")
_hint("FOR ( ??? ● ???", "Expect ';' after loop condition.")
_hint("( ??? ● ???", "Expect ')' after expression.")
_hint("[ ??? ● ???", "Expect ']' after expression.")

assert _best_hint("list(declaration) FUN name".split(), "{") is None
assert _best_hint("list(declaration) FUN name".split(), ETC) == "Expect '(' after function name."
