"""
These most-fundamental classes are separate from the rest
to avoid various circular-import scenarios.
The syntax tree, the scope chain, and the run-time all need
to talk about tokens, and about the one kind of error
that a running program can raise.
"""
from typing import Any

class Phrase:
	def left(self) -> int:
		""" Return the index of the leftmost token of this phrase """
		raise NotImplementedError(type(self))
	def right(self) -> int:
		""" Return the index of the rightmost token of this phrase """
		raise NotImplementedError(type(self))
	def span(self) -> tuple[int, int]: return self.left(), self.right()

class Token(Phrase):
	"""
	Representing the occurrence of a lexeme anywhere.

	The kind is the punctuation itself for operators, the upper-cased word
	for reserved words, and "name", "number", "string", or "<END>" otherwise.
	"""
	spot: int  # zero-spot means no particular place in the source.
	def __init__(self, kind:str, lexeme:str, literal:Any, line:int, spot:int):
		assert isinstance(lexeme, str)
		assert isinstance(spot, int) or spot is None, type(spot)
		self.kind, self.lexeme, self.literal = kind, lexeme, literal
		self.line, self.spot = line, spot or 0
	def __repr__(self): return "<%s %r>" % (self.kind, self.lexeme)
	def left(self): return self.spot
	def right(self): return self.spot

THIS = "this"
SUPER = "super"
INIT = "init"

class ScriptError(Exception):
	"""
	The one shape of error a running program produces.
	The token is there so the complaint can point at the source.
	"""
	def __init__(self, token:Token, message:str):
		super().__init__(token, message)
		self.token = token
		self.message = message
	def __str__(self): return "[line %d] %s" % (self.token.line, self.message)
