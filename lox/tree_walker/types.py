"""
This module aims to express an interface agreement
between the evaluator and various kinds of data.
"""

from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Optional, Sequence, Union


class NativeError(Exception):
	"""
	Native code raises this with nothing but a message.
	The evaluator re-raises it as a ScriptError pointing at the call site.
	"""

class LoxValue(ABC):
	""" Root for classes that implement specialized run-time data structures """

class Callable(LoxValue):
	@abstractmethod
	def arity(self) -> int: pass
	def variadic(self) -> bool: return False
	@abstractmethod
	def call(self, interpreter, arguments:list) -> Any: pass

class Indexable(LoxValue):
	@abstractmethod
	def get(self, index): pass
	@abstractmethod
	def set(self, index, value): pass
	@abstractmethod
	def length(self) -> int: pass

NATIVE_DATA = Union[None, bool, float, str]
VALUE = Union[NATIVE_DATA, LoxValue]
ARGS = Sequence[VALUE]

###############################################################################
# Executing a statement yields None when control falls off the end normally.
# Otherwise it yields one of these, and whatever is running the statement
# either consumes the signal or hands it further up.

class Return(NamedTuple):
	value: VALUE

class _Break:
	def __repr__(self): return "<break>"

BREAK = _Break()

SIGNAL = Optional[Union[Return, _Break]]
