"""
This module defines the specialized value-types that the tree-walker operates in terms of.
Basic primitive values play themselves: nil is None, and so on.
Special things like closures, classes, and arrays need more help.
"""
from functools import partial
from typing import Optional
from ..ontology import Token, ScriptError, THIS, INIT
from ..environment import Environment
from .. import syntax
from .types import LoxValue, Callable, Indexable, NativeError, Return, VALUE, ARGS

def is_truthy(value:VALUE) -> bool:
	return not (value is None or value is False)

def is_number(value:VALUE) -> bool:
	# bool is a subclass of int, not of float, so flags never pass.
	return isinstance(value, float)

def is_equal(a:VALUE, b:VALUE) -> bool:
	if a is None or b is None: return a is b
	if isinstance(a, LoxValue) or isinstance(b, LoxValue): return a is b
	return type(a) is type(b) and a == b

def stringify(value:VALUE) -> str:
	"""
	Whole numbers lose their ".0". Anything else is as Python spells a float,
	so very large and very small magnitudes come out like 1e+21 or 1e-07.
	"""
	if value is None: return "nil"
	if value is True: return "true"
	if value is False: return "false"
	if isinstance(value, float):
		text = repr(value)
		return text[:-2] if text.endswith(".0") else text
	return str(value)

###############################################################################

class Closure(Callable):
	""" The run-time manifestation of a function: a callable value tied to its natal environment. """

	def __init__(self, name:Optional[str], function:syntax.Lambda, closure:Environment, is_initializer=False):
		self.name = name
		self._function = function
		self._closure = closure
		self.is_initializer = is_initializer

	def __str__(self):
		return "<fn>" if self.name is None else "<fn %s>" % self.name

	def is_getter(self) -> bool: return self._function.is_getter()

	def bind(self, instance:"Instance") -> "Closure":
		environment = Environment(self._closure)
		environment.define(THIS, instance)
		return Closure(self.name, self._function, environment, self.is_initializer)

	def arity(self) -> int: return len(self._function.params or ())

	def call(self, interpreter, arguments:ARGS) -> VALUE:
		environment = Environment(self._closure)
		for param, arg in zip(self._function.params or (), arguments):
			environment.define(param.lexeme, arg)
		signal = interpreter.execute_block(self._function.body, environment)
		if self.is_initializer:
			return self._closure.get_at(0, THIS)
		if isinstance(signal, Return):
			return signal.value
		assert signal is None, signal
		return None

class Native(Callable):
	""" Native functions get the interpreter and a list of strict arguments. """
	def __init__(self, fn:callable, arity:int, variadic=False):
		self._fn = fn
		self._arity = arity
		self._variadic = variadic

	def __str__(self): return "<native fn>"

	def arity(self) -> int: return self._arity
	def variadic(self) -> bool: return self._variadic

	def call(self, interpreter, arguments:ARGS) -> VALUE:
		return self._fn(interpreter, arguments)

###############################################################################

class Instance(LoxValue):
	"""
	Fields live here; methods live in the class.
	Both share one namespace, and fields win.
	"""
	def __init__(self, klass:Optional["Class"]):
		self.klass = klass
		self.fields = {}

	def __str__(self): return "<%s instance>" % self.klass.name

	def get(self, name:Token) -> VALUE:
		try: return self.fields[name.lexeme]
		except KeyError: pass
		if self.klass is not None:
			method = self.klass.find_method(self, name.lexeme)
			if method is not None: return method
		raise ScriptError(name, "Undefined property '%s'." % name.lexeme)

	def set(self, name:Token, value:VALUE):
		self.fields[name.lexeme] = value

class Class(Instance, Callable):
	"""
	A class is itself an instance of its metaclass.
	That way class-side methods are found the same way as instance methods.
	The metaclass of a subclass inherits from the metaclass of the superclass.
	"""
	def __init__(self, name:str, superclass:Optional["Class"], methods:dict[str, Closure], metaclass:Optional["Class"]=None):
		super().__init__(metaclass)
		self.name = name
		self.superclass = superclass
		self.methods = methods

	def __str__(self): return "<class %s>" % self.name

	@property
	def metaclass(self) -> Optional["Class"]: return self.klass

	def find_method(self, instance:Instance, name:str) -> Optional[Closure]:
		klass = self
		while klass is not None:
			if name in klass.methods:
				return klass.methods[name].bind(instance)
			klass = klass.superclass
		return None

	def _initializer(self) -> Optional[Closure]:
		klass = self
		while klass is not None:
			if INIT in klass.methods: return klass.methods[INIT]
			klass = klass.superclass

	def arity(self) -> int:
		initializer = self._initializer()
		return 0 if initializer is None else initializer.arity()

	def call(self, interpreter, arguments:ARGS) -> Instance:
		instance = Instance(self)
		initializer = self._initializer()
		if initializer is not None:
			initializer.bind(instance).call(interpreter, arguments)
		return instance

###############################################################################

# Arrays in the middle of being rendered, so one that contains itself shows as [...]
_rendering = set()

class Array(Indexable):
	"""
	An ordered mutable sequence with a small closed set of built-in methods.
	Negative indices wrap around modulo the length, so -1 is the last element.
	"""
	def __init__(self, elements:list):
		self.elements = elements
		self._methods = {
			name: Native(partial(fn, self), arity, variadic)
			for name, (fn, arity, variadic) in _ARRAY_METHODS.items()
		}

	def __str__(self):
		if id(self) in _rendering: return "[...]"
		_rendering.add(id(self))
		try: return "[%s]" % ", ".join(map(stringify, self.elements))
		finally: _rendering.discard(id(self))

	def get_method(self, name:Token) -> Native:
		try: return self._methods[name.lexeme]
		except KeyError: raise ScriptError(name, "No such method.") from None

	def get(self, index:VALUE) -> VALUE:
		return self.elements[self._position(index)]

	def set(self, index:VALUE, value:VALUE):
		self.elements[self._position(index)] = value

	def length(self) -> int: return len(self.elements)

	def _position(self, index:VALUE) -> int:
		if not (is_number(index) and index.is_integer()):
			raise NativeError("Array index must be an integer.")
		position = int(index)
		if position < 0 and self.elements:
			position %= len(self.elements)
		if 0 <= position < len(self.elements):
			return position
		raise NativeError("Array index out of bounds.")

	def _add(self, interpreter, arguments:ARGS):
		self.elements.extend(arguments)

	def _remove(self, interpreter, arguments:ARGS) -> VALUE:
		return self.elements.pop(self._position(arguments[0]))

	def _pop(self, interpreter, arguments:ARGS) -> VALUE:
		if not self.elements: raise NativeError("Array is empty.")
		return self.elements.pop(0)

	def _length(self, interpreter, arguments:ARGS) -> float:
		return float(len(self.elements))

	def _is_empty(self, interpreter, arguments:ARGS) -> bool:
		return not self.elements

_ARRAY_METHODS = {
	"add": (Array._add, 0, True),
	"remove": (Array._remove, 1, False),
	"pop": (Array._pop, 0, False),
	"length": (Array._length, 0, False),
	"isEmpty": (Array._is_empty, 0, False),
}
