"""
The tree-walking evaluator.

Statements run for effect and hand back a signal (see .types) when control
leaves them abnormally. Expressions run for value.
One "current environment" is threaded through the walk, swapped on the way
into blocks and calls, and always put back on the way out.
"""
import operator
import sys
from typing import Sequence
from boozetools.support.foundation import Visitor
from .. import syntax
from ..diagnostics import Report
from ..environment import Environment
from ..ontology import Token, ScriptError, THIS, SUPER, INIT
from .natives import define_natives
from .types import Callable, Indexable, NativeError, Return, BREAK, SIGNAL, VALUE
from .values import Closure, Class, Instance, Array, is_truthy, is_number, is_equal, stringify

NUMERIC_BINARY = {
	"-" : operator.sub,
	"*" : operator.mul,
	"/" : operator.truediv,
	">" : operator.gt,
	">=": operator.ge,
	"<" : operator.lt,
	"<=": operator.le,
}

STEP = {
	"++": (1.0, "increment"),
	"--": (-1.0, "decrement"),
}

def _check_number(op:Token, operand:VALUE):
	if not is_number(operand):
		raise ScriptError(op, "Operand must be a number.")

def _check_numbers(op:Token, lhs:VALUE, rhs:VALUE):
	if not (is_number(lhs) and is_number(rhs)):
		raise ScriptError(op, "Operands must be numbers.")

def _plus(op:Token, lhs:VALUE, rhs:VALUE) -> VALUE:
	if is_number(lhs) and is_number(rhs): return lhs + rhs
	if isinstance(lhs, str) or isinstance(rhs, str): return stringify(lhs) + stringify(rhs)
	raise ScriptError(op, "Operands must be two numbers or two strings.")


class Interpreter(Visitor):
	"""
	Ready until interpret() is called, then running one top-level statement at a time.
	A ScriptError halts the whole run; it gets reported, never resumed.
	"""
	globals: Environment
	environment: Environment
	locals: dict[syntax.Expr, int]
	last_value: VALUE

	def __init__(self, report:Report, *, stdout=None, stdin=None):
		self.report = report
		self.stdout = sys.stdout if stdout is None else stdout
		self.stdin = sys.stdin if stdin is None else stdin
		self.globals = Environment()
		self.environment = self.globals
		self.locals = {}
		self.last_value = None
		define_natives(self.globals)

	def resolve(self, expr:syntax.Expr, distance:int):
		""" The resolver calls this for every local reference it finds. """
		assert distance >= 0
		self.locals[expr] = distance

	def interpret(self, statements:Sequence[syntax.Stmt]) -> bool:
		try:
			for statement in statements:
				if isinstance(statement, syntax.Expression):
					self.last_value = self.evaluate(statement.expression)
				else:
					self.last_value = None
					signal = self.execute(statement)
					assert signal is None, signal
		except ScriptError as error:
			self.last_value = None
			self.report.runtime_error(error)
			return False
		return True

	def echo(self):
		""" What the REPL shows after a bare expression. """
		if self.last_value is not None:
			self.stdout.write(stringify(self.last_value) + "\n")

	def execute(self, stmt:syntax.Stmt) -> SIGNAL:
		return self.visit(stmt)

	def evaluate(self, expr:syntax.Expr) -> VALUE:
		return self.visit(expr)

	def execute_block(self, statements:Sequence[syntax.Stmt], environment:Environment) -> SIGNAL:
		previous = self.environment
		self.environment = environment
		try:
			for statement in statements:
				signal = self.visit(statement)
				if signal is not None: return signal
		finally:
			self.environment = previous

	###########################################################################
	# Statements

	def visit_Expression(self, stmt:syntax.Expression) -> SIGNAL:
		self.evaluate(stmt.expression)

	def visit_Print(self, stmt:syntax.Print) -> SIGNAL:
		value = self.evaluate(stmt.expression)
		self.stdout.write(stringify(value) + "\n")

	def visit_Var(self, stmt:syntax.Var) -> SIGNAL:
		value = None if stmt.initializer is None else self.evaluate(stmt.initializer)
		self.environment.define(stmt.name.lexeme, value)

	def visit_Block(self, stmt:syntax.Block) -> SIGNAL:
		return self.execute_block(stmt.statements, Environment(self.environment))

	def visit_If(self, stmt:syntax.If) -> SIGNAL:
		if is_truthy(self.evaluate(stmt.condition)):
			return self.execute(stmt.then_branch)
		elif stmt.else_branch is not None:
			return self.execute(stmt.else_branch)

	def visit_While(self, stmt:syntax.While) -> SIGNAL:
		while is_truthy(self.evaluate(stmt.condition)):
			signal = self.execute(stmt.body)
			if signal is BREAK: break
			if signal is not None: return signal

	def visit_Break(self, stmt:syntax.Break) -> SIGNAL:
		return BREAK

	def visit_Return(self, stmt:syntax.Return) -> SIGNAL:
		return Return(None if stmt.value is None else self.evaluate(stmt.value))

	def visit_Function(self, stmt:syntax.Function) -> SIGNAL:
		name = stmt.name.lexeme
		self.environment.define(name, Closure(name, stmt.function, self.environment))

	def visit_Class(self, stmt:syntax.Class) -> SIGNAL:
		superclass = None
		if stmt.superclass is not None:
			superclass = self.evaluate(stmt.superclass)
			if not isinstance(superclass, Class):
				raise ScriptError(stmt.superclass.name, "Superclass must be a class.")
		name = stmt.name.lexeme
		self.environment.define(name, None)
		outer = self.environment
		if superclass is not None:
			self.environment = Environment(outer)
			self.environment.define(SUPER, superclass)
		try:
			# Class-side methods close over one more frame, in which "this" is the class itself.
			class_side = Environment(self.environment)
			metaclass = Class(
				name + " metaclass",
				None if superclass is None else superclass.metaclass,
				{m.name.lexeme: Closure(m.name.lexeme, m.function, class_side) for m in stmt.class_methods},
			)
			methods = {
				m.name.lexeme: Closure(m.name.lexeme, m.function, self.environment, m.name.lexeme == INIT)
				for m in stmt.methods
			}
			klass = Class(name, superclass, methods, metaclass)
			class_side.define(THIS, klass)
		finally:
			self.environment = outer
		self.environment.assign(stmt.name, klass)

	###########################################################################
	# Expressions

	def visit_Literal(self, expr:syntax.Literal) -> VALUE:
		return expr.value

	def visit_Grouping(self, expr:syntax.Grouping) -> VALUE:
		return self.evaluate(expr.expression)

	def visit_Variable(self, expr:syntax.Variable) -> VALUE:
		return self._look_up(expr.name, expr)

	def visit_This(self, expr:syntax.This) -> VALUE:
		return self.environment.get_at(self.locals[expr], THIS)

	def _look_up(self, name:Token, expr:syntax.Expr) -> VALUE:
		try: distance = self.locals[expr]
		except KeyError: return self.globals.get(name)
		else: return self.environment.get_at(distance, name.lexeme)

	def _store(self, name:Token, expr:syntax.Expr, value:VALUE):
		try: distance = self.locals[expr]
		except KeyError: self.globals.assign(name, value)
		else: self.environment.assign_at(distance, name, value)

	def visit_Assign(self, expr:syntax.Assign) -> VALUE:
		value = self.evaluate(expr.value)
		self._store(expr.name, expr, value)
		return value

	def visit_Unary(self, expr:syntax.Unary) -> VALUE:
		op = expr.op.kind
		if op in STEP:
			return self._step(expr)
		operand = self.evaluate(expr.operand)
		if op == "!":
			return not is_truthy(operand)
		assert op == "-", op
		_check_number(expr.op, operand)
		return -operand

	def _step(self, expr:syntax.Unary) -> VALUE:
		delta, noun = STEP[expr.op.kind]
		variable = expr.operand
		if not isinstance(variable, syntax.Variable):
			raise ScriptError(expr.op, "Operand of %s operation must be a variable." % noun)
		before = self.evaluate(variable)
		_check_number(expr.op, before)
		after = before + delta
		self._store(variable.name, variable, after)
		return before if expr.postfix else after

	def visit_Binary(self, expr:syntax.Binary) -> VALUE:
		lhs = self.evaluate(expr.lhs)
		rhs = self.evaluate(expr.rhs)
		op = expr.op.kind
		if op == "==": return is_equal(lhs, rhs)
		if op == "!=": return not is_equal(lhs, rhs)
		if op == "+": return _plus(expr.op, lhs, rhs)
		_check_numbers(expr.op, lhs, rhs)
		if op == "/" and rhs == 0:
			raise ScriptError(expr.op, "Cannot divide by zero.")
		return NUMERIC_BINARY[op](lhs, rhs)

	def visit_Logical(self, expr:syntax.Logical) -> VALUE:
		lhs = self.evaluate(expr.lhs)
		if expr.op.kind == "OR":
			if is_truthy(lhs): return lhs
		else:
			if not is_truthy(lhs): return lhs
		return self.evaluate(expr.rhs)

	def visit_Conditional(self, expr:syntax.Conditional) -> VALUE:
		if is_truthy(self.evaluate(expr.condition)):
			return self.evaluate(expr.then_part)
		else:
			return self.evaluate(expr.else_part)

	def visit_Call(self, expr:syntax.Call) -> VALUE:
		callee = self.evaluate(expr.callee)
		arguments = [self.evaluate(a) for a in expr.arguments]
		if not isinstance(callee, Callable):
			raise ScriptError(expr.paren, "%s is not callable." % stringify(callee))
		if len(arguments) != callee.arity() and not callee.variadic():
			pattern = "Expected %d arguments but got %d."
			raise ScriptError(expr.paren, pattern % (callee.arity(), len(arguments)))
		try:
			return callee.call(self, arguments)
		except NativeError as ex:
			raise ScriptError(expr.paren, str(ex)) from None
		except RecursionError:
			raise ScriptError(expr.paren, "Stack overflow.") from None

	def visit_Lambda(self, expr:syntax.Lambda) -> VALUE:
		return Closure(None, expr, self.environment)

	def visit_Get(self, expr:syntax.Get) -> VALUE:
		obj = self.evaluate(expr.obj)
		if isinstance(obj, Instance):
			return self._getter_or_value(obj.get(expr.name))
		if isinstance(obj, Array):
			return obj.get_method(expr.name)
		raise ScriptError(expr.name, "Only instances have properties.")

	def _getter_or_value(self, value:VALUE) -> VALUE:
		if isinstance(value, Closure) and value.is_getter():
			return value.call(self, [])
		return value

	def visit_Set(self, expr:syntax.Set) -> VALUE:
		obj = self.evaluate(expr.obj)
		if not isinstance(obj, Instance):
			raise ScriptError(expr.name, "Only instances have fields.")
		value = self.evaluate(expr.value)
		obj.set(expr.name, value)
		return value

	def visit_Super(self, expr:syntax.Super) -> VALUE:
		superclass = self.environment.get_at(self.locals[expr], SUPER)
		receiver = self.evaluate(expr.this)
		# Inside a class-side method, "this" is a class, so look among class-side methods.
		where = superclass.metaclass if isinstance(receiver, Class) else superclass
		method = None if where is None else where.find_method(receiver, expr.method.lexeme)
		if method is None:
			raise ScriptError(expr.method, "Undefined property '%s'." % expr.method.lexeme)
		return self._getter_or_value(method)

	def visit_Index(self, expr:syntax.Index) -> VALUE:
		obj = self.evaluate(expr.obj)
		index = self.evaluate(expr.index)
		if not isinstance(obj, Indexable):
			return None
		try: return obj.get(index)
		except NativeError as ex: raise ScriptError(expr.bracket, str(ex)) from None

	def visit_SetIndex(self, expr:syntax.SetIndex) -> VALUE:
		obj = self.evaluate(expr.obj)
		index = self.evaluate(expr.index)
		value = self.evaluate(expr.value)
		if not isinstance(obj, Indexable):
			raise ScriptError(expr.bracket, "Only arrays can be indexed.")
		try: obj.set(index, value)
		except NativeError as ex: raise ScriptError(expr.bracket, str(ex)) from None
		return value

	def visit_ArrayLiteral(self, expr:syntax.ArrayLiteral) -> VALUE:
		return Array([self.evaluate(e) for e in expr.elements])
