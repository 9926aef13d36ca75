"""
All the definition resolution stuff goes here.
By the time this pass is finished, every local reference has a distance
(in hops up the scope chain) registered with the interpreter.
Whatever did not resolve is presumed global, and gets looked up by name at run-time.

The scopes opened here must agree exactly with the environments
the evaluator opens, or else the distances would point to the wrong place.
"""
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence
from boozetools.support.foundation import Visitor
from . import syntax
from .diagnostics import Report
from .ontology import Token, THIS, SUPER, INIT

class Yuck(Exception):
	"""
	The first argument will be the name of the pass fraught with error.
	The end-user might not care about this, but it's handy for testing.
	"""
	pass

class VariableState(Enum):
	DECLARED = "declared"
	DEFINED = "defined"
	READ = "read"

class FunctionKind(Enum):
	NONE = "none"
	FUNCTION = "function"
	METHOD = "method"
	INITIALIZER = "initializer"

class ClassKind(Enum):
	NONE = "none"
	CLASS = "class"
	SUBCLASS = "subclass"

class _Variable:
	""" A local variable's symbol table entry. Synthetic ones have no token. """
	def __init__(self, token:Optional[Token], state:VariableState):
		self.token, self.state = token, state

class TopDown(Visitor):
	"""
	Convenience base-class to handle the dreary bits of a
	perfectly ordinary top-down walk through a syntax tree.
	"""
	def tour(self, items:Sequence):
		for item in items:
			self.visit(item)

	def visit_Expression(self, stmt:syntax.Expression): self.visit(stmt.expression)
	def visit_Print(self, stmt:syntax.Print): self.visit(stmt.expression)

	def visit_If(self, stmt:syntax.If):
		self.visit(stmt.condition)
		self.visit(stmt.then_branch)
		if stmt.else_branch is not None:
			self.visit(stmt.else_branch)

	def visit_While(self, stmt:syntax.While):
		self.visit(stmt.condition)
		self.visit(stmt.body)

	def visit_Break(self, stmt:syntax.Break): pass

	def visit_Return(self, stmt:syntax.Return):
		if stmt.value is not None:
			self.visit(stmt.value)

	def visit_Literal(self, expr:syntax.Literal): pass
	def visit_Grouping(self, expr:syntax.Grouping): self.visit(expr.expression)
	def visit_Unary(self, expr:syntax.Unary): self.visit(expr.operand)

	def visit_Binary(self, expr:syntax.Binary):
		self.visit(expr.lhs)
		self.visit(expr.rhs)

	visit_Logical = visit_Binary

	def visit_Conditional(self, expr:syntax.Conditional):
		self.visit(expr.condition)
		self.visit(expr.then_part)
		self.visit(expr.else_part)

	def visit_Call(self, expr:syntax.Call):
		self.visit(expr.callee)
		self.tour(expr.arguments)

	def visit_Get(self, expr:syntax.Get): self.visit(expr.obj)

	def visit_Set(self, expr:syntax.Set):
		self.visit(expr.value)
		self.visit(expr.obj)

	def visit_Index(self, expr:syntax.Index):
		self.visit(expr.obj)
		self.visit(expr.index)

	def visit_SetIndex(self, expr:syntax.SetIndex):
		self.visit(expr.obj)
		self.visit(expr.index)
		self.visit(expr.value)

	def visit_ArrayLiteral(self, expr:syntax.ArrayLiteral): self.tour(expr.elements)


class Resolver(TopDown):
	"""
	One left-to-right pass over the statements, with a stack of scopes.
	The global scope is not on the stack: globals may be redefined freely,
	and may be referenced before the definition runs.
	"""
	_scopes: list[dict[str, _Variable]]

	def __init__(self, interpreter, report:Report):
		self._interpreter = interpreter
		self._report = report
		self._scopes = []
		self._function = FunctionKind.NONE
		self._class = ClassKind.NONE
		self._loop_depth = 0

	def resolve(self, statements:Sequence[syntax.Stmt]):
		self.tour(statements)

	###########################################################################
	# Scope-stack mechanics

	def _begin_scope(self):
		self._scopes.append({})

	def _end_scope(self):
		for var in self._scopes.pop().values():
			if var.state is VariableState.DECLARED: self._report.never_defined(var.token)
			elif var.state is VariableState.DEFINED: self._report.never_used(var.token)

	def _declare(self, name:Token):
		if not self._scopes: return
		scope = self._scopes[-1]
		if name.lexeme in scope:
			self._report.redefined(scope[name.lexeme].token, name)
		else:
			scope[name.lexeme] = _Variable(name, VariableState.DECLARED)

	def _define(self, name:Token):
		if not self._scopes: return
		var = self._scopes[-1][name.lexeme]
		if var.state is VariableState.DECLARED:
			var.state = VariableState.DEFINED

	def _synthetic(self, name:str):
		""" "this" and "super" cannot go unused, so they start out read. """
		self._scopes[-1][name] = _Variable(None, VariableState.READ)

	def _resolve_local(self, expr:syntax.Expr, name:str):
		for distance, scope in enumerate(reversed(self._scopes)):
			if name in scope:
				self._interpreter.resolve(expr, distance)
				var = scope[name]
				var.state = VariableState.READ
				return

	def _resolve_function(self, function:syntax.Lambda, kind:FunctionKind):
		enclosing_function, enclosing_loops = self._function, self._loop_depth
		self._function, self._loop_depth = kind, 0
		self._begin_scope()
		for param in function.params or ():
			self._declare(param)
			self._define(param)
		self.tour(function.body)
		self._end_scope()
		self._function, self._loop_depth = enclosing_function, enclosing_loops

	###########################################################################
	# Statements that bind names or change the ambient situation

	def visit_Block(self, stmt:syntax.Block):
		self._begin_scope()
		self.tour(stmt.statements)
		self._end_scope()

	def visit_Var(self, stmt:syntax.Var):
		self._declare(stmt.name)
		if stmt.initializer is not None:
			self.visit(stmt.initializer)
			self._define(stmt.name)

	def visit_Function(self, stmt:syntax.Function):
		self._declare(stmt.name)
		self._define(stmt.name)
		self._resolve_function(stmt.function, FunctionKind.FUNCTION)

	def visit_Class(self, stmt:syntax.Class):
		self._declare(stmt.name)
		self._define(stmt.name)
		enclosing_class = self._class
		self._class = ClassKind.CLASS

		if stmt.superclass is not None:
			if stmt.superclass.name.lexeme == stmt.name.lexeme:
				self._report.inherits_from_itself(stmt.superclass.name)
			self._class = ClassKind.SUBCLASS
			self.visit(stmt.superclass)
			self._begin_scope()
			self._synthetic(SUPER)

		self._begin_scope()
		self._synthetic(THIS)
		for method in stmt.methods:
			kind = FunctionKind.INITIALIZER if method.name.lexeme == INIT else FunctionKind.METHOD
			self._resolve_function(method.function, kind)
		for method in stmt.class_methods:
			self._begin_scope()
			self._synthetic(THIS)
			self._resolve_function(method.function, FunctionKind.METHOD)
			self._end_scope()
		self._end_scope()

		if stmt.superclass is not None:
			self._end_scope()
		self._class = enclosing_class

	def visit_While(self, stmt:syntax.While):
		self.visit(stmt.condition)
		self._loop_depth += 1
		self.visit(stmt.body)
		self._loop_depth -= 1

	def visit_Break(self, stmt:syntax.Break):
		if not self._loop_depth:
			self._report.break_outside_loop(stmt.keyword)

	def visit_Return(self, stmt:syntax.Return):
		if self._function is FunctionKind.NONE:
			self._report.return_outside_function(stmt.keyword)
		if stmt.value is not None:
			if self._function is FunctionKind.INITIALIZER:
				self._report.return_value_from_initializer(stmt.keyword)
			self.visit(stmt.value)

	###########################################################################
	# Expressions that refer to names

	def visit_Variable(self, expr:syntax.Variable):
		name = expr.name.lexeme
		if self._scopes and name in self._scopes[-1] and self._scopes[-1][name].state is VariableState.DECLARED:
			self._report.read_in_own_initializer(expr.name)
		self._resolve_local(expr, name)

	def visit_Assign(self, expr:syntax.Assign):
		self.visit(expr.value)
		self._resolve_local(expr, expr.name.lexeme)

	def visit_This(self, expr:syntax.This):
		if self._class is ClassKind.NONE:
			self._report.this_outside_class(expr.keyword)
		else:
			self._resolve_local(expr, THIS)

	def visit_Super(self, expr:syntax.Super):
		if self._class is ClassKind.NONE:
			self._report.super_outside_class(expr.keyword)
		elif self._class is ClassKind.CLASS:
			self._report.super_without_superclass(expr.keyword)
		else:
			self._resolve_local(expr, SUPER)
			self._resolve_local(expr.this, THIS)

	def visit_Lambda(self, expr:syntax.Lambda):
		self._resolve_function(expr, FunctionKind.FUNCTION)


def resolve_text(text:str, path:Optional[Path], interpreter, report:Report) -> list[syntax.Stmt]:
	""" Parse and resolve a chunk of source, or else raise Yuck naming the phase that failed. """
	from .front_end import parse_text
	statements = parse_text(text, path, report)
	if report.sick(): raise Yuck("parse")
	Resolver(interpreter, report).resolve(statements)
	if report.sick(): raise Yuck("resolve")
	return statements
