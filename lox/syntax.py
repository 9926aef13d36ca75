"""
The set of parse-nodes in simple form.
The parser calls these constructors with subordinate semantic-values as it descends.
Both the resolver and the evaluator dispatch on the class names here,
so a new kind of node means a new method in each of them.

Nodes compare by identity, which is what the resolver's distance-map wants.
"""
from typing import Optional, Sequence, Any
from .ontology import Phrase, Token

class Expr(Phrase): pass

class Stmt(Phrase): pass

###############################################################################
# Expressions

class Literal(Expr):
	def __init__(self, value:Any, token:Token):
		self.value, self.token = value, token
	def __repr__(self): return "<lit %r>" % self.value
	def left(self): return self.token.left()
	def right(self): return self.token.right()

class Grouping(Expr):
	def __init__(self, opening:Token, expression:Expr, closing:Token):
		self.opening, self.expression, self.closing = opening, expression, closing
	def left(self): return self.opening.left()
	def right(self): return self.closing.right()

class Variable(Expr):
	def __init__(self, name:Token): self.name = name
	def __repr__(self): return "<ref:%s>" % self.name.lexeme
	def left(self): return self.name.left()
	def right(self): return self.name.right()

class Assign(Expr):
	def __init__(self, name:Token, value:Expr):
		self.name, self.value = name, value
	def left(self): return self.name.left()
	def right(self): return self.value.right()

class Unary(Expr):
	""" Prefix or postfix; the increment and decrement operators care which. """
	def __init__(self, op:Token, operand:Expr, postfix:bool):
		self.op, self.operand, self.postfix = op, operand, postfix
	def left(self): return (self.operand if self.postfix else self.op).left()
	def right(self): return (self.op if self.postfix else self.operand).right()

class Binary(Expr):
	def __init__(self, lhs:Expr, op:Token, rhs:Expr):
		self.lhs, self.op, self.rhs = lhs, op, rhs
	def left(self): return self.lhs.left()
	def right(self): return self.rhs.right()

class Logical(Binary):
	""" The short-cut operators "and" and "or". """

class Conditional(Expr):
	def __init__(self, condition:Expr, question:Token, then_part:Expr, else_part:Expr):
		self.condition, self.question = condition, question
		self.then_part, self.else_part = then_part, else_part
	def left(self): return self.condition.left()
	def right(self): return self.else_part.right()

class Call(Expr):
	def __init__(self, callee:Expr, paren:Token, arguments:Sequence[Expr]):
		self.callee, self.paren, self.arguments = callee, paren, arguments
	def left(self): return self.callee.left()
	def right(self): return self.paren.right()

class Get(Expr):
	def __init__(self, obj:Expr, name:Token):
		self.obj, self.name = obj, name
	def left(self): return self.obj.left()
	def right(self): return self.name.right()

class Set(Expr):
	def __init__(self, obj:Expr, name:Token, value:Expr):
		self.obj, self.name, self.value = obj, name, value
	def left(self): return self.obj.left()
	def right(self): return self.value.right()

class Index(Expr):
	def __init__(self, obj:Expr, bracket:Token, index:Expr):
		self.obj, self.bracket, self.index = obj, bracket, index
	def left(self): return self.obj.left()
	def right(self): return self.bracket.right()

class SetIndex(Expr):
	def __init__(self, obj:Expr, bracket:Token, index:Expr, value:Expr):
		self.obj, self.bracket, self.index, self.value = obj, bracket, index, value
	def left(self): return self.obj.left()
	def right(self): return self.value.right()

class ArrayLiteral(Expr):
	def __init__(self, opening:Token, elements:Sequence[Expr], closing:Token):
		self.opening, self.elements, self.closing = opening, elements, closing
	def left(self): return self.opening.left()
	def right(self): return self.closing.right()

class This(Expr):
	def __init__(self, keyword:Token): self.keyword = keyword
	def __repr__(self): return "<this>"
	def left(self): return self.keyword.left()
	def right(self): return self.keyword.right()

class Super(Expr):
	"""
	The receiver of a super-call is whatever "this" means at the point of use,
	so the node carries its own "this" for the resolver to find a distance for.
	"""
	def __init__(self, keyword:Token, method:Token):
		self.keyword, self.method = keyword, method
		self.this = This(keyword)
	def left(self): return self.keyword.left()
	def right(self): return self.method.right()

class Lambda(Expr):
	"""
	A function literal: the body of every function, method, and anonymous function.
	Absent parameters (not merely an empty list) make a getter method.
	"""
	def __init__(self, keyword:Token, params:Optional[Sequence[Token]], body:Sequence[Stmt], closing:Token):
		self.keyword, self.params, self.body, self.closing = keyword, params, body, closing
	def is_getter(self) -> bool: return self.params is None
	def left(self): return self.keyword.left()
	def right(self): return self.closing.right()

###############################################################################
# Statements

class Expression(Stmt):
	def __init__(self, expression:Expr, semicolon:Token):
		self.expression, self.semicolon = expression, semicolon
	def left(self): return self.expression.left()
	def right(self): return self.semicolon.right()

class Print(Stmt):
	def __init__(self, keyword:Token, expression:Expr):
		self.keyword, self.expression = keyword, expression
	def left(self): return self.keyword.left()
	def right(self): return self.expression.right()

class Var(Stmt):
	def __init__(self, name:Token, initializer:Optional[Expr]):
		self.name, self.initializer = name, initializer
	def left(self): return self.name.left()
	def right(self): return (self.initializer or self.name).right()

class Block(Stmt):
	def __init__(self, opening:Token, statements:Sequence[Stmt], closing:Token):
		self.opening, self.statements, self.closing = opening, statements, closing
	def left(self): return self.opening.left()
	def right(self): return self.closing.right()

class If(Stmt):
	def __init__(self, keyword:Token, condition:Expr, then_branch:Stmt, else_branch:Optional[Stmt]):
		self.keyword, self.condition = keyword, condition
		self.then_branch, self.else_branch = then_branch, else_branch
	def left(self): return self.keyword.left()
	def right(self): return (self.else_branch or self.then_branch).right()

class While(Stmt):
	def __init__(self, keyword:Token, condition:Expr, body:Stmt):
		self.keyword, self.condition, self.body = keyword, condition, body
	def left(self): return self.keyword.left()
	def right(self): return self.body.right()

class Break(Stmt):
	def __init__(self, keyword:Token): self.keyword = keyword
	def left(self): return self.keyword.left()
	def right(self): return self.keyword.right()

class Return(Stmt):
	def __init__(self, keyword:Token, value:Optional[Expr]):
		self.keyword, self.value = keyword, value
	def left(self): return self.keyword.left()
	def right(self): return (self.value or self.keyword).right()

class Function(Stmt):
	""" Named functions, and also methods within a class body. """
	def __init__(self, name:Token, function:Lambda):
		self.name, self.function = name, function
	def __repr__(self): return "{%s:Function}" % self.name.lexeme
	def left(self): return self.name.left()
	def right(self): return self.function.right()

class Class(Stmt):
	def __init__(self, name:Token, superclass:Optional[Variable], methods:Sequence[Function], class_methods:Sequence[Function], closing:Token):
		self.name, self.superclass = name, superclass
		self.methods, self.class_methods = methods, class_methods
		self.closing = closing
	def __repr__(self): return "{%s:Class}" % self.name.lexeme
	def left(self): return self.name.left()
	def right(self): return self.closing.right()
