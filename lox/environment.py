"""
Simplest possible environment concept.

This is the canonical list-structured search, for names the resolver left to the globals.
Everything the resolver did find gets reached by counting hops instead of searching.
"""
from typing import Any, Optional
from .ontology import Token, ScriptError

class Environment:
	def __init__(self, enclosing:Optional["Environment"]=None):
		self._bindings = {}
		self.enclosing = enclosing

	def __repr__(self):
		return "<Environment %s>" % ", ".join(self._bindings)

	def holds(self, name:str) -> bool: return name in self._bindings

	def define(self, name:str, value:Any):
		""" No duplicate-check here: That is the resolver's job. """
		self._bindings[name] = value

	def get(self, name:Token) -> Any:
		return self._search(name)._bindings[name.lexeme]

	def assign(self, name:Token, value:Any):
		self._search(name)._bindings[name.lexeme] = value

	def _search(self, name:Token) -> "Environment":
		env = self
		while env is not None:
			if name.lexeme in env._bindings: return env
			env = env.enclosing
		raise ScriptError(name, "Undefined variable '%s'." % name.lexeme)

	def ancestor(self, distance:int) -> "Environment":
		env = self
		for _ in range(distance):
			env = env.enclosing
			assert env is not None, "The resolver and the evaluator disagree about scope depth."
		return env

	def get_at(self, distance:int, name:str) -> Any:
		frame = self.ancestor(distance)._bindings
		assert name in frame, (distance, name)
		return frame[name]

	def assign_at(self, distance:int, name:Token, value:Any):
		frame = self.ancestor(distance)._bindings
		assert name.lexeme in frame, (distance, name)
		frame[name.lexeme] = value
