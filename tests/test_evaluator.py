from io import StringIO
import unittest
from unittest import mock

from lox.diagnostics import Report
from lox.executive import run_text
from lox.tree_walker.evaluator import Interpreter
from lox.tree_walker.values import Array, Class, Instance

class Silence(Report):
	def __init__(self):
		super().__init__(verbose=False, max_issues=30)
		self.complain_to_console = mock.Mock()
		self.caution_to_console = mock.Mock()

def _interpreter(stdin="") -> Interpreter:
	return Interpreter(Silence(), stdout=StringIO(), stdin=StringIO(stdin))

class EvaluatorTestCase(unittest.TestCase):
	def setUp(self) -> None:
		self.interpreter = _interpreter()

	def run_lox(self, text) -> bool:
		self.interpreter.report.reset()
		return run_text(self.interpreter, text)

	def output(self) -> list[str]:
		return self.interpreter.stdout.getvalue().splitlines()

	def assertPrints(self, text, *lines):
		self.assertTrue(self.run_lox(text), [i.intro for i in self.interpreter.report.issues])
		self.assertEqual(list(lines), self.output())

	def assertDies(self, text, message):
		self.assertFalse(self.run_lox(text))
		issues = self.interpreter.report.issues
		self.assertEqual(1, len(issues))
		self.assertIn(message, issues[0].intro)
		return issues[0].intro

	def value_of(self, text):
		self.assertTrue(self.run_lox(text))
		return self.interpreter.last_value


class ArithmeticAndLogic(EvaluatorTestCase):

	def test_numbers_print_without_a_trailing_zero(self):
		self.assertPrints("print 2+2; print 1/4; print -0.5 * 4;", "4", "0.25", "-2")

	def test_plus_stringifies_when_either_side_is_a_string(self):
		self.assertPrints('print "a" + 1; print 1 + "a"; print nil + "!";', "a1", "1a", "nil!")

	def test_plus_rejects_mismatch(self):
		self.assertDies("print true + 1;", "Operands must be two numbers or two strings.")

	def test_large_numbers_use_exponent_notation(self):
		self.assertPrints("print 1000000000000000000000; print 0.0000001;", "1e+21", "1e-07")

	def test_division_by_zero(self):
		intro = self.assertDies("var x = 1;\nprint x / 0;", "Cannot divide by zero.")
		self.assertTrue(intro.startswith("[line 2]"))

	def test_comparison_requires_numbers(self):
		self.assertDies('print "a" < "b";', "Operands must be numbers.")

	def test_negation_requires_a_number(self):
		self.assertDies("print -nil;", "Operand must be a number.")

	def test_equality_never_raises(self):
		self.assertPrints(
			'print nil == 0; print nil == false; print 0 == false; print "" == nil; print 1 == 1.0;',
			"false", "false", "false", "false", "true",
		)

	def test_objects_compare_by_identity(self):
		self.assertPrints("class A {} var a = A(); print a == a; print A() == A(); print [] == [];", "true", "false", "false")

	def test_truthiness(self):
		self.assertPrints('print !nil; print !false; print !0; print !"";', "true", "true", "false", "false")

	def test_logic_short_circuits_and_returns_an_operand(self):
		self.assertPrints(
			'print nil or "x"; print "y" or boom(); print nil and boom(); print 1 and 2;',
			"x", "y", "nil", "2",
		)

	def test_conditional_evaluates_one_branch(self):
		self.assertPrints('var n = 0; print true ? "t" : n++; print n; print false ? n++ : "f"; print n;', "t", "0", "f", "0")


class Variables(EvaluatorTestCase):

	def test_uninitialized_var_is_nil(self):
		self.assertPrints("var a; print a;", "nil")

	def test_globals_may_be_redefined(self):
		self.assertPrints("var a = 1; var a = a + 1; print a;", "2")

	def test_undefined_variable(self):
		self.assertDies("print nope;", "Undefined variable 'nope'.")

	def test_assignment_to_undefined_global(self):
		self.assertDies("nope = 3;", "Undefined variable 'nope'.")

	def test_assignment_is_an_expression(self):
		self.assertPrints("var a; var b; a = b = 3; print a; print b;", "3", "3")

	def test_shadowing_in_blocks(self):
		self.assertPrints('var a = "outer"; { var a = "inner"; print a; } print a;', "inner", "outer")

	def test_postfix_and_prefix_steps(self):
		self.assertPrints("var i = 1; print i++; print i; print ++i; print i--; print --i;", "1", "2", "3", "3", "1")

	def test_step_writes_back_through_the_resolved_slot(self):
		self.assertPrints("var i = 10; { var i = 0; i++; ++i; print i; } print i;", "2", "10")

	def test_step_needs_a_variable(self):
		self.assertDies("var a = [1]; ++a[0];", "Operand of increment operation must be a variable.")
		self.assertDies("var a = [1]; a[0]--;", "Operand of decrement operation must be a variable.")

	def test_step_needs_a_number(self):
		self.assertDies('var s = "s"; s--;', "Operand must be a number.")


class ControlFlow(EvaluatorTestCase):

	def test_if_else(self):
		self.assertPrints('if (1 > 2) print "a"; else print "b"; if (nil) print "c";', "b")

	def test_while_and_break(self):
		self.assertPrints("var i = 0; while (true) { if (i == 2) break; print i; i = i + 1; }", "0", "1")

	def test_break_leaves_only_the_innermost_loop(self):
		self.assertPrints(
			"for (var i = 0; i < 2; i++) { while (true) break; print i; }",
			"0", "1",
		)

	def test_for_loop_closures_share_one_variable(self):
		self.assertPrints(
			"var fs = []; for (var i = 0; i < 3; i++) fs.add(fun () { return i; }); print fs[0]();",
			"3",
		)

	def test_return_escapes_nested_loops(self):
		self.assertPrints(
			"fun f() { while (true) { for (;;) { return 7; } } } print f();",
			"7",
		)

	def test_function_without_return_gives_nil(self):
		self.assertPrints("fun f() {} print f();", "nil")

	def test_runtime_error_skips_the_rest(self):
		self.assertFalse(self.run_lox('print "before"; print 1/0; print "after";'))
		self.assertEqual(["before"], self.output())

	def test_environment_is_restored_after_an_error(self):
		self.assertFalse(self.run_lox("var a = 1; fun f() { var a = 2; return a / 0; } f();"))
		self.assertPrints("print a;", "1")

	def test_stack_overflow_is_a_runtime_error(self):
		self.assertDies("fun f() { return f(); } f();", "Stack overflow.")


class Functions(EvaluatorTestCase):

	def test_closures_share_captured_variables(self):
		self.assertPrints(
			"""
			fun pair() {
				var n = 0;
				fun inc() { n = n + 1; }
				fun get() { return n; }
				inc();
				return get;
			}
			var g = pair();
			print g();
			""",
			"1",
		)

	def test_closure_binding_is_static(self):
		self.assertPrints(
			"""
			var a = "global";
			{
				fun show() { print a; }
				show();
				var a = "block";
				show();
				print a;
			}
			""",
			"global", "global", "block",
		)

	def test_counter(self):
		self.assertPrints(
			"fun counter() { var i = 0; return fun () { i++; return i; }; } var c = counter(); c(); print c();",
			"2",
		)

	def test_arity_is_checked(self):
		self.assertDies("fun f(a) {} f(1, 2);", "Expected 1 arguments but got 2.")

	def test_calling_a_non_callable(self):
		self.assertDies('"str"();', "is not callable.")

	def test_recursion(self):
		self.assertPrints("fun fact(n) { return n < 2 ? 1 : n * fact(n - 1); } print fact(5);", "120")

	def test_function_display(self):
		self.assertPrints("fun f() {} print f; print fun () {}; print clock;", "<fn f>", "<fn>", "<native fn>")


class Classes(EvaluatorTestCase):

	def test_fields_and_methods(self):
		self.assertPrints(
			"""
			class Point {
				init(x, y) { this.x = x; this.y = y; }
				sum() { return this.x + this.y; }
			}
			var p = Point(1, 2);
			print p.sum();
			p.x = 10;
			print p.sum();
			print p;
			print Point;
			""",
			"3", "12", "<Point instance>", "<class Point>",
		)

	def test_inherited_method_sees_subclass_instance(self):
		self.assertPrints(
			"""
			class A { who() { return this.name(); } name() { return "A"; } }
			class B < A { name() { return "B"; } }
			print B().who();
			""",
			"B",
		)

	def test_super_starts_lookup_above_the_defining_class(self):
		self.assertPrints(
			"""
			class A { m() { return "A"; } }
			class B < A { m() { return "B" + super.m(); } }
			class C < B {}
			print C().m();
			""",
			"BA",
		)

	def test_bound_methods_remember_this(self):
		self.assertPrints(
			"""
			class Box { init(v) { this.v = v; } get() { return this.v; } }
			var m = Box(5).get;
			print m();
			""",
			"5",
		)

	def test_init_always_returns_the_instance(self):
		self.assertPrints(
			"""
			class A { init() { this.n = 1; return; } }
			var a = A();
			print a.init() == a;
			print a.n;
			""",
			"true", "1",
		)

	def test_init_is_inherited(self):
		self.assertPrints(
			"""
			class A { init(n) { this.n = n; } }
			class B < A {}
			print B(4).n;
			""",
			"4",
		)

	def test_class_arity_comes_from_init(self):
		self.assertDies("class A { init(a, b) {} } A(1);", "Expected 2 arguments but got 1.")
		self.assertDies("class B {} B(1);", "Expected 0 arguments but got 1.")

	def test_getter_runs_on_access(self):
		self.assertPrints(
			"""
			class Circle {
				init(r) { this.r = r; }
				area { return 3 * this.r * this.r; }
			}
			print Circle(2).area;
			""",
			"12",
		)

	def test_class_methods(self):
		self.assertPrints(
			"""
			class Math {
				class square(n) { return n * n; }
				class twice(n) { return 2 * this.square(n); }
			}
			class More < Math {
				class square(n) { return super.square(n) + 1; }
			}
			print Math.square(3);
			print Math.twice(3);
			print More.twice(3);
			""",
			"9", "18", "20",
		)

	def test_class_getter(self):
		self.assertPrints("class Config { class version { return 2; } } print Config.version;", "2")

	def test_class_method_is_not_an_instance_method(self):
		self.assertDies("class A { class make() { return A(); } } A().make();", "Undefined property 'make'.")

	def test_undefined_property(self):
		self.assertDies("class A {} print A().nothing;", "Undefined property 'nothing'.")

	def test_properties_only_on_instances(self):
		self.assertDies('print "x".length;', "Only instances have properties.")
		self.assertDies("var n = 1; n.field = 2;", "Only instances have fields.")

	def test_superclass_must_be_a_class(self):
		self.assertDies("var NotAClass = 1; class A < NotAClass {}", "Superclass must be a class.")

	def test_class_value_model(self):
		self.run_lox("class A {} class B < A {}")
		b = self.interpreter.globals.get(_token("B"))
		self.assertIsInstance(b, Class)
		self.assertIsInstance(b, Instance)
		self.assertIs(b.superclass.metaclass, b.metaclass.superclass)


class Arrays(EvaluatorTestCase):

	def test_negative_index_wraps(self):
		self.assertPrints("print [1, 2, 3][-1];", "3")

	def test_out_of_bounds_write(self):
		self.assertDies("var a = [1, 2, 3]; a[3] = 0;", "Array index out of bounds.")

	def test_index_must_be_integral(self):
		self.assertDies('[1][0.5];', "Array index must be an integer.")
		self.assertDies('[1]["0"];', "Array index must be an integer.")

	def test_index_read_of_non_array_is_nil(self):
		self.assertPrints("print nil[0]; print 5[0];", "nil", "nil")

	def test_index_write_of_non_array_dies(self):
		self.assertDies("var s = 1; s[0] = 2;", "Only arrays can be indexed.")

	def test_methods(self):
		self.assertPrints(
			"var a = []; a.add(1); a.add(2, 3); print a.length(); print a.remove(1); print a.pop(); print a; print a.isEmpty();",
			"3", "2", "1", "[3]", "false",
		)

	def test_method_errors(self):
		self.assertDies("[].pop();", "Array is empty.")
		self.assertDies("[].sort();", "No such method.")

	def test_array_method_display(self):
		self.assertPrints("print [].add;", "<native fn>")

	def test_arrays_are_shared_by_reference(self):
		self.assertPrints("var a = [1]; var b = a; b.add(2); print a;", "[1, 2]")

	def test_array_containing_itself(self):
		self.assertPrints("var a = [1]; a.add(a); print a; print a.length();", "[1, [...]]", "2")

	def test_array_literal_value(self):
		value = self.value_of("[1, nil, \"s\", [true]];")
		self.assertIsInstance(value, Array)
		self.assertEqual([1.0, None, "s"], value.elements[:3])


class Natives(EvaluatorTestCase):

	def test_print_native_joins_with_spaces(self):
		self.assertPrints('print("a", 1, nil); print();', "a 1 nil", "")

	def test_parenthesized_print_statement(self):
		self.assertPrints("print (1+2)*3; var a = 1; var b = 2; var c = 4; print (a+b)*c; print (a) - b;", "9", "12", "-1")

	def test_print_native_within_an_expression(self):
		self.assertPrints("var x = print(\"in\", 1); print x;", "in 1", "nil")

	def test_print_native_is_a_value(self):
		self.assertPrints("var p = print; p(1, 2);", "1 2")

	def test_clock(self):
		self.assertPrints("var t = clock(); print t > 0;", "true")

	def test_prompt_reads_a_line(self):
		self.interpreter = _interpreter("Ada\nmore\n")
		self.assertTrue(self.run_lox('var name = prompt("Name?", ""); print "Hi " + name;'))
		self.assertEqual("Name? Hi Ada\n", self.interpreter.stdout.getvalue())

	def test_prompt_at_end_of_input(self):
		self.assertDies("prompt();", "No more input.")


class Echo(EvaluatorTestCase):

	def test_expression_statement_is_remembered(self):
		self.assertEqual(4.0, self.value_of("2 + 2;"))
		self.interpreter.echo()
		self.assertEqual(["4"], self.output())

	def test_print_suppresses_echo(self):
		self.assertIsNone(self.value_of("print 1;"))
		self.interpreter.echo()
		self.assertEqual(["1"], self.output())

	def test_definitions_persist_between_texts(self):
		self.assertTrue(self.run_lox("var a = 3;"))
		self.assertEqual(6.0, self.value_of("a * 2;"))


def _token(name):
	from lox.ontology import Token
	return Token("name", name, None, 1, 0)


if __name__ == '__main__':
	unittest.main()
