#!/usr/bin/env python3
"""
boolalg Feature Demonstration

This script walks through the main features of the boolalg library.
"""

from boolalg import (
    BasicNode, BasicNodeFactory, BooleanAlgebraSolver, E,
    equivalent, format_sexpr, pretty_print, truth_table,
)


def section(title: str):
    """Print a section header."""
    print(f"\n{'='*60}")
    print(f" {title}")
    print('='*60)


def demo_basic_usage():
    """Simplify a few expressions with the default solver."""
    section("Basic Usage")

    solver = BooleanAlgebraSolver()

    examples = [
        "(or p p)",
        "(not (not p))",
        "(or p (not p))",
        "(and a (or a b))",
        "(or a (or b (or c d)))",
    ]

    for expr_str in examples:
        result = solver.solve(E(expr_str))
        print(f"  {expr_str} => {format_sexpr(result)}")


def demo_lookahead():
    """Show why a deeper lookahead finds more."""
    section("Lookahead")

    expr_str = "(and p (or q (not p)))"
    for look_ahead in (1, 2):
        result = BooleanAlgebraSolver(look_ahead=look_ahead).solve(E(expr_str))
        print(f"  look_ahead={look_ahead}: {pretty_print(E(expr_str))} => {pretty_print(result)}")


def demo_rule_selection():
    """Disable rules to keep certain shapes."""
    section("Rule Selection")

    solver = BooleanAlgebraSolver()
    print(f"  {solver}")

    expr_str = "(or p (not p))"
    print(f"  all rules:             {format_sexpr(solver.solve(E(expr_str)))}")

    solver.disable_rule("composite-complement")
    print(f"  no composite-complement: {format_sexpr(solver.solve(E(expr_str)))}")


def demo_tracing():
    """Demonstrate trace formatting."""
    section("Tracing")

    solver = BooleanAlgebraSolver()
    result, trace = solver.solve(E("(or (not (not p)) (not (not p)))"), trace=True)

    print("  Verbose format (default):")
    for line in str(trace).split('\n'):
        print(f"    {line}")

    print(f"\n  Compact: {trace.format('compact')}")
    print(f"  Rules: {trace.format('rules')}")
    print(f"  Summary: {trace.summary()}")


def demo_truth_tables():
    """Check a simplification with truth tables."""
    section("Truth Tables")

    before = E("(or (and a b) (and a c))")
    after = BooleanAlgebraSolver(look_ahead=2).solve(E("(or (and a b) (and a c))"))

    print(f"  {pretty_print(before)} => {pretty_print(after)}")
    for assignment, value in truth_table(after, ["a", "b", "c"]):
        row = " ".join(f"{k}={int(v)}" for k, v in assignment.items())
        print(f"    {row} -> {int(value)}")
    print(f"  equivalent: {equivalent(before, after)}")


class CountingFactory(BasicNodeFactory):
    """A factory that counts the nodes it creates."""

    def __init__(self):
        self.created = 0

    def with_type(self, node_type) -> BasicNode:
        self.created += 1
        return super().with_type(node_type)

    def from_prototype(self, prototype) -> BasicNode:
        self.created += 1
        return super().from_prototype(prototype)


def demo_custom_factory():
    """Plug in a different node factory."""
    section("Custom Factory")

    factory = CountingFactory()
    solver = BooleanAlgebraSolver(factory=factory, look_ahead=2)
    result = solver.solve(E("(and (or a b) (or a c))"))

    print(f"  result: {pretty_print(result)}")
    print(f"  nodes created during search: {factory.created}")


def main():
    """Run all demonstrations."""
    print("boolalg - Boolean algebra simplification")
    print("Feature Demonstration")

    demo_basic_usage()
    demo_lookahead()
    demo_rule_selection()
    demo_tracing()
    demo_truth_tables()
    demo_custom_factory()

    print("\n" + "="*60)
    print(" Demo complete!")
    print("="*60)


if __name__ == "__main__":
    main()
