"""
boolalg - Boolean algebra simplification by bounded-lookahead rewriting

Simplifies propositional expression trees (and, or, not, constants and
opaque predicates) into an equivalent smaller or shallower tree.

Quick Start:
    from boolalg import BooleanAlgebraSolver, E, pretty_print

    solver = BooleanAlgebraSolver(look_ahead=2)
    result = solver.solve(E("(or p (not p))"))
    pretty_print(result)  # => "T"

Expression Syntax:
    (and a b ...)   conjunction (also: all, *)
    (or a b ...)    disjunction (also: any, +)
    (not a)         negation (also: !)
    T, F            constants
    p, q, ...       predicates

Rules (applied by the solver, cheapest result wins):
    de-morgan, degenerate-composite, double-negation,
    idempotent-composite, collapsible-composite, common-term-extraction,
    term-distribution, absorption, composite-complement,
    basic-complement, composite-with-constant

Custom node types:
    Implement TreeLike and TreeLikeFactory and pass the factory to
    BooleanAlgebraSolver(factory=...).
"""

__version__ = "0.1.0"

# Tree contract and basic nodes
from .tree import (
    NodeType,
    TreeLike,
    TreeLikeFactory,
    BasicNode,
    BasicNodeFactory,
    COMPOSITES,
    COMPOSITE_FLIP,
    CONSTANT_BOOL,
    CONSTANT_BOOL_FLIP,
)

# Rule catalogue
from .rules import (
    TransformItem,
    RuleCatalogue,
    RULE_NAMES,
)

# Solver
from .solver import (
    BooleanAlgebraSolver,
    CollapsedTreeError,
    TransformStep,
    TransformedTree,
    SolveIteration,
    SolveTrace,
    tree_size,
    tree_depth,
    solve,
)

# Reading and writing
from .expr import (
    E,
    parse_sexpr,
    from_sexpr,
    to_sexpr,
    format_sexpr,
    pretty_print,
)

# Evaluation
from .evaluate import (
    evaluate,
    predicates,
    truth_table,
    equivalent,
)

# Public API
__all__ = [
    # Version
    "__version__",
    # Tree
    "NodeType",
    "TreeLike",
    "TreeLikeFactory",
    "BasicNode",
    "BasicNodeFactory",
    "COMPOSITES",
    "COMPOSITE_FLIP",
    "CONSTANT_BOOL",
    "CONSTANT_BOOL_FLIP",
    # Rules
    "TransformItem",
    "RuleCatalogue",
    "RULE_NAMES",
    # Solver
    "BooleanAlgebraSolver",
    "CollapsedTreeError",
    "TransformStep",
    "TransformedTree",
    "SolveIteration",
    "SolveTrace",
    "tree_size",
    "tree_depth",
    "solve",
    # Expressions
    "E",
    "parse_sexpr",
    "from_sexpr",
    "to_sexpr",
    "format_sexpr",
    "pretty_print",
    # Evaluation
    "evaluate",
    "predicates",
    "truth_table",
    "equivalent",
]
