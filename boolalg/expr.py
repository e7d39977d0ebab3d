"""
Reading, writing and building boolean expression trees.

S-expression syntax:
    (and a b ...)   conjunction   (aliases: all, *)
    (or a b ...)    disjunction   (aliases: any, +)
    (not a)         negation      (alias: !)
    T / true        constant true
    F / false       constant false
    anything else   predicate; its data is the atom text (or number)

    Examples:
    (and p (or q (not p)))
    (+ (* a b) (* a c))

Two output formats:
    format_sexpr(node)  -> "(and p q)"   re-parseable
    pretty_print(node)  -> "(p * q)"     compact display only
"""

from typing import Any, Dict, List, Optional, Union

from .tree import BasicNodeFactory, NodeType, TreeLike, TreeLikeFactory

SExprType = Union[int, float, str, List]

OPERATORS: Dict[str, NodeType] = {
    "and": NodeType.ALL,
    "all": NodeType.ALL,
    "*": NodeType.ALL,
    "or": NodeType.ANY,
    "any": NodeType.ANY,
    "+": NodeType.ANY,
    "not": NodeType.NOT,
    "!": NodeType.NOT,
}

CONSTANTS: Dict[str, NodeType] = {
    "T": NodeType.TRUE,
    "true": NodeType.TRUE,
    "F": NodeType.FALSE,
    "false": NodeType.FALSE,
}

_OPERATOR_NAMES: Dict[NodeType, str] = {
    NodeType.ALL: "and",
    NodeType.ANY: "or",
    NodeType.NOT: "not",
    NodeType.NULL: "null",
}

_default_factory = BasicNodeFactory()


# ============================================================
# S-expression reader
# ============================================================

def parse_sexpr(s: str) -> Optional[SExprType]:
    """
    Parse an S-expression string into a nested list.

    Examples:
        "(and p q)" -> ["and", "p", "q"]
        "(or p (not q))" -> ["or", "p", ["not", "q"]]

    Raises:
        ValueError: On unbalanced parentheses
    """
    s = s.strip()
    if not s:
        return None

    if s.startswith('('):
        # Parse list
        depth = 0
        parts = []
        current = ''
        i = 1  # Skip opening paren
        closed = False

        while i < len(s):
            c = s[i]
            if c == '(':
                depth += 1
                current += c
            elif c == ')':
                if depth == 0:
                    if current.strip():
                        parts.append(parse_sexpr(current.strip()))
                    closed = True
                    break
                depth -= 1
                current += c
            elif c in ' \t\n' and depth == 0:
                if current.strip():
                    parts.append(parse_sexpr(current.strip()))
                current = ''
            else:
                current += c
            i += 1

        if not closed:
            raise ValueError(f"Unbalanced parentheses in: {s}")
        if s[i + 1:].strip():
            raise ValueError(f"Unexpected text after expression: {s[i + 1:].strip()}")
        return parts

    if s.startswith(')'):
        raise ValueError(f"Unbalanced parentheses in: {s}")
    if any(c in s for c in ' \t\n()'):
        raise ValueError(f"Expected a single expression, got: {s}")

    # Parse atom, numbers first
    try:
        return int(s)
    except ValueError:
        try:
            return float(s)
        except ValueError:
            pass

    return s


def from_sexpr(expr: Union[str, SExprType],
               factory: Optional[TreeLikeFactory] = None) -> TreeLike:
    """
    Build a tree from an s-expression string or an already parsed list.

    Args:
        expr: Text such as "(and p q)" or a list such as ["and", "p", "q"]
        factory: Node factory (default: BasicNodeFactory)

    Raises:
        ValueError: For empty input, unknown operators or a bad negation
    """
    factory = factory if factory is not None else _default_factory
    if isinstance(expr, str):
        parsed = parse_sexpr(expr)
        if parsed is None:
            raise ValueError("Empty expression")
        expr = parsed
    return _build(expr, factory)


def _build(expr: SExprType, factory: TreeLikeFactory) -> TreeLike:
    if isinstance(expr, list):
        if not expr:
            raise ValueError("Empty list is not an expression")
        op = expr[0]
        if not isinstance(op, str) or op not in OPERATORS:
            raise ValueError(f"Unknown operator: {op}")
        node_type = OPERATORS[op]
        operands = expr[1:]
        if node_type == NodeType.NOT and len(operands) != 1:
            raise ValueError(f"{op} takes exactly one operand, got {len(operands)}")
        node = factory.with_type(node_type)
        for operand in operands:
            node.add_child(_build(operand, factory))
        return node

    if isinstance(expr, str) and expr in CONSTANTS:
        return factory.with_type(CONSTANTS[expr])

    if isinstance(expr, str) and expr in OPERATORS:
        raise ValueError(f"Operator {expr} used as an operand")

    return factory.predicate(expr)


# ============================================================
# Writers
# ============================================================

def to_sexpr(node: TreeLike) -> SExprType:
    """
    Convert a tree to nested lists.

    The NULL sentinel is written as a "null" operator; it only shows up when
    formatting solver internals such as trace steps.
    """
    node_type = node.node_type
    if node_type == NodeType.TRUE:
        return "T"
    if node_type == NodeType.FALSE:
        return "F"
    if node_type == NodeType.PREDICATE:
        return node.data
    return [_OPERATOR_NAMES[node_type]] + [to_sexpr(c) for c in node.children]


def format_sexpr(node: Union[TreeLike, SExprType]) -> str:
    """
    Format a tree (or nested list) as an S-expression string.

    Examples:
        E("(and p (not q))") -> "(and p (not q))"
        ["or", "p", "T"] -> "(or p T)"
    """
    expr = to_sexpr(node) if isinstance(node, TreeLike) else node
    if isinstance(expr, list):
        return "(" + " ".join(format_sexpr(e) for e in expr) + ")"
    return str(expr)


def pretty_print(node: TreeLike) -> str:
    """
    Render a tree as a compact infix string.

    Disjunction joins with " + ", conjunction with " * ", negation is ¬(x),
    constants are T and F, the NULL sentinel is X and a predicate shows the
    first character of its data. Not meant to be parsed back.

    Examples:
        (and a b)             -> "(a * b)"
        (or apple (not bee))  -> "(a + ¬(b))"
    """
    node_type = node.node_type
    children = [pretty_print(c) for c in node.children]

    if node_type == NodeType.PREDICATE:
        return str(node.data)[:1]
    if node_type == NodeType.TRUE:
        return "T"
    if node_type == NodeType.FALSE:
        return "F"
    if node_type == NodeType.NULL:
        return "X" + "X".join(children)
    if node_type == NodeType.ANY:
        return "(" + " + ".join(children) + ")"
    if node_type == NodeType.ALL:
        return "(" + " * ".join(children) + ")"
    return "¬(" + "¬".join(children) + ")"


# ============================================================
# Expression Builder
# ============================================================

class _ExprBuilder:
    """
    Expression builder for boolalg.

    Examples:
        from boolalg import E

        # Parse s-expression string
        expr = E("(and p (or q (not p)))")

        # Build programmatically; strings become predicates
        expr = E.and_("p", E.or_("q", E.not_("p")))

        # Several predicates at once
        p, q = E.preds("p", "q")
    """

    def __init__(self, factory: TreeLikeFactory):
        self.factory = factory

    def __call__(self, s: str) -> TreeLike:
        """Parse an s-expression string into a tree."""
        return from_sexpr(s, self.factory)

    def _operand(self, arg) -> TreeLike:
        if isinstance(arg, TreeLike):
            return arg
        return self.factory.predicate(arg)

    def and_(self, *args) -> TreeLike:
        """Conjunction of the arguments."""
        return self.factory.with_type(NodeType.ALL).add_children([self._operand(a) for a in args])

    def or_(self, *args) -> TreeLike:
        """Disjunction of the arguments."""
        return self.factory.with_type(NodeType.ANY).add_children([self._operand(a) for a in args])

    def not_(self, arg) -> TreeLike:
        """Negation of the argument."""
        return self.factory.with_type(NodeType.NOT).add_child(self._operand(arg))

    def pred(self, data: Any) -> TreeLike:
        """A predicate carrying data."""
        return self.factory.predicate(data)

    def preds(self, *names: Any):
        """Several predicates, for unpacking."""
        return tuple(self.pred(n) for n in names)

    def true(self) -> TreeLike:
        return self.factory.with_type(NodeType.TRUE)

    def false(self) -> TreeLike:
        return self.factory.with_type(NodeType.FALSE)

    def __repr__(self) -> str:
        return "E (expression builder)"


# Singleton instance
E = _ExprBuilder(_default_factory)
