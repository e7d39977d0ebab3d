"""
Truth-table evaluation of boolean expression trees.

Used to check that a simplification preserved meaning:

    before = E("(and p (or q (not p)))")
    after = solve(E("(and p (or q (not p)))"), look_ahead=2)
    equivalent(before, after)   # => True
"""

from itertools import product
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .tree import NodeType, TreeLike


def evaluate(node: TreeLike, assignment: Mapping[Any, bool]) -> bool:
    """
    Evaluate node with predicate values taken from assignment.

    An empty conjunction is true and an empty disjunction is false.

    Raises:
        KeyError: If a predicate has no value in assignment
        ValueError: If a negation or the NULL sentinel does not have exactly one child
    """
    node_type = node.node_type
    children = node.children

    if node_type == NodeType.TRUE:
        return True
    if node_type == NodeType.FALSE:
        return False
    if node_type == NodeType.PREDICATE:
        return bool(assignment[node.data])
    if node_type == NodeType.ALL:
        return all(evaluate(c, assignment) for c in children)
    if node_type == NodeType.ANY:
        return any(evaluate(c, assignment) for c in children)

    if len(children) != 1:
        raise ValueError(f"{node_type.name} needs exactly one child, got {len(children)}")
    if node_type == NodeType.NOT:
        return not evaluate(children[0], assignment)
    return evaluate(children[0], assignment)


def predicates(node: TreeLike) -> List[Any]:
    """Distinct predicate data in the tree, in first-seen (pre-order) order."""
    found: List[Any] = []

    def visit(current: TreeLike):
        if current.node_type == NodeType.PREDICATE and current.data not in found:
            found.append(current.data)
        for child in current.children:
            visit(child)

    visit(node)
    return found


def truth_table(node: TreeLike,
                names: Optional[Sequence[Any]] = None) -> List[Tuple[Dict[Any, bool], bool]]:
    """
    Evaluate node under every assignment of names (default: its predicates).

    Returns:
        List of (assignment, value) pairs, assignments in binary counting order
    """
    names = list(names) if names is not None else predicates(node)
    rows = []
    for values in product([False, True], repeat=len(names)):
        assignment = dict(zip(names, values))
        rows.append((assignment, evaluate(node, assignment)))
    return rows


def equivalent(a: TreeLike, b: TreeLike) -> bool:
    """True if a and b agree under every assignment of their predicates."""
    names = predicates(a)
    for name in predicates(b):
        if name not in names:
            names.append(name)
    return all(value == evaluate(b, assignment)
               for assignment, value in truth_table(a, names))
