"""
Bounded-lookahead simplifier for boolean expression trees.

The solver repeatedly explores every way of applying up to ``look_ahead``
rules to the working tree, keeps the cheapest candidate (depth + size) and
stops once neither the depth nor the size improves.

Example:
    from boolalg import BooleanAlgebraSolver, E, pretty_print

    solver = BooleanAlgebraSolver(look_ahead=2)
    result = solver.solve(E("(and p (or q (not p)))"))
    pretty_print(result)   # => "((q * p) + F)"

Tracing:
    result, trace = solver.solve(tree, trace=True)
    print(trace.format("rules"))
"""

import logging
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .rules import RuleCatalogue, TransformItem
from .tree import BasicNodeFactory, NodeType, TreeLike, TreeLikeFactory

logger = logging.getLogger(__name__)


class CollapsedTreeError(ValueError):
    """Raised when every node of the expression was deleted by the rules."""


# ============================================================
# Cost metrics
# ============================================================

def tree_size(node: TreeLike) -> int:
    """Total number of nodes in the tree rooted at node."""
    return 1 + sum(tree_size(child) for child in node.children)


def tree_depth(node: TreeLike) -> int:
    """
    Deepest predicate, counted in steps from the root.

    A predicate at level k (the root being level 0) contributes k + 1.
    Trees without predicates have depth 0.
    """
    def loop(current: TreeLike, parent_depth: int) -> int:
        if current.node_type == NodeType.PREDICATE:
            return parent_depth + 1
        return max((loop(child, parent_depth + 1) for child in current.children), default=0)

    return loop(node, 0)


def _cost(node: TreeLike) -> int:
    return tree_depth(node) + tree_size(node)


# ============================================================
# Candidates and traces
# ============================================================

class TransformStep:
    """One rule application: the whole tree before and after it."""

    def __init__(self, rule_name: str, before: TreeLike, after: TreeLike):
        self.rule_name = rule_name
        self.before = before
        self.after = after

    def __repr__(self) -> str:
        from .expr import pretty_print
        return f"{self.rule_name}: {pretty_print(self.before)} → {pretty_print(self.after)}"

    def to_dict(self) -> Dict:
        """Convert step to dictionary for serialization."""
        from .expr import to_sexpr
        return {
            "rule_name": self.rule_name,
            "before": to_sexpr(self.before),
            "after": to_sexpr(self.after),
        }


class TransformedTree:
    """A candidate tree and the steps that produced it."""

    def __init__(self, root: TreeLike, ancestors: Optional[List[TransformStep]] = None):
        self.root = root
        self.ancestors: List[TransformStep] = ancestors if ancestors is not None else []

    def __repr__(self) -> str:
        from .expr import pretty_print
        return f"TransformedTree({pretty_print(self.root)}, {len(self.ancestors)} steps)"


class SolveIteration:
    """An accepted iteration of the solve loop."""

    def __init__(self, steps: List[TransformStep], depth: int, size: int):
        self.steps = steps
        self.depth = depth
        self.size = size

    def to_dict(self) -> Dict:
        return {
            "steps": [step.to_dict() for step in self.steps],
            "depth": self.depth,
            "size": self.size,
        }


class SolveTrace:
    """
    A trace of the iterations the solve loop accepted.

    Provides multiple formatting options:
        - Default repr: verbose multi-line format
        - format("compact"): single line showing rule chain
        - format("rules"): just the rule names applied
        - format("chain"): show tree transformations as a chain
        - to_dict(): JSON-serializable dictionary
    """

    def __init__(self):
        self.iterations: List[SolveIteration] = []
        self.initial: Optional[TreeLike] = None
        self.final: Optional[TreeLike] = None
        self.initial_depth = 0
        self.initial_size = 0

    def add_iteration(self, iteration: SolveIteration):
        self.iterations.append(iteration)

    @property
    def steps(self) -> List[TransformStep]:
        """All rule applications, in order."""
        return [step for iteration in self.iterations for step in iteration.steps]

    def costs(self) -> List[Tuple[int, int]]:
        """(depth, size) of the working tree, starting with the input."""
        return ([(self.initial_depth, self.initial_size)]
                + [(it.depth, it.size) for it in self.iterations])

    def format(self, style: str = "verbose") -> str:
        """
        Format the trace in different styles.

        Args:
            style: One of "verbose", "compact", "rules", "chain"

        Returns:
            Formatted string representation of the trace.
        """
        from .expr import pretty_print

        if style == "compact":
            return (f"{pretty_print(self.initial)} --[{', '.join(self.rules_applied())}]--> "
                    f"{pretty_print(self.final)}")

        elif style == "rules":
            rules = self.rules_applied()
            return " -> ".join(rules) if rules else "(no rules applied)"

        elif style == "chain":
            if not self.steps:
                return pretty_print(self.initial)
            parts = [pretty_print(self.initial)]
            for step in self.steps:
                parts.append(f"  --({step.rule_name})-->")
                parts.append(pretty_print(step.after))
            return "\n".join(parts)

        else:  # verbose (default)
            return repr(self)

    def __repr__(self) -> str:
        from .expr import pretty_print
        lines = [f"Initial: {pretty_print(self.initial)}"]
        for i, iteration in enumerate(self.iterations, 1):
            names = ", ".join(s.rule_name for s in iteration.steps) or "identity"
            lines.append(f"  {i}. {names} (depth={iteration.depth}, size={iteration.size})")
        lines.append(f"Final: {pretty_print(self.final)}")
        return "\n".join(lines)

    def __len__(self) -> int:
        return len(self.steps)

    def __iter__(self):
        """Iterate over transform steps."""
        return iter(self.steps)

    def __bool__(self) -> bool:
        """True if any rewriting was done."""
        return len(self.steps) > 0

    def to_dict(self) -> Dict:
        """Convert trace to dictionary for JSON serialization."""
        from .expr import to_sexpr
        return {
            "initial": to_sexpr(self.initial) if self.initial is not None else None,
            "final": to_sexpr(self.final) if self.final is not None else None,
            "iterations": [it.to_dict() for it in self.iterations],
            "step_count": len(self.steps),
        }

    def rule_counts(self) -> Dict[str, int]:
        """Count how many times each rule was applied."""
        counts: Dict[str, int] = {}
        for step in self.steps:
            counts[step.rule_name] = counts.get(step.rule_name, 0) + 1
        return counts

    def rules_applied(self) -> List[str]:
        """Get list of rule names in order of application."""
        return [s.rule_name for s in self.steps]

    def summary(self) -> str:
        """Get a brief summary of the simplification."""
        if not self.steps:
            return "No rewriting performed"
        counts = self.rule_counts()
        most_used = max(counts.items(), key=lambda x: x[1])
        return (f"{len(self.steps)} steps in {len(self.iterations)} iterations "
                f"using {len(counts)} unique rules. "
                f"Most used: {most_used[0]} ({most_used[1]}x)")


# ============================================================
# Solver
# ============================================================

class BooleanAlgebraSolver:
    """
    Simplifies boolean expression trees by local search over rewrite rules.

    Args:
        factory: Node factory used for copies and new nodes.
            Default: BasicNodeFactory()
        look_ahead: How many rule applications to compose per search round.
        max_iterations: Upper bound on search rounds per solve() call.
        rules: Optional rule names to use (default: the whole catalogue).

    Example:
        solver = BooleanAlgebraSolver(look_ahead=2)
        solver.solve(E("(or p (not p))"))   # => T

        solver.disable_rule("term-distribution")
    """

    def __init__(self, factory: Optional[TreeLikeFactory] = None, look_ahead: int = 1,
                 max_iterations: int = 1000, rules: Optional[Iterable[str]] = None):
        if look_ahead < 1:
            raise ValueError(f"look_ahead must be at least 1, got {look_ahead}")
        if max_iterations < 1:
            raise ValueError(f"max_iterations must be at least 1, got {max_iterations}")

        self.factory = factory if factory is not None else BasicNodeFactory()
        self.look_ahead = look_ahead
        self.max_iterations = max_iterations
        self.catalogue = RuleCatalogue(self.factory)
        self._disabled: set = set()

        if rules is not None:
            wanted = set(rules)
            for name in wanted:
                self._check_rule(name)
            self._disabled = {n for n in self.catalogue.names() if n not in wanted}

    # ============================================================
    # Rule selection
    # ============================================================

    def _check_rule(self, name: str) -> None:
        if name not in self.catalogue:
            raise KeyError(f"Unknown rule: {name}. "
                           f"Available: {', '.join(self.catalogue.names())}")

    def enable_rule(self, name: str) -> 'BooleanAlgebraSolver':
        """Enable a rule by name."""
        self._check_rule(name)
        self._disabled.discard(name)
        return self

    def disable_rule(self, name: str) -> 'BooleanAlgebraSolver':
        """Disable a rule by name."""
        self._check_rule(name)
        self._disabled.add(name)
        return self

    @property
    def active_rules(self) -> List[TransformItem]:
        """Enabled rules in table order."""
        return [item for item in self.catalogue if item.name not in self._disabled]

    # ============================================================
    # Solve loop
    # ============================================================

    def solve(self, root: TreeLike, trace: bool = False):
        """
        Simplify the tree rooted at root.

        root is re-parented under a temporary sentinel; the caller hands it over.

        Args:
            root: Detached root of the expression to simplify
            trace: If True, return (result, trace) tuple

        Returns:
            Simplified tree, or (tree, SolveTrace) if trace=True

        Raises:
            CollapsedTreeError: If the rules deleted the whole expression
        """
        sentinel = self.factory.with_type(NodeType.NULL).add_child(root)
        working_tree = TransformedTree(sentinel)

        working_depth = tree_depth(working_tree.root)
        working_size = tree_size(working_tree.root)

        trace_obj = SolveTrace() if trace else None
        if trace_obj is not None:
            trace_obj.initial = self.factory.from_prototype_subtree(root)
            trace_obj.initial_depth = working_depth
            trace_obj.initial_size = working_size

        iterations = 0
        progress_made = True
        while progress_made:
            if iterations >= self.max_iterations:
                logger.warning("solve stopped after %d iterations without reaching a fixed point",
                               iterations)
                break
            iterations += 1

            transformed_trees: List[TransformedTree] = []
            self.generate_permutations(transformed_trees, self.look_ahead, 1, working_tree)

            working_tree = min(transformed_trees, key=lambda t: _cost(t.root))

            new_depth = tree_depth(working_tree.root)
            new_size = tree_size(working_tree.root)
            progress_made = new_depth < working_depth or new_size < working_size

            logger.debug("iteration %d: %d candidates, depth %d -> %d, size %d -> %d",
                         iterations, len(transformed_trees), working_depth, new_depth,
                         working_size, new_size)

            if progress_made and trace_obj is not None:
                trace_obj.add_iteration(SolveIteration(
                    list(working_tree.ancestors), new_depth, new_size))

            working_depth = new_depth
            working_size = new_size
            # Provenance is per round
            working_tree = TransformedTree(working_tree.root)

        children = working_tree.root.children
        if not children:
            raise CollapsedTreeError("The expression was simplified away entirely")
        result = children[0]
        working_tree.root.remove_child(result)

        if trace_obj is not None:
            trace_obj.final = result
            return result, trace_obj
        return result

    # ============================================================
    # Permutation search
    # ============================================================

    def generate_permutations(self, result: List[TransformedTree], depth: int,
                              current_depth: int, parent_tree: TransformedTree) -> None:
        """
        Append parent_tree and every tree reachable from it in up to depth rules.

        Order: parent_tree itself, then for each node in post-order and each
        matching rule in table order, the rewritten tree followed by the trees
        derived from it.
        """
        result.append(parent_tree)

        for target in list(self._post_order(parent_tree.root)):
            for item in self.active_rules:
                if not item.test(target):
                    continue

                new_root = self.create_transformed_tree(parent_tree.root, target, item.action)
                if new_root is None:
                    logger.debug("%s deleted the candidate root, skipping", item.name)
                    continue

                step = TransformStep(
                    item.name,
                    self.factory.from_prototype_subtree(parent_tree.root),
                    self.factory.from_prototype_subtree(new_root),
                )
                transformed_tree = TransformedTree(new_root, parent_tree.ancestors + [step])
                result.append(transformed_tree)

                if current_depth < depth:
                    self.generate_permutations(result, depth, current_depth + 1, transformed_tree)

    def create_transformed_tree(self, root: TreeLike, target: TreeLike,
                                transform: Callable[[TreeLike], Optional[TreeLike]]
                                ) -> Optional[TreeLike]:
        """
        Copy root, replacing the copy of target with transform(copy).

        target is matched by identity so structurally equal nodes elsewhere
        in the tree are left alone. Children whose transform returns None are
        dropped from the copy.
        """
        copy = self.factory.from_prototype(root)
        for child in root.children:
            new_child = self.create_transformed_tree(child, target, transform)
            if new_child is not None:
                copy.add_child(new_child)

        if root is target:
            return transform(copy)
        return copy

    @staticmethod
    def _post_order(node: TreeLike):
        for child in node.children:
            yield from BooleanAlgebraSolver._post_order(child)
        yield node

    def __repr__(self) -> str:
        return (f"BooleanAlgebraSolver(look_ahead={self.look_ahead}, "
                f"{len(self.active_rules)} rules)")


def solve(root: TreeLike, look_ahead: int = 1, **kwargs) -> TreeLike:
    """Simplify root with a one-off BooleanAlgebraSolver."""
    return BooleanAlgebraSolver(look_ahead=look_ahead, **kwargs).solve(root)
