"""
Rewrite rule catalogue for boolean expression trees.

Each rule is a TransformItem: a name, a description, a test run against a
single node, and an action that rewrites that node. An action returns the
node that replaces its input, or None when the input should be deleted.

Rules (in table order, which is also the solver's tie-break order):
    de-morgan                 !(a*b) <=> !a + !b and the dual
    degenerate-composite      (a) => a, () => <deleted>
    double-negation           !!a => a
    idempotent-composite      (a + a + b) => (a + b)
    collapsible-composite     (a + (b + c)) => (a + b + c)
    common-term-extraction    (a*b + a*c) => (a * (b + c))
    term-distribution         (a * (b + c)) => (a*b + a*c)
    absorption                (a * (a + b)) => (a)
    composite-complement      (a + !a) => (T), (a * !a) => (F)
    basic-complement          !T => F, !F => T
    composite-with-constant   (a + T) => T, (a * F) => F

Actions mutate the node they are given and may re-parent its descendants,
so the solver only ever hands them freshly copied nodes.
"""

from typing import Callable, Iterator, List, NamedTuple, Optional

from .tree import (
    TreeLike, TreeLikeFactory, NodeType,
    COMPOSITES, COMPOSITE_FLIP, CONSTANT_BOOL, CONSTANT_BOOL_FLIP,
)


class TransformItem(NamedTuple):
    """A named (test, action) pair."""

    name: str
    description: str
    test: Callable[[TreeLike], bool]
    action: Callable[[TreeLike], Optional[TreeLike]]

    def __repr__(self) -> str:
        return f"@{self.name} \"{self.description}\""


def _unique(nodes: List[TreeLike]) -> List[TreeLike]:
    """Structurally distinct nodes, first occurrence wins."""
    result: List[TreeLike] = []
    for node in nodes:
        if node not in result:
            result.append(node)
    return result


def _common_terms(groups: List[List[TreeLike]]) -> List[TreeLike]:
    """Members of groups[0] that have a structural equal in every other group."""
    common = list(groups[0])
    for group in groups[1:]:
        common = [term for term in common if term in group]
    return common


class RuleCatalogue:
    """
    The fixed table of rewrite rules.

    Example:
        catalogue = RuleCatalogue(BasicNodeFactory())
        for item in catalogue.matching(node):
            print(item.name)

        catalogue.apply("double-negation", E("(not (not p))"))  # => p
    """

    def __init__(self, factory: TreeLikeFactory):
        self.factory = factory
        self.transforms: List[TransformItem] = [
            TransformItem("de-morgan", "De Morgan's law",
                          self.does_de_morgans_law_apply, self.apply_de_morgans_law),
            TransformItem("degenerate-composite", "Degenerate composite",
                          self.is_degenerate_composite, self.collapse_degenerate_composite),
            TransformItem("double-negation", "Double negative",
                          self.double_negation_is_present, self.collapse_double_negation),
            TransformItem("idempotent-composite", "Idempotent composite",
                          self.is_idempotent_composite, self.collapse_idempotent_composite),
            TransformItem("collapsible-composite", "Collapsible composite",
                          self.contains_collapsible_composites, self.collapse_composite),
            TransformItem("common-term-extraction", "Common term extraction",
                          self.can_extract_common_term, self.extract_common_term),
            TransformItem("term-distribution", "Term distribution",
                          self.can_distribute_term, self.distribute_term),
            TransformItem("absorption", "Absorption 1 or 2",
                          self.can_absorb_composite, self.absorb_composite),
            TransformItem("composite-complement", "Composite complement",
                          self.contains_complement, self.simplify_complement),
            TransformItem("basic-complement", "Basic complement",
                          self.contains_basic_complement, self.simplify_basic_complement),
            TransformItem("composite-with-constant", "Composite with constant",
                          self.is_composite_with_constant, self.simplify_composite_with_constant),
        ]
        self._by_name = {item.name: item for item in self.transforms}

    # ============================================================
    # Table access
    # ============================================================

    def __len__(self) -> int:
        return len(self.transforms)

    def __iter__(self) -> Iterator[TransformItem]:
        return iter(self.transforms)

    def __contains__(self, name: str) -> bool:
        return name in self._by_name

    def __getitem__(self, name: str) -> TransformItem:
        if name not in self._by_name:
            raise KeyError(f"No rule named '{name}'")
        return self._by_name[name]

    def __repr__(self) -> str:
        return f"RuleCatalogue({len(self.transforms)} rules)"

    def names(self) -> List[str]:
        return [item.name for item in self.transforms]

    def matching(self, node: TreeLike) -> List[TransformItem]:
        """Rules whose test holds on node, in table order."""
        return [item for item in self.transforms if item.test(node)]

    def apply(self, name: str, node: TreeLike) -> Optional[TreeLike]:
        """
        Apply a single rule to node.

        Raises:
            KeyError: If no rule has that name
            ValueError: If the rule's test does not hold on node
        """
        item = self[name]
        if not item.test(node):
            raise ValueError(f"Rule '{name}' does not apply to this node")
        return item.action(node)

    # ============================================================
    # De Morgan
    # ============================================================

    def does_de_morgans_law_apply(self, node: TreeLike) -> bool:
        children = node.children
        if node.node_type == NodeType.NOT:
            return (len(children) > 0
                    and children[0].node_type in COMPOSITES
                    and len(children[0].children) == 2)

        if node.node_type in COMPOSITES and len(children) == 2:
            return all(c.node_type == NodeType.NOT and c.children for c in children)

        return False

    def apply_de_morgans_law(self, node: TreeLike) -> TreeLike:
        if node.node_type in COMPOSITES:
            first, second = node.children
            element_one = first.children[0]
            element_two = second.children[0]
            inner = self.factory.with_type(COMPOSITE_FLIP[node.node_type])
            inner.add_children([element_one, element_two])
            return self.factory.with_type(NodeType.NOT).add_child(inner)

        composite = node.children[0]
        element_one, element_two = composite.children
        return self.factory.with_type(COMPOSITE_FLIP[composite.node_type]).add_children([
            self.factory.with_type(NodeType.NOT).add_child(element_one),
            self.factory.with_type(NodeType.NOT).add_child(element_two),
        ])

    # ============================================================
    # Degenerate composites and double negation
    # ============================================================

    def is_degenerate_composite(self, node: TreeLike) -> bool:
        return node.node_type in COMPOSITES and len(node.children) < 2

    def collapse_degenerate_composite(self, node: TreeLike) -> Optional[TreeLike]:
        children = node.children
        return children[0] if children else None

    def double_negation_is_present(self, node: TreeLike) -> bool:
        children = node.children
        return (node.node_type == NodeType.NOT
                and len(children) > 0
                and children[0].node_type == NodeType.NOT)

    def collapse_double_negation(self, node: TreeLike) -> Optional[TreeLike]:
        inner = node.children[0].children
        return inner[0] if inner else None

    # ============================================================
    # Idempotence and flattening
    # ============================================================

    def is_idempotent_composite(self, node: TreeLike) -> bool:
        if node.node_type in COMPOSITES:
            children = node.children
            return len(_unique(children)) != len(children)
        return False

    def collapse_idempotent_composite(self, node: TreeLike) -> TreeLike:
        children = node.children
        for child in children:
            node.remove_child(child)
        node.add_children(_unique(children))
        return node

    def contains_collapsible_composites(self, node: TreeLike) -> bool:
        return (node.node_type in COMPOSITES
                and any(c.node_type == node.node_type for c in node.children))

    def collapse_composite(self, node: TreeLike) -> TreeLike:
        redundant = [c for c in node.children if c.node_type == node.node_type]
        for child in redundant:
            node.remove_child(child)

        grandchildren = [g for child in redundant for g in child.children]
        node.add_children(grandchildren)
        return node

    # ============================================================
    # Factoring and distribution
    # ============================================================

    def can_extract_common_term(self, node: TreeLike) -> bool:
        if node.node_type not in COMPOSITES:
            return False

        opposites = [c for c in node.children
                     if c.node_type == COMPOSITE_FLIP[node.node_type]]
        if len(opposites) > 1:
            return len(_common_terms([o.children for o in opposites])) > 0
        return False

    def extract_common_term(self, node: TreeLike) -> TreeLike:
        flip = COMPOSITE_FLIP[node.node_type]

        # Remove everything that is pushed down a level
        opposites = [c for c in node.children if c.node_type == flip]
        for opposite in opposites:
            node.remove_child(opposite)

        common_term = _common_terms([o.children for o in opposites])[0]

        new_opposite = self.factory.with_type(flip)
        new_same = self.factory.with_type(node.node_type)

        for opposite in opposites:
            match = next(c for c in opposite.children if c == common_term)
            opposite.remove_child(match)

            remaining = opposite.children
            if len(remaining) == 1:
                new_same.add_child(remaining[0])
            elif len(remaining) > 1:
                new_same.add_child(opposite)
            else:
                # An emptied conjunction is true, an emptied disjunction false
                neutral = NodeType.TRUE if flip == NodeType.ALL else NodeType.FALSE
                new_same.add_child(self.factory.with_type(neutral))

        new_opposite.add_child(common_term)
        new_opposite.add_child(new_same)

        node.add_child(new_opposite)
        return node

    def can_distribute_term(self, node: TreeLike) -> bool:
        if node.node_type not in COMPOSITES:
            return False
        children = node.children
        return (len(children) > 1
                and any(c.node_type == COMPOSITE_FLIP[node.node_type] for c in children))

    def distribute_term(self, node: TreeLike) -> TreeLike:
        flip = COMPOSITE_FLIP[node.node_type]
        children = node.children
        opposite = next(c for c in children if c.node_type == flip)
        others = [c for c in children if c is not opposite]

        result = self.factory.with_type(flip)
        for grandchild in opposite.children:
            term = self.factory.with_type(node.node_type)
            term.add_child(grandchild)
            for other in others:
                term.add_child(self.factory.from_prototype_subtree(other))
            result.add_child(term)

        return result

    # ============================================================
    # Absorption
    # ============================================================

    def _absorbable(self, node: TreeLike) -> List[TreeLike]:
        children = node.children
        opposites = [c for c in children
                     if c.node_type == COMPOSITE_FLIP[node.node_type] and c.children]
        others = [c for c in children if not any(c is o for o in opposites)]
        return [o for o in opposites if any(g in others for g in o.children)]

    def can_absorb_composite(self, node: TreeLike) -> bool:
        if node.node_type in COMPOSITES and len(node.children) >= 2:
            return len(self._absorbable(node)) > 0
        return False

    def absorb_composite(self, node: TreeLike) -> TreeLike:
        for absorbed in self._absorbable(node):
            node.remove_child(absorbed)
        return node

    # ============================================================
    # Complements and constants
    # ============================================================

    def contains_complement(self, node: TreeLike) -> bool:
        if node.node_type not in COMPOSITES:
            return False

        children = node.children
        negated = [g for c in children if c.node_type == NodeType.NOT for g in c.children]
        others = [c for c in children if c.node_type != NodeType.NOT]
        return any(n in others for n in negated)

    def simplify_complement(self, node: TreeLike) -> TreeLike:
        for child in node.children:
            node.remove_child(child)
        if node.node_type == NodeType.ANY:
            return node.add_child(self.factory.with_type(NodeType.TRUE))
        return node.add_child(self.factory.with_type(NodeType.FALSE))

    @staticmethod
    def _negated_constant(node: TreeLike) -> bool:
        children = node.children
        return (node.node_type == NodeType.NOT
                and len(children) > 0
                and children[0].node_type in CONSTANT_BOOL)

    def contains_basic_complement(self, node: TreeLike) -> bool:
        return any(self._negated_constant(c) for c in node.children)

    def simplify_basic_complement(self, node: TreeLike) -> TreeLike:
        for negation in [c for c in node.children if self._negated_constant(c)]:
            node.remove_child(negation)
            constant = negation.children[0].node_type
            node.add_child(self.factory.with_type(CONSTANT_BOOL_FLIP[constant]))
        return node

    def is_composite_with_constant(self, node: TreeLike) -> bool:
        kinds = [c.node_type for c in node.children]
        return ((node.node_type == NodeType.ANY and NodeType.TRUE in kinds)
                or (node.node_type == NodeType.ALL and NodeType.FALSE in kinds))

    def simplify_composite_with_constant(self, node: TreeLike) -> TreeLike:
        if node.node_type == NodeType.ANY:
            return self.factory.with_type(NodeType.TRUE)
        return self.factory.with_type(NodeType.FALSE)


RULE_NAMES: List[str] = [
    "de-morgan",
    "degenerate-composite",
    "double-negation",
    "idempotent-composite",
    "collapsible-composite",
    "common-term-extraction",
    "term-distribution",
    "absorption",
    "composite-complement",
    "basic-complement",
    "composite-with-constant",
]
