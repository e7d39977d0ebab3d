"""
Tree contract and the basic node implementation for boolalg.

The solver never depends on a concrete node class. Anything that implements
TreeLike (and a matching TreeLikeFactory) can be simplified:

    class MyNode(TreeLike): ...
    class MyFactory(TreeLikeFactory): ...

    solver = BooleanAlgebraSolver(factory=MyFactory())

BasicNode/BasicNodeFactory are the implementation used by the parser,
the builder and the CLI.

Equality:
    Two nodes are == when their type, data and children match, with the
    children compared as an unordered multiset. Payloads only need to
    support ==; hashing a node (for sets) also hashes its payloads. This is
    the equality every rule uses. Identity (``is``) is reserved for
    targeting a particular node during the search.
"""

from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence


class NodeType(Enum):
    """Kinds of node in a boolean expression tree."""

    NULL = "null"
    ANY = "any"  # disjunction
    ALL = "all"  # conjunction
    NOT = "not"
    PREDICATE = "predicate"
    TRUE = "true"
    FALSE = "false"


CONSTANT_BOOL = (NodeType.TRUE, NodeType.FALSE)
CONSTANT_BOOL_FLIP: Dict[NodeType, NodeType] = {
    NodeType.TRUE: NodeType.FALSE,
    NodeType.FALSE: NodeType.TRUE,
}
COMPOSITES = (NodeType.ANY, NodeType.ALL)
COMPOSITE_FLIP: Dict[NodeType, NodeType] = {
    NodeType.ANY: NodeType.ALL,
    NodeType.ALL: NodeType.ANY,
}


# ============================================================
# Contracts
# ============================================================

class TreeLike(ABC):
    """
    Capabilities a node must provide to be simplified.

    Implementations must keep the tree a tree: add_child detaches the child
    from any previous parent before attaching it.
    """

    @property
    @abstractmethod
    def node_type(self) -> NodeType:
        """The kind of this node."""

    @property
    @abstractmethod
    def children(self) -> List['TreeLike']:
        """Ordered children. Mutating the returned list has no effect."""

    @abstractmethod
    def add_child(self, child: 'TreeLike') -> 'TreeLike':
        """Attach child (re-parenting it) and return self."""

    @abstractmethod
    def add_children(self, children: Sequence['TreeLike']) -> 'TreeLike':
        """Attach every child in order and return self."""

    @abstractmethod
    def remove_child(self, child: 'TreeLike') -> None:
        """Detach child. Does nothing if it is not a child of this node."""

    @abstractmethod
    def data_equivalent(self, other: 'TreeLike') -> bool:
        """True if the payloads are interchangeable (type and children ignored)."""


class TreeLikeFactory(ABC):
    """Creates nodes for the solver's copy-on-write transforms."""

    @abstractmethod
    def with_type(self, node_type: NodeType) -> TreeLike:
        """Return a new childless node of the given type."""

    @abstractmethod
    def predicate(self, data: Any) -> TreeLike:
        """Return a new predicate leaf carrying data."""

    @abstractmethod
    def from_prototype(self, prototype: TreeLike) -> TreeLike:
        """
        Return a new node with the same type and data as prototype.

        Tree connections (parent, children) are *not* copied.
        """

    @abstractmethod
    def from_prototype_subtree(self, subtree: TreeLike) -> TreeLike:
        """
        Return a deep copy of subtree.

        Every descendant is copied as well, and the copy has no parent.
        """


# ============================================================
# Basic implementation
# ============================================================

class BasicNode(TreeLike):
    """
    A plain tree node carrying an optional data payload.

    Examples:
        p = BasicNode(NodeType.PREDICATE, "p")
        q = BasicNode(NodeType.PREDICATE, "q")
        both = BasicNode(NodeType.ALL).add_children([p, q])
        p.parent is both   # => True
    """

    __slots__ = ('_node_type', 'data', 'parent', '_children')

    def __init__(self, node_type: NodeType, data: Any = None):
        self._node_type = node_type
        self.data = data
        self.parent: Optional['BasicNode'] = None
        self._children: List['BasicNode'] = []

    @property
    def node_type(self) -> NodeType:
        return self._node_type

    @property
    def children(self) -> List['BasicNode']:
        return list(self._children)

    def add_child(self, child: 'BasicNode') -> 'BasicNode':
        if child is self or self._has_ancestor(child):
            raise ValueError("add_child: attaching a node below itself would create a cycle")
        if child.parent is not None:
            child.parent.remove_child(child)
        self._children.append(child)
        child.parent = self
        return self

    def add_children(self, children: Sequence['BasicNode']) -> 'BasicNode':
        # Snapshot first: children may be another node's live child list
        for child in list(children):
            self.add_child(child)
        return self

    def remove_child(self, child: 'BasicNode') -> None:
        for i, existing in enumerate(self._children):
            if existing is child:
                del self._children[i]
                child.parent = None
                return

    def remove_all_children(self) -> None:
        for child in list(self._children):
            self.remove_child(child)

    def data_equivalent(self, other: 'BasicNode') -> bool:
        return self.data == other.data

    def _has_ancestor(self, node: 'BasicNode') -> bool:
        current = self.parent
        while current is not None:
            if current is node:
                return True
            current = current.parent
        return False

    def __eq__(self, other):
        if not isinstance(other, BasicNode):
            return NotImplemented
        if self is other:
            return True
        if (self._node_type != other._node_type
                or self.data != other.data
                or len(self._children) != len(other._children)):
            return False

        # Match children pairwise so payloads only need ==, not hashing
        unmatched = list(other._children)
        for child in self._children:
            for i, candidate in enumerate(unmatched):
                if child == candidate:
                    del unmatched[i]
                    break
            else:
                return False
        return True

    def __hash__(self) -> int:
        # Sorted child hashes keep the hash independent of child order
        child_hashes = tuple(sorted(hash(c) for c in self._children))
        return hash((self._node_type, self.data, child_hashes))

    def __repr__(self) -> str:
        return self._repr_helper('').rstrip('\n')

    def _repr_helper(self, indent: str) -> str:
        data = 'NODATA' if self.data is None else str(self.data)
        result = f"{indent} {self._node_type.name} ({data})\n"
        for child in self._children:
            result += child._repr_helper(indent + '>')
        return result


class BasicNodeFactory(TreeLikeFactory):
    """Factory producing BasicNode instances."""

    def with_type(self, node_type: NodeType) -> BasicNode:
        return BasicNode(node_type)

    def predicate(self, data: Any) -> BasicNode:
        """Return a predicate leaf carrying data."""
        return BasicNode(NodeType.PREDICATE, data)

    def from_prototype(self, prototype: BasicNode) -> BasicNode:
        return BasicNode(prototype.node_type, prototype.data)

    def from_prototype_subtree(self, subtree: BasicNode) -> BasicNode:
        result = self.from_prototype(subtree)
        for child in subtree.children:
            result.add_child(self.from_prototype_subtree(child))
        return result
