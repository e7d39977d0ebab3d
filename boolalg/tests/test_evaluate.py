"""Tests for truth-table evaluation."""

import pytest

from boolalg import BasicNode, NodeType, E, equivalent, evaluate, predicates, truth_table


class TestEvaluate:
    """Tests for evaluate."""

    def test_connectives(self):
        env = {"p": True, "q": False}
        assert evaluate(E("(and p q)"), env) is False
        assert evaluate(E("(or p q)"), env) is True
        assert evaluate(E("(not q)"), env) is True
        assert evaluate(E("(and p (not q))"), env) is True

    def test_constants(self):
        assert evaluate(E("T"), {}) is True
        assert evaluate(E("F"), {}) is False

    def test_empty_composites(self):
        """Empty conjunction is true, empty disjunction false."""
        assert evaluate(E("(and)"), {}) is True
        assert evaluate(E("(or)"), {}) is False

    def test_sentinel_passes_through(self):
        sentinel = BasicNode(NodeType.NULL).add_child(E("(not p)"))
        assert evaluate(sentinel, {"p": False}) is True

    def test_missing_predicate(self):
        with pytest.raises(KeyError):
            evaluate(E("(and p q)"), {"p": True})

    def test_bad_negation(self):
        with pytest.raises(ValueError):
            evaluate(BasicNode(NodeType.NOT), {})
        with pytest.raises(ValueError):
            evaluate(BasicNode(NodeType.NULL), {})


class TestTruthTable:
    """Tests for predicates, truth_table and equivalent."""

    def test_predicates_first_seen(self):
        assert predicates(E("(or q (and p q) (not r))")) == ["q", "p", "r"]
        assert predicates(E("(and T F)")) == []

    def test_truth_table_rows(self):
        rows = truth_table(E("(and p q)"))
        assert [values for _, values in rows] == [False, False, False, True]
        assert rows[1][0] == {"p": False, "q": True}

    def test_truth_table_explicit_names(self):
        rows = truth_table(E("p"), names=["p", "z"])
        assert len(rows) == 4
        assert [value for _, value in rows] == [False, False, True, True]

    def test_no_predicates(self):
        assert truth_table(E("T")) == [({}, True)]

    def test_equivalent(self):
        assert equivalent(E("(not (and a b))"), E("(or (not a) (not b))"))
        assert equivalent(E("(or p (not p))"), E("T"))
        assert not equivalent(E("(and p q)"), E("(or p q)"))

    def test_equivalent_with_different_predicates(self):
        """Predicates missing on one side still get assigned."""
        assert equivalent(E("(and a (or b (not b)))"), E("a"))
        assert not equivalent(E("a"), E("b"))
