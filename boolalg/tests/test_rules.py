"""Tests for the rewrite rule catalogue."""

import pytest

from boolalg import (
    BasicNode, BasicNodeFactory, NodeType, RuleCatalogue, RULE_NAMES, E,
    equivalent,
)


@pytest.fixture
def catalogue():
    return RuleCatalogue(BasicNodeFactory())


def applies(catalogue, name, text):
    return catalogue[name].test(E(text))


def rewrite(catalogue, name, text):
    return catalogue.apply(name, E(text))


class TestCatalogue:
    """Tests for table access."""

    def test_eleven_rules_in_order(self, catalogue):
        """The table has every rule in its fixed order."""
        assert len(catalogue) == 11
        assert catalogue.names() == RULE_NAMES
        assert [item.name for item in catalogue] == RULE_NAMES

    def test_lookup_by_name(self, catalogue):
        """Rules can be looked up by name."""
        assert "absorption" in catalogue
        assert catalogue["absorption"].description == "Absorption 1 or 2"
        assert "nope" not in catalogue

    def test_unknown_rule(self, catalogue):
        """Unknown names raise KeyError."""
        with pytest.raises(KeyError):
            catalogue["nope"]

    def test_apply_requires_match(self, catalogue):
        """Applying a rule whose test fails is an error."""
        with pytest.raises(ValueError):
            rewrite(catalogue, "double-negation", "(not p)")

    def test_matching_in_table_order(self, catalogue):
        """matching() lists every applicable rule, in table order."""
        names = [i.name for i in catalogue.matching(E("(or (and a b) (and a c))"))]
        assert names == ["common-term-extraction", "term-distribution"]

    def test_matching_single(self, catalogue):
        assert [i.name for i in catalogue.matching(E("(or p p)"))] == ["idempotent-composite"]
        assert [i.name for i in catalogue.matching(E("(or (not a) (not b))"))] == ["de-morgan"]

    def test_nothing_matches_leaf(self, catalogue):
        assert catalogue.matching(E("p")) == []

    def test_repr(self, catalogue):
        assert "11 rules" in repr(catalogue)
        assert repr(catalogue["de-morgan"]) == "@de-morgan \"De Morgan's law\""


class TestDeMorgan:
    """Tests for De Morgan's law."""

    def test_negated_conjunction(self, catalogue):
        """!(a*b) => !a + !b"""
        result = rewrite(catalogue, "de-morgan", "(not (and a b))")
        assert result == E("(or (not a) (not b))")

    def test_negated_disjunction(self, catalogue):
        """!(a+b) => !a * !b"""
        result = rewrite(catalogue, "de-morgan", "(not (or a b))")
        assert result == E("(and (not a) (not b))")

    def test_disjunction_of_negations(self, catalogue):
        """!a + !b => !(a*b)"""
        result = rewrite(catalogue, "de-morgan", "(or (not a) (not b))")
        assert result == E("(not (and a b))")

    def test_conjunction_of_negations(self, catalogue):
        """!a * !b => !(a+b)"""
        result = rewrite(catalogue, "de-morgan", "(and (not a) (not b))")
        assert result == E("(not (or a b))")

    def test_only_two_operands(self, catalogue):
        assert not applies(catalogue, "de-morgan", "(not (and a b c))")
        assert not applies(catalogue, "de-morgan", "(or (not a) (not b) (not c))")

    def test_needs_negations(self, catalogue):
        assert not applies(catalogue, "de-morgan", "(or (not a) b)")
        assert not applies(catalogue, "de-morgan", "(not a)")

    def test_empty_negations(self, catalogue):
        """Negations without operands never reach the transform."""
        bare = BasicNode(NodeType.NOT)
        assert not catalogue["de-morgan"].test(bare)

        node = BasicNode(NodeType.ANY).add_children(
            [BasicNode(NodeType.NOT), BasicNode(NodeType.NOT)])
        assert not catalogue["de-morgan"].test(node)


class TestDegenerateAndDoubleNegation:
    """Tests for rules that may delete a node."""

    def test_single_child(self, catalogue):
        """(p) => p"""
        assert rewrite(catalogue, "degenerate-composite", "(or p)") == E("p")
        assert rewrite(catalogue, "degenerate-composite", "(and (not q))") == E("(not q)")

    def test_empty_composite_deleted(self, catalogue):
        """An empty composite is deleted."""
        assert rewrite(catalogue, "degenerate-composite", "(and)") is None

    def test_two_children_not_degenerate(self, catalogue):
        assert not applies(catalogue, "degenerate-composite", "(and p q)")
        assert not applies(catalogue, "degenerate-composite", "(not p)")

    def test_double_negation(self, catalogue):
        """!!p => p"""
        assert rewrite(catalogue, "double-negation", "(not (not p))") == E("p")
        assert (rewrite(catalogue, "double-negation", "(not (not (and a b)))")
                == E("(and a b)"))

    def test_empty_double_negation_deleted(self, catalogue):
        """A negation of an empty negation is deleted."""
        node = BasicNode(NodeType.NOT).add_child(BasicNode(NodeType.NOT))
        assert catalogue.apply("double-negation", node) is None

    def test_single_negation(self, catalogue):
        assert not applies(catalogue, "double-negation", "(not p)")
        assert not catalogue["double-negation"].test(BasicNode(NodeType.NOT))


class TestIdempotentAndCollapsible:
    """Tests for duplicate removal and flattening."""

    def test_duplicates_removed(self, catalogue):
        """(p + p + q) => (p + q), first occurrences kept in order."""
        result = rewrite(catalogue, "idempotent-composite", "(or p p q p)")
        assert [c.data for c in result.children] == ["p", "q"]

    def test_structural_duplicates(self, catalogue):
        """Duplicates are found by structure, ignoring child order."""
        assert applies(catalogue, "idempotent-composite", "(or (and a b) (and b a))")
        result = rewrite(catalogue, "idempotent-composite", "(or (and a b) (and b a))")
        assert result == E("(or (and a b))")

    def test_distinct_children(self, catalogue):
        assert not applies(catalogue, "idempotent-composite", "(or p q)")
        assert not applies(catalogue, "idempotent-composite", "(not p)")

    def test_collapse_one_level(self, catalogue):
        """(a * (b * c)) => (a * b * c)"""
        result = rewrite(catalogue, "collapsible-composite", "(and a (and b c))")
        assert result == E("(and a b c)")

    def test_collapse_to_fixed_point(self, catalogue):
        """Repeated collapsing leaves no same-kind child."""
        node = E("(and a (and b (and c d)) (or e f))")
        item = catalogue["collapsible-composite"]
        while item.test(node):
            node = item.action(node)

        assert node == E("(and a b c d (or e f))")
        assert all(c.node_type != NodeType.ALL for c in node.children)

    def test_mixed_kinds_not_collapsible(self, catalogue):
        assert not applies(catalogue, "collapsible-composite", "(and a (or b c))")


class TestFactoringAndDistribution:
    """Tests for common term extraction and term distribution."""

    def test_extract_common_term(self, catalogue):
        """(a*b + a*c) => (a * (b + c))"""
        result = rewrite(catalogue, "common-term-extraction", "(or (and a b) (and a c))")
        assert result == E("(or (and a (or b c)))")

    def test_extract_keeps_other_children(self, catalogue):
        """Non-composite children stay where they are."""
        result = rewrite(catalogue, "common-term-extraction",
                         "(and d (or a b c) (or a e))")
        assert result == E("(and d (or a (and (or b c) e)))")

    def test_extract_with_emptied_term(self, catalogue):
        """An emptied conjunction becomes T: (a + a*c) => (a * (T + c))."""
        result = rewrite(catalogue, "common-term-extraction", "(or (and a) (and a c))")
        assert result == E("(or (and a (or T c)))")
        assert equivalent(result, E("(or (and a) (and a c))"))

    def test_extract_with_emptied_disjunction(self, catalogue):
        """An emptied disjunction becomes F."""
        result = rewrite(catalogue, "common-term-extraction", "(and (or a) (or a c))")
        assert result == E("(and (or a (and F c)))")

    def test_no_common_term(self, catalogue):
        assert not applies(catalogue, "common-term-extraction", "(or (and a b) (and c d))")
        assert not applies(catalogue, "common-term-extraction", "(or (and a b) a)")

    def test_distribute(self, catalogue):
        """(a * (b + c)) => (a*b + a*c)"""
        result = rewrite(catalogue, "term-distribution", "(and a (or b c))")
        assert result == E("(or (and b a) (and c a))")

    def test_distribute_copies_every_sibling(self, catalogue):
        result = rewrite(catalogue, "term-distribution", "(or x y (and b c))")
        assert result == E("(and (or b x y) (or c x y))")

    def test_distribute_uses_first_opposite(self, catalogue):
        result = rewrite(catalogue, "term-distribution", "(and (or a b) (or c d))")
        assert result == E("(or (and a (or c d)) (and b (or c d)))")

    def test_distribute_needs_siblings(self, catalogue):
        assert not applies(catalogue, "term-distribution", "(and (or b c))")
        assert not applies(catalogue, "term-distribution", "(and a b)")


class TestAbsorption:
    """Tests for absorption."""

    def test_absorb_disjunction(self, catalogue):
        """a * (a + b) => a"""
        assert rewrite(catalogue, "absorption", "(and a (or a b))") == E("(and a)")

    def test_absorb_conjunction(self, catalogue):
        """a + (a * b) => a"""
        assert rewrite(catalogue, "absorption", "(or a (and a b))") == E("(or a)")

    def test_absorb_only_matching(self, catalogue):
        result = rewrite(catalogue, "absorption", "(or a (and a b) (and c d))")
        assert result == E("(or a (and c d))")

    def test_nothing_shared(self, catalogue):
        assert not applies(catalogue, "absorption", "(and a (or b c))")
        assert not applies(catalogue, "absorption", "(and (or a b))")


class TestComplementsAndConstants:
    """Tests for complement and constant rules."""

    def test_disjunctive_complement(self, catalogue):
        """p + !p => (T)"""
        assert rewrite(catalogue, "composite-complement", "(or p (not p))") == E("(or T)")

    def test_conjunctive_complement(self, catalogue):
        """p * q * !p => (F)"""
        assert (rewrite(catalogue, "composite-complement", "(and p q (not p))")
                == E("(and F)"))

    def test_complement_of_compound(self, catalogue):
        assert applies(catalogue, "composite-complement",
                       "(or (and a b) (not (and b a)))")

    def test_no_complement(self, catalogue):
        assert not applies(catalogue, "composite-complement", "(or p (not q))")

    def test_basic_complement(self, catalogue):
        """!T => F inside any node."""
        assert (rewrite(catalogue, "basic-complement", "(or p (not T))")
                == E("(or p F)"))
        assert (rewrite(catalogue, "basic-complement", "(and (not F) q)")
                == E("(and q T)"))
        assert (rewrite(catalogue, "basic-complement", "(not (not F))")
                == E("(not T)"))

    def test_basic_complement_needs_constant(self, catalogue):
        assert not applies(catalogue, "basic-complement", "(or p (not q))")

    def test_composite_with_constant(self, catalogue):
        assert rewrite(catalogue, "composite-with-constant", "(or p T)") == E("T")
        assert rewrite(catalogue, "composite-with-constant", "(and p F)") == E("F")

    def test_neutral_constants_untouched(self, catalogue):
        assert not applies(catalogue, "composite-with-constant", "(or p F)")
        assert not applies(catalogue, "composite-with-constant", "(and p T)")
