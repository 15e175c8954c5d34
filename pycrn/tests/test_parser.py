import pytest

from pycrn.core import Reaction, GroupingArityError, MissingReverseRateError, \
    InvalidStoichiometryError
from pycrn.expression import Name
from pycrn.parser import ReactionClause, SpeciesSum, Term, expand_clause, \
    expand_clauses, as_arrow, ARROWS, FORWARD, BIDIRECTIONAL


def _sum(*names):
    return SpeciesSum([Term(None, n) for n in names])


def test_as_arrow():
    assert as_arrow('-->').direction == FORWARD
    assert as_arrow('⇌').direction == BIDIRECTIONAL
    assert as_arrow(ARROWS['=>']) is ARROWS['=>']
    with pytest.raises(ValueError):
        as_arrow('~>')


def test_forward():
    reactions = expand_clause(ReactionClause('k', '-->', _sum('X'),
                                             _sum('Y')))
    assert reactions == [Reaction({'X': 1}, {'Y': 1}, Name('k'))]
    assert reactions[0].mass_action
    assert not reactions[0].reversible


def test_backward():
    reaction, = expand_clause(ReactionClause('k', '<--', _sum('X'),
                                             _sum('Y')))
    assert dict(reaction.reactants) == {'Y': 1}
    assert dict(reaction.products) == {'X': 1}


def test_bidirectional():
    reactions = expand_clause(ReactionClause(('kf', 'kb'), '<-->',
                                             _sum('X', 'Y'), _sum('XY')))
    assert reactions == [
        Reaction({'X': 1, 'Y': 1}, {'XY': 1}, Name('kf')),
        Reaction({'XY': 1}, {'X': 1, 'Y': 1}, Name('kb')),
    ]
    assert all(r.reversible for r in reactions)


def test_bidirectional_missing_reverse_rate():
    with pytest.raises(MissingReverseRateError):
        expand_clause(ReactionClause('k', '<-->', _sum('X'), _sum('Y')))


def test_bidirectional_too_many_rates():
    with pytest.raises(GroupingArityError):
        expand_clause(ReactionClause(('k1', 'k2', 'k3'), '<-->', _sum('X'),
                                     _sum('Y')))


def test_grouped_broadcast_rate():
    reactions = expand_clause(ReactionClause('k', '-->',
                                             (_sum('X'), _sum('Y')),
                                             SpeciesSum()))
    assert reactions == [Reaction({'X': 1}, {}, Name('k')),
                         Reaction({'Y': 1}, {}, Name('k'))]


def test_grouped_zip():
    reactions = expand_clause(ReactionClause(('k1', 'k2'), '-->',
                                             (_sum('X'), _sum('Y')),
                                             SpeciesSum()))
    assert [str(r.rate) for r in reactions] == ['k1', 'k2']
    assert [list(r.reactants) for r in reactions] == [['X'], ['Y']]


def test_grouped_mismatch():
    with pytest.raises(GroupingArityError):
        expand_clause(ReactionClause(('k1', 'k2', 'k3'), '-->',
                                     (_sum('X'), _sum('Y')), SpeciesSum()))
    with pytest.raises(GroupingArityError):
        expand_clause(ReactionClause('k', '-->', (_sum('X'), _sum('Y')),
                                     (_sum('A'), _sum('B'), _sum('C'))))


def test_nested_bidirectional_order():
    clause = ReactionClause((('kf1', 'kf2'), 'kb'), '<-->',
                            (_sum('X'), _sum('Y')), _sum('Z'))
    reactions = expand_clause(clause)
    assert [(list(r.reactants), list(r.products), str(r.rate))
            for r in reactions] == [
        (['X'], ['Z'], 'kf1'),
        (['Y'], ['Z'], 'kf2'),
        (['Z'], ['X'], 'kb'),
        (['Z'], ['Y'], 'kb'),
    ]


def test_literal_rate_arrow():
    for glyph in ('=>', '⇒', '⟹', '<=', '<=>'):
        rates = ('a', 'b') if glyph == '<=>' else 'a'
        reactions = expand_clause(ReactionClause(rates, glyph, _sum('X'),
                                                 _sum('Y')))
        assert not any(r.mass_action for r in reactions), glyph


def test_coefficients():
    clause = ReactionClause('k', '-->',
                            SpeciesSum([Term(2, 'X'), Term(2.0, 'Y')]),
                            _sum('Z'))
    reaction, = expand_clause(clause)
    assert dict(reaction.reactants) == {'X': 2, 'Y': 2}


def test_repeated_species_accumulate():
    reaction, = expand_clause(ReactionClause('k', '-->', _sum('X', 'X'),
                                             _sum('Y')))
    assert dict(reaction.reactants) == {'X': 2}


def test_invalid_coefficients():
    for coefficient in (0, -1, 1.5, 'two', True):
        clause = ReactionClause('k', '-->',
                                SpeciesSum([Term(coefficient, 'X')]),
                                _sum('Y'), line=3)
        with pytest.raises(InvalidStoichiometryError) as e:
            expand_clause(clause)
        assert str(e.value).startswith('Line 3:')


def test_error_messages_carry_line():
    clause = ReactionClause('k', '<-->', _sum('X'), _sum('Y'), line=7)
    with pytest.raises(MissingReverseRateError) as e:
        expand_clause(clause)
    assert str(e.value).startswith('Line 7:')


def test_expand_clauses_preserves_order():
    clauses = [ReactionClause('k1', '-->', _sum('A'), _sum('B')),
               ReactionClause(('k2', 'k3'), '<-->', _sum('B'), _sum('C')),
               ReactionClause('k4', '-->', SpeciesSum(), _sum('A'))]
    reactions = expand_clauses(clauses)
    assert [str(r.rate) for r in reactions] == ['k1', 'k2', 'k3', 'k4']


def test_clause_repr():
    clause = ReactionClause(('kf', 'kb'), '<-->', _sum('X'), SpeciesSum())
    assert repr(clause) == 'ReactionClause((kf, kb), X bidirectional ∅)'
