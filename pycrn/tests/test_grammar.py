import pytest

from pycrn.core import ReactionSyntaxError, InvalidStoichiometryError
from pycrn.expression import BinaryOp, Constant, FunctionCall, Name
from pycrn.grammar import parse_network, parse_expression, parse_reactions, \
    parse_clauses
from pycrn.parser import ARROWS, SpeciesSum, Term


def test_single_clause():
    clauses = parse_network('k, X --> Y').clauses
    assert len(clauses) == 1
    clause = clauses[0]
    assert clause.rates == Name('k')
    assert clause.arrow == ARROWS['-->']
    assert clause.lhs == SpeciesSum([Term(None, 'X')])
    assert clause.rhs == SpeciesSum([Term(None, 'Y')])
    assert clause.line == 1


def test_all_arrow_glyphs():
    for glyph, arrow in ARROWS.items():
        clause, = parse_clauses('k, X %s Y' % glyph)
        assert clause.arrow == arrow, glyph


def test_arrows_without_spaces():
    clause, = parse_clauses('k,X<-->Y')
    assert clause.arrow.is_bidirectional
    clause, = parse_clauses('k,X<=Y')
    assert clause.arrow == ARROWS['<=']


def test_begin_end_block_declares_parameters():
    definition = parse_network('''
    begin
        c1, X --> 2X
        c2, X --> 0
        c3, 0 --> X
    end c1 c2 c3
    ''')
    assert len(definition.clauses) == 3
    assert definition.parameters == ['c1', 'c2', 'c3']


def test_begin_end_without_parameters():
    definition = parse_network('begin\nk, X --> Y\nend\n')
    assert len(definition.clauses) == 1
    assert definition.parameters is None


def test_plain_text_has_no_declared_parameters():
    assert parse_network('k, X --> Y\n').parameters is None


def test_reaction_outside_block():
    with pytest.raises(ReactionSyntaxError):
        parse_network('k, A --> B\nbegin\nk, X --> Y\nend\n')


def test_line_numbers():
    clauses = parse_clauses('\n# first\n\nk1, X --> Y\nk2, Y --> Z\n')
    assert [c.line for c in clauses] == [4, 5]


def test_comments_and_separators():
    clauses = parse_clauses('k1, X --> Y  # forward; k9, A --> B\n'
                            'k2, Y --> Z; k3, Z --> X')
    assert [str(c.rates) for c in clauses] == ['k1', 'k2', 'k3']


def test_coefficients():
    clause, = parse_clauses('k, 2X + 3*Y --> Z')
    assert clause.lhs.terms == (Term(2, 'X'), Term(3, 'Y'))
    assert clause.lhs.multiplicities() == {'X': 2, 'Y': 3}


def test_negative_coefficients():
    clause, = parse_clauses('k, -2X --> Y')
    assert clause.lhs.terms == (Term(-2, 'X'), )
    for text in ('k, -2X --> Y', 'k, X --> -3*Y', 'k, -X --> Y'):
        with pytest.raises(InvalidStoichiometryError) as e:
            parse_reactions(text)
        assert str(e.value).startswith('Line 1:'), text


def test_exponent_shaped_species():
    clause, = parse_clauses('k, 2E1 --> P')
    assert clause.lhs.terms == (Term(2, 'E1'), )
    clause, = parse_clauses('k, 2E1X + 3e2 --> 0')
    assert clause.lhs.multiplicities() == {'E1X': 2, 'e2': 3}
    clause, = parse_clauses('2E1, X --> 0')
    assert clause.rates == Constant(20.0)


def test_empty_set():
    for text in ('k, 0 --> X', 'k, ∅ --> X', 'k, X --> ∅', 'k, X --> 0'):
        clause, = parse_clauses(text)
        sides = (clause.lhs, clause.rhs)
        assert SpeciesSum() in sides, text


def test_bare_number_is_not_a_species():
    with pytest.raises(ReactionSyntaxError) as e:
        parse_network('k, 2 --> X')
    assert e.value.line == 1


def test_grouped_sides():
    clause, = parse_clauses('k, (X, Y) --> 0')
    assert clause.lhs == (SpeciesSum([Term(None, 'X')]),
                          SpeciesSum([Term(None, 'Y')]))
    clause, = parse_clauses('k, (X + Y) --> Z')
    assert clause.lhs == SpeciesSum([Term(None, 'X'), Term(None, 'Y')])


def test_rate_tuples():
    clause, = parse_clauses('(k1, k2), X <--> Y')
    assert clause.rates == (Name('k1'), Name('k2'))
    clause, = parse_clauses('((kf1, kf2), kb), (X, Y) <--> Z')
    assert clause.rates == ((Name('kf1'), Name('kf2')), Name('kb'))


def test_parenthesized_rate_is_not_a_tuple():
    clause, = parse_clauses('(k1 + k2)*2, X --> Y')
    assert clause.rates == BinaryOp('*', BinaryOp('+', Name('k1'),
                                                  Name('k2')), Constant(2))


def test_parse_reactions():
    reactions = parse_reactions('(kf, kb), X + Y <--> XY')
    assert len(reactions) == 2
    assert dict(reactions[0].reactants) == {'X': 1, 'Y': 1}
    assert dict(reactions[1].reactants) == {'XY': 1}


def test_illegal_character():
    with pytest.raises(ReactionSyntaxError) as e:
        parse_network('k, X --> Y\nk, X --> Y $\n')
    assert e.value.line == 2
    assert str(e.value).startswith('Line 2:')


def test_missing_arrow():
    with pytest.raises(ReactionSyntaxError):
        parse_network('k, X Y')


def test_expression_precedence():
    assert parse_expression('a + b*c') == \
        BinaryOp('+', Name('a'), BinaryOp('*', Name('b'), Name('c')))
    assert parse_expression('a - b - c') == \
        BinaryOp('-', BinaryOp('-', Name('a'), Name('b')), Name('c'))
    assert parse_expression('2^3^2') == \
        BinaryOp('^', Constant(2), BinaryOp('^', Constant(3), Constant(2)))
    assert parse_expression('x**2') == parse_expression('x^2')


def test_unary_minus():
    assert parse_expression('-3') == Constant(-3)
    assert parse_expression('-x^2') == \
        BinaryOp('*', Constant(-1), BinaryOp('^', Name('x'), Constant(2)))


def test_numbers():
    assert parse_expression('2') == Constant(2)
    assert isinstance(parse_expression('2').value, int)
    assert parse_expression('2.5') == Constant(2.5)
    assert parse_expression('1e-3') == Constant(0.001)
    assert parse_expression('.5') == Constant(0.5)


def test_function_calls():
    assert parse_expression('k1*hill(X, v, K, 2)') == BinaryOp(
        '*', Name('k1'),
        FunctionCall('hill', [Name('X'), Name('v'), Name('K'), Constant(2)]))
    assert parse_expression('f()') == FunctionCall('f', [])


def test_expression_syntax_error():
    with pytest.raises(ReactionSyntaxError):
        parse_expression('k +')
    with pytest.raises(ReactionSyntaxError):
        parse_expression('k\n')
