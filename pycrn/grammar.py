"""
Text front-end for reaction networks.

The text is turned into a typed token stream by :class:`ReactionLexer`
(``ply.lex``) and parsed by the LALR grammar in :class:`ReactionGrammar`
(``ply.yacc``) into :class:`pycrn.parser.ReactionClause` objects, one per
line::

    >>> from pycrn.grammar import parse_network
    >>> definition = parse_network('''
    ... begin
    ...     c1, X --> 2X        # birth
    ...     c2, X --> 0         # death
    ...     c3, 0 --> X         # immigration
    ... end c1 c2 c3
    ... ''')
    >>> definition.parameters
    ['c1', 'c2', 'c3']

Clause syntax is ``rate(s), reactants ARROW products``. Reactants and
products are sums of species with optional integer coefficients (``2X``,
``2*X``), the empty set (``0`` or ``∅``), or parenthesized tuples of such
sums for grouped shorthand. Rates are arithmetic expressions over numbers,
parameters, species, the time ``t`` and registered functions, or
parenthesized tuples of rates. The ``begin``/``end`` wrapper is optional;
names following ``end`` declare the parameters in order. Lines may also be
separated by ``;`` and ``#`` starts a comment.

A literal such as ``2E1`` is the number 20.0 inside a rate but two copies
of species ``E1`` on a reaction side.
"""

import collections
import re

from ply import lex, yacc
from ply.lex import TOKEN

from pycrn.core import ReactionSyntaxError
from pycrn.expression import Constant, Name, BinaryOp, FunctionCall, negate
from pycrn.logging import get_logger
from pycrn.parser import ARROWS, ReactionClause, SpeciesSum, Term, \
    expand_clauses

__all__ = ['NetworkDefinition', 'parse_network', 'parse_clauses',
           'parse_reactions', 'parse_expression']


class NetworkDefinition(collections.namedtuple('NetworkDefinition',
                                               'clauses parameters')):
    """Parsed network text: the reaction clauses and the parameter names
    declared after ``end`` (None when none were declared)."""
    __slots__ = ()


_ARROW_REGEX = '|'.join(re.escape(glyph) for glyph in
                        sorted(ARROWS, key=len, reverse=True))


class ReactionLexer(object):

    reserved = {'begin': 'BEGIN', 'end': 'END'}

    tokens = [
        'NUMBER',
        'EXPONENT_LITERAL',
        'NAME',
        'ARROW',
        'PLUS',
        'MINUS',
        'TIMES',
        'DIVIDE',
        'POWER',
        'LPAREN',
        'RPAREN',
        'COMMA',
        'EMPTYSET',
        'NEWLINE',
    ] + list(reserved.values())

    t_PLUS = r'\+'
    t_MINUS = r'-'
    t_TIMES = r'\*'
    t_DIVIDE = r'/'
    t_POWER = r'\*\*|\^'
    t_LPAREN = r'\('
    t_RPAREN = r'\)'
    t_COMMA = r','
    t_EMPTYSET = r'∅'

    # A string containing ignored characters (spaces and tabs)
    t_ignore = ' \t\r'

    # Match and ignore comments (# to end of line)
    t_ignore_comment = r'\#[^\n]*'

    # Function rules are tried in definition order, ahead of the string
    # rules, so arrows win over MINUS
    @TOKEN(_ARROW_REGEX)
    def t_ARROW(self, t):
        t.value = ARROWS[t.value]
        return t

    # Read as a number in rate expressions and as a coefficient followed
    # by a species name (2E1 is two of E1) on reaction sides
    def t_EXPONENT_LITERAL(self, t):
        r'\d+[eE]\d+(?!\w)'
        return t

    def t_NUMBER(self, t):
        r'(\d+\.\d*|\.\d+)([eE][-+]?\d+)?|\d+[eE][-+]\d+|\d+'
        t.value = int(t.value) if t.value.isdigit() else float(t.value)
        return t

    def t_NAME(self, t):
        r'[^\W\d]\w*'
        t.type = self.reserved.get(t.value, 'NAME')
        return t

    # Define a rule so we can track line numbers
    def t_NEWLINE(self, t):
        r'\n|;'
        t.lexer.lineno += t.value.count('\n')
        return t

    def t_error(self, t):
        raise ReactionSyntaxError("Illegal character '%s'" % t.value[0],
                                  t.lexer.lineno)


class ReactionGrammar(object):

    tokens = ReactionLexer.tokens

    precedence = (
        ('left', 'PLUS', 'MINUS'),
        ('left', 'TIMES', 'DIVIDE'),
        ('right', 'UMINUS'),
        ('right', 'POWER'),
    )

    def p_network(self, p):
        'network : statements'
        p[0] = NetworkDefinition(p[1], None)

    def p_network_block(self, p):
        'network : statements BEGIN NEWLINE statements END names NEWLINE statements'
        if p[1] or p[8]:
            stray = (p[1] or p[8])[0]
            raise ReactionSyntaxError('Reaction outside of the begin ... end '
                                      'block', stray.line)
        p[0] = NetworkDefinition(p[4], p[6] or None)

    def p_statements(self, p):
        'statements : statements statement'
        p[0] = p[1] + [p[2]] if p[2] is not None else p[1]

    def p_statements_empty(self, p):
        'statements : empty'
        p[0] = []

    def p_statement_clause(self, p):
        'statement : clause NEWLINE'
        p[0] = p[1]

    def p_statement_blank(self, p):
        'statement : NEWLINE'
        p[0] = None

    def p_names(self, p):
        'names : names NAME'
        p[0] = p[1] + [p[2]]

    def p_names_empty(self, p):
        'names : empty'
        p[0] = []

    def p_empty(self, p):
        'empty :'
        pass

    def p_clause(self, p):
        'clause : rate_term COMMA side ARROW side'
        p[0] = ReactionClause(p[1], p[4], p[3], p[5], line=p.lineno(2))

    def p_rate_term_expr(self, p):
        'rate_term : expr'
        p[0] = p[1]

    def p_rate_term_tuple(self, p):
        'rate_term : LPAREN rate_list RPAREN'
        p[0] = tuple(p[2])

    def p_rate_list(self, p):
        'rate_list : rate_term COMMA rate_term'
        p[0] = [p[1], p[3]]

    def p_rate_list_more(self, p):
        'rate_list : rate_list COMMA rate_term'
        p[0] = p[1] + [p[3]]

    def p_side_sum(self, p):
        'side : species_sum'
        p[0] = SpeciesSum(p[1])

    def p_side_parenthesized(self, p):
        'side : LPAREN species_sum RPAREN'
        p[0] = SpeciesSum(p[2])

    def p_side_group(self, p):
        'side : LPAREN side_list RPAREN'
        p[0] = tuple(SpeciesSum(terms) for terms in p[2])

    def p_side_list(self, p):
        'side_list : species_sum COMMA species_sum'
        p[0] = [p[1], p[3]]

    def p_side_list_more(self, p):
        'side_list : side_list COMMA species_sum'
        p[0] = p[1] + [p[3]]

    def p_species_sum(self, p):
        'species_sum : term'
        p[0] = p[1]

    def p_species_sum_more(self, p):
        'species_sum : species_sum PLUS term'
        p[0] = p[1] + p[3]

    def p_term_species(self, p):
        'term : NAME'
        p[0] = [Term(None, p[1])]

    def p_term_coefficient(self, p):
        '''term : NUMBER NAME
                | NUMBER TIMES NAME'''
        p[0] = [Term(p[1], p[len(p) - 1])]

    def p_term_exponent_coefficient(self, p):
        'term : EXPONENT_LITERAL TIMES NAME'
        p[0] = [Term(float(p[1]), p[3])]

    def p_term_exponent_literal(self, p):
        'term : EXPONENT_LITERAL'
        coefficient, species = re.match(r'(\d+)(.*)', p[1]).groups()
        p[0] = [Term(int(coefficient), species)]

    # Rejected with InvalidStoichiometryError at expansion
    def p_term_negative(self, p):
        '''term : MINUS NUMBER NAME
                | MINUS NUMBER TIMES NAME
                | MINUS NAME'''
        if len(p) == 3:
            p[0] = [Term(-1, p[2])]
        else:
            p[0] = [Term(-p[2], p[len(p) - 1])]

    def p_term_empty_set(self, p):
        'term : EMPTYSET'
        p[0] = []

    def p_term_zero(self, p):
        'term : NUMBER'
        if p[1] != 0:
            raise ReactionSyntaxError('Coefficient %r is not followed by a '
                                      'species' % p[1], p.lineno(1))
        p[0] = []

    def p_expr_binary(self, p):
        '''expr : expr PLUS expr
                | expr MINUS expr
                | expr TIMES expr
                | expr DIVIDE expr
                | expr POWER expr'''
        op = '^' if p[2] in ('^', '**') else p[2]
        p[0] = BinaryOp(op, p[1], p[3])

    def p_expr_uminus(self, p):
        'expr : MINUS expr %prec UMINUS'
        p[0] = negate(p[2])

    def p_expr_group(self, p):
        'expr : LPAREN expr RPAREN'
        p[0] = p[2]

    def p_expr_number(self, p):
        'expr : NUMBER'
        p[0] = Constant(p[1])

    def p_expr_exponent_literal(self, p):
        'expr : EXPONENT_LITERAL'
        p[0] = Constant(float(p[1]))

    def p_expr_name(self, p):
        'expr : NAME'
        p[0] = Name(p[1])

    def p_expr_call(self, p):
        'expr : NAME LPAREN args RPAREN'
        p[0] = FunctionCall(p[1], p[3])

    def p_expr_call_no_args(self, p):
        'expr : NAME LPAREN RPAREN'
        p[0] = FunctionCall(p[1], [])

    def p_args(self, p):
        'args : expr'
        p[0] = [p[1]]

    def p_args_more(self, p):
        'args : args COMMA expr'
        p[0] = p[1] + [p[3]]

    def p_error(self, p):
        if p is None:
            raise ReactionSyntaxError('Unexpected end of input')
        if p.type == 'NEWLINE':
            what = 'end of line'
        elif p.type == 'ARROW':
            what = 'arrow'
        else:
            what = "'%s'" % (p.value, )
        raise ReactionSyntaxError('Syntax error at %s' % what, p.lineno)


_lexer = None
_parsers = {}


def _get_lexer():
    global _lexer
    if _lexer is None:
        _lexer = lex.lex(module=ReactionLexer(), errorlog=lex.NullLogger())
    lexer = _lexer.clone()
    lexer.lineno = 1
    return lexer


def _get_parser(start):
    parser = _parsers.get(start)
    if parser is None:
        get_logger(__name__).debug('Building LALR tables for %s', start)
        parser = yacc.yacc(module=ReactionGrammar(), start=start,
                           debug=False, write_tables=False,
                           errorlog=yacc.NullLogger())
        _parsers[start] = parser
    return parser


def parse_network(text):
    """
    Parse reaction network text.

    Parameters
    ----------
    text : string
        One reaction clause per line, optionally wrapped in a
        ``begin`` ... ``end p1 p2 ...`` block.

    Returns
    -------
    NetworkDefinition

    Raises
    ------
    ReactionSyntaxError
        If the text does not follow the reaction grammar.
    """
    if not text.endswith('\n'):
        text += '\n'
    definition = _get_parser('network').parse(text, lexer=_get_lexer())
    get_logger(__name__).debug('Parsed %d reaction clause(s)',
                               len(definition.clauses))
    return definition


def parse_clauses(text):
    """Parse reaction clause lines (without declared parameters)."""
    return parse_network(text).clauses


def parse_reactions(text):
    """Parse reaction network text and expand it into Reaction records."""
    return expand_clauses(parse_network(text).clauses)


def parse_expression(text):
    """
    Parse a single rate expression, e.g. ``'k1*hill(X, v, K, 2)'``.

    Returns
    -------
    pycrn.expression.RateExpression, with unresolved names.
    """
    return _get_parser('expr').parse(text, lexer=_get_lexer())
