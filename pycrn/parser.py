"""
Expansion of reaction clauses into individual reactions.

A reaction clause is one line of a network definition after tokenizing and
parsing (see :mod:`pycrn.grammar`): rate term(s), an arrow, and the two
sides. Clauses can use several kinds of shorthand, all of which are
expanded here into plain irreversible :class:`pycrn.core.Reaction` records.

Grouped shorthand
    A parenthesized tuple of species sums on either side, or a tuple of
    rates, denotes several reactions sharing the remaining parts of the
    clause. Tuples are zipped positionally and non-tuples are broadcast::

        (k1, k2), (X, Y) --> 0      # X --> 0 at k1, then Y --> 0 at k2
        k, (X, Y) --> 0             # X --> 0 at k, then Y --> 0 at k

Bidirectional arrows
    Take a ``(forward, backward)`` rate pair and produce the forward
    reactions (lhs to rhs) followed by the backward reactions (rhs to lhs).
    Each element of the pair may itself be a tuple zipped against grouped
    sides::

        ((kf1, kf2), kb), (X, Y) <--> Z
        # X --> Z at kf1, Y --> Z at kf2, Z --> X at kb, Z --> Y at kb

Literal-rate arrows
    (``=>``, ``<=``, ``<=>`` and their Unicode forms) use the supplied rate
    as the complete rate law instead of a mass-action rate constant.
"""

import collections
import numbers

from pycrn.core import (
    Reaction, GroupingArityError, MissingReverseRateError,
    InvalidStoichiometryError
)
from pycrn.expression import as_expression
from pycrn.logging import get_logger

__all__ = ['Arrow', 'ARROWS', 'as_arrow', 'Term', 'SpeciesSum',
           'ReactionClause', 'expand_clause', 'expand_clauses',
           'FORWARD', 'BACKWARD', 'BIDIRECTIONAL']

FORWARD = 'forward'
BACKWARD = 'backward'
BIDIRECTIONAL = 'bidirectional'


class Arrow(collections.namedtuple('Arrow', 'direction mass_action')):
    """Direction of a clause and whether its rate law is inferred by mass
    action."""
    __slots__ = ()

    @property
    def is_bidirectional(self):
        return self.direction == BIDIRECTIONAL


#: Arrow glyphs and the (direction, mass action) pair each one stands for.
ARROWS = collections.OrderedDict([
    ('<-->', Arrow(BIDIRECTIONAL, True)),
    ('<=>', Arrow(BIDIRECTIONAL, False)),
    ('-->', Arrow(FORWARD, True)),
    ('<--', Arrow(BACKWARD, True)),
    ('=>', Arrow(FORWARD, False)),
    ('<=', Arrow(BACKWARD, False)),
    ('→', Arrow(FORWARD, True)),
    ('⟶', Arrow(FORWARD, True)),
    ('←', Arrow(BACKWARD, True)),
    ('⟵', Arrow(BACKWARD, True)),
    ('↔', Arrow(BIDIRECTIONAL, True)),
    ('⟷', Arrow(BIDIRECTIONAL, True)),
    ('⇄', Arrow(BIDIRECTIONAL, True)),
    ('⇌', Arrow(BIDIRECTIONAL, True)),
    ('⇒', Arrow(FORWARD, False)),
    ('⟹', Arrow(FORWARD, False)),
    ('⇐', Arrow(BACKWARD, False)),
    ('⟸', Arrow(BACKWARD, False)),
    ('⇔', Arrow(BIDIRECTIONAL, False)),
    ('⟺', Arrow(BIDIRECTIONAL, False)),
])


def as_arrow(arrow):
    """Coerce an arrow glyph or Arrow to an Arrow."""
    if isinstance(arrow, Arrow):
        return arrow
    try:
        return ARROWS[arrow]
    except KeyError:
        raise ValueError('Unknown reaction arrow: %r' % (arrow, )) from None


class Term(collections.namedtuple('Term', 'coefficient name')):
    """One species term of a reaction side, e.g. ``2X``. ``coefficient`` is
    None when no prefix was written."""
    __slots__ = ()

    def __str__(self):
        if self.coefficient is None:
            return self.name
        return '%s*%s' % (self.coefficient, self.name)


class SpeciesSum(object):
    """
    A sum of species terms forming one side of a reaction.

    An empty sum is the empty set (pure synthesis or degradation).
    """

    def __init__(self, terms=()):
        self.terms = tuple(t if isinstance(t, Term) else Term(*t)
                           for t in terms)

    def multiplicities(self, line=None):
        """
        Species name to multiplicity, in order of appearance.

        Raises
        ------
        InvalidStoichiometryError
            If a coefficient is not a positive integer.
        """
        counts = collections.OrderedDict()
        for term in self.terms:
            counts[term.name] = counts.get(term.name, 0) + \
                _multiplicity(term, line)
        return counts

    def __eq__(self, other):
        if not isinstance(other, SpeciesSum):
            return NotImplemented
        return self.terms == other.terms

    def __hash__(self):
        return hash(self.terms)

    def __repr__(self):
        return '%s(%r)' % (self.__class__.__name__, list(self.terms))

    def __str__(self):
        if not self.terms:
            return '∅'
        return ' + '.join(str(t) for t in self.terms)


def _multiplicity(term, line):
    c = term.coefficient
    if c is None:
        return 1
    if isinstance(c, numbers.Real) and not isinstance(c, bool) and \
            float(c).is_integer() and c >= 1:
        return int(c)
    message = 'Stoichiometric coefficient of %s must be a positive ' \
              'integer, got %r' % (term.name, c)
    if line is not None:
        message = 'Line %d: %s' % (line, message)
    raise InvalidStoichiometryError(message)


class ReactionClause(object):

    """
    One normalized reaction clause.

    Parameters
    ----------
    rates : RateExpression or tuple
        A rate expression, or a (possibly nested) tuple of rate terms for
        bidirectional arrows and grouped shorthand. Numbers and strings are
        converted with :func:`pycrn.expression.as_expression`.
    arrow : Arrow or str
        The directional marker, as an :class:`Arrow` or a glyph from
        :data:`ARROWS`.
    lhs, rhs : SpeciesSum or tuple of SpeciesSum
        The left- and right-hand sides as written.
    line : int, optional
        Source line, used in error messages.

    """

    def __init__(self, rates, arrow, lhs, rhs, line=None):
        self.rates = _as_rate_term(rates)
        self.arrow = as_arrow(arrow)
        self.lhs = lhs
        self.rhs = rhs
        self.line = line

    def __repr__(self):
        return '%s(%s, %s %s %s)' % (
            self.__class__.__name__, _format_rate_term(self.rates),
            _format_side(self.lhs), self.arrow.direction,
            _format_side(self.rhs))


def _as_rate_term(rates):
    if isinstance(rates, tuple):
        return tuple(_as_rate_term(r) for r in rates)
    return as_expression(rates)


def _format_rate_term(rates):
    if isinstance(rates, tuple):
        return '(%s)' % ', '.join(_format_rate_term(r) for r in rates)
    return str(rates)


def _format_side(side):
    if isinstance(side, tuple):
        return '(%s)' % ', '.join(str(s) for s in side)
    return str(side)


def expand_clause(clause):
    """
    Expand one reaction clause into a list of irreversible reactions.

    Parameters
    ----------
    clause : ReactionClause

    Returns
    -------
    list of pycrn.core.Reaction, in the documented expansion order (see the
    module docstring).

    Raises
    ------
    GroupingArityError
        Tuple lengths in grouped shorthand do not match, or a bidirectional
        clause was given a rate tuple that is not a pair.
    MissingReverseRateError
        Bidirectional clause with a single rate.
    InvalidStoichiometryError
        Coefficient that is not a positive integer.
    """
    arrow = clause.arrow
    mass_action = arrow.mass_action
    line = clause.line
    if arrow.direction == FORWARD:
        return _zip_expand(clause.rates, clause.lhs, clause.rhs,
                           mass_action, False, line)
    if arrow.direction == BACKWARD:
        return _zip_expand(clause.rates, clause.rhs, clause.lhs,
                           mass_action, False, line)

    rates = clause.rates
    if not isinstance(rates, tuple):
        raise MissingReverseRateError(_with_line(
            'Bidirectional reaction %s needs a (forward, backward) rate '
            'pair, got the single rate %s' % (_describe(clause), rates),
            line))
    if len(rates) != 2:
        raise GroupingArityError(_with_line(
            'Bidirectional reaction %s needs a (forward, backward) rate '
            'pair, got %d rates' % (_describe(clause), len(rates)), line))
    forward = _zip_expand(rates[0], clause.lhs, clause.rhs, mass_action,
                          True, line)
    backward = _zip_expand(rates[1], clause.rhs, clause.lhs, mass_action,
                           True, line)
    return forward + backward


def expand_clauses(clauses):
    """Expand a sequence of clauses, preserving declaration order."""
    logger = get_logger(__name__)
    reactions = []
    for clause in clauses:
        expanded = expand_clause(clause)
        logger.debug('Expanded %r into %d reaction(s)', clause, len(expanded))
        reactions.extend(expanded)
    return reactions


def _zip_expand(rates, reactants, products, mass_action, reversible, line):
    lengths = [len(x) if isinstance(x, tuple) else 1
               for x in (rates, reactants, products)]
    n = max(lengths)
    if any(length not in (1, n) for length in lengths):
        raise GroupingArityError(_with_line(
            'Mismatched group lengths: %d rate(s), %d reactant group(s), '
            '%d product group(s)' % tuple(lengths), line))
    reactions = []
    for i in range(n):
        rate = _pick(rates, i)
        subs = _pick(reactants, i)
        prods = _pick(products, i)
        if isinstance(rate, tuple):
            raise GroupingArityError(_with_line(
                'Rate tuple %s has no matching species group' %
                _format_rate_term(rate), line))
        for side in (subs, prods):
            if not isinstance(side, SpeciesSum):
                raise GroupingArityError(_with_line(
                    'Species groups cannot be nested: %s' %
                    _format_side(side), line))
        reactions.append(Reaction(subs.multiplicities(line),
                                  prods.multiplicities(line), rate,
                                  mass_action=mass_action,
                                  reversible=reversible, line=line))
    return reactions


def _pick(value, i):
    if isinstance(value, tuple):
        return value[i] if len(value) > 1 else value[0]
    return value


def _describe(clause):
    return '%s %s %s' % (_format_side(clause.lhs), clause.arrow.direction,
                         _format_side(clause.rhs))


def _with_line(message, line):
    if line is None:
        return message
    return 'Line %d: %s' % (line, message)

