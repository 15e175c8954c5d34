"""
Rate laws of reactions.

Mass-action reactions have their rate law inferred from the rate constant
and the reactant multiplicities,

    rate = k * X1^m1 * X2^m2 * ... / (m1! * m2! * ...)

while literal-rate reactions (``=>`` arrows) use the written rate as the
complete rate law. Rate laws are built as expression trees over unresolved
names, then resolved against a network's species and parameter tables and
compiled into closures of ``(y, p, t)``.
"""

import numpy as np

from pycrn.expression import Constant, Name, BinaryOp
from pycrn.functions import get_rate_function
from pycrn.stoichiometry import combinatorial_factor

__all__ = ['mass_action_law', 'rate_law', 'resolve_rate_law',
           'CompiledRate']


def mass_action_law(rate, reactants, combinatorial_factors=None):
    """
    Mass-action rate law for a rate constant and reactant multiplicities.

    Parameters
    ----------
    rate : pycrn.expression.RateExpression
        The rate constant (any expression).
    reactants : mapping of str to int
        Species name to multiplicity, in the order the factors should
        appear.
    combinatorial_factors : dict, optional
        Species name to ``1/m!`` as in
        :attr:`pycrn.stoichiometry.Stoichiometry.combinatorial_factors`.
        Computed from ``reactants`` when not given.

    Returns
    -------
    pycrn.expression.RateExpression

    Examples
    --------

    >>> from pycrn.expression import Name
    >>> str(mass_action_law(Name('k'), {'X': 2, 'Y': 1}))
    'k*X^2*Y/2'

    """
    if combinatorial_factors is None:
        combinatorial_factors = {name: combinatorial_factor(m)
                                 for name, m in reactants.items() if m > 1}
    law = rate
    for name, m in reactants.items():
        factor = Name(name) if m == 1 else \
            BinaryOp('^', Name(name), Constant(m))
        law = BinaryOp('*', law, factor)
    scale = 1
    for factor in combinatorial_factors.values():
        scale *= factor
    if scale != 1:
        law = BinaryOp('/', law, Constant(int(1 / scale)))
    return law


def rate_law(reaction, stoichiometry=None):
    """
    The (unresolved) rate law of a reaction.

    The combinatorial factors of a mass-action law are taken from
    ``stoichiometry`` (a :class:`pycrn.stoichiometry.Stoichiometry`) when
    given.
    """
    if reaction.mass_action:
        factors = None if stoichiometry is None else \
            stoichiometry.combinatorial_factors
        return mass_action_law(reaction.rate, reaction.reactants, factors)
    return reaction.rate


def resolve_rate_law(expression, symbols, lookup=get_rate_function):
    """
    Resolve a rate law against network tables and the function registry.

    Raises
    ------
    UnknownSymbolError
        If the expression names something that is not in ``symbols``.
    UnknownRateFunctionError
        If the expression calls an unregistered function, or with the
        wrong number of arguments.
    """
    return expression.resolve(symbols, lookup)


class CompiledRate(object):

    """
    A resolved rate law together with its compiled closure.

    Parameters
    ----------
    expression : pycrn.expression.RateExpression
        Fully resolved rate law.

    Attributes
    ----------
    expression : pycrn.expression.RateExpression
    fn : callable
        ``fn(y, p, t)`` returning the rate. Calling the CompiledRate itself
        coerces ``y`` and ``p`` to float arrays first.
    depends_on_time : bool
    depends_on_species : bool

    """

    def __init__(self, expression):
        self.expression = expression
        self.fn = expression.compile()
        self.depends_on_time = expression.depends_on_time()
        self.depends_on_species = expression.depends_on_species()

    def __call__(self, y, p, t=0.0):
        return self.fn(np.asarray(y, dtype=float), np.asarray(p, dtype=float),
                       t)

    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__, self.expression)
