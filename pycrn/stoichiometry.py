"""
Stoichiometry of expanded reactions.

For a network with species ``S`` and reactions ``R`` the builder produces,
per reaction, dense integer reactant, product and net-change vectors over
all species, and for the network as a whole the corresponding
``len(S) x len(R)`` sparse matrices::

    >>> from pycrn.core import Reaction
    >>> from pycrn.stoichiometry import build_stoichiometry
    >>> s = build_stoichiometry(Reaction({'X': 2}, {'Y': 1}, 1.0),
    ...                         ['X', 'Y'])
    >>> s.net_change
    array([-2,  1])
    >>> s.combinatorial_factors
    {'X': Fraction(1, 2)}

"""

import collections
import math
from fractions import Fraction

import numpy as np
import scipy.sparse

__all__ = ['Stoichiometry', 'combinatorial_factor', 'build_stoichiometry',
           'stoichiometry_matrices']


def combinatorial_factor(multiplicity):
    """
    Combinatorial correction 1/m! for a reactant of multiplicity m.

    Returns
    -------
    fractions.Fraction
    """
    if isinstance(multiplicity, bool) or \
            not isinstance(multiplicity, int) or multiplicity < 0:
        raise ValueError('Multiplicity must be a non-negative integer, got %r'
                         % (multiplicity, ))
    return Fraction(1, math.factorial(multiplicity))


class Stoichiometry(collections.namedtuple(
        'Stoichiometry', 'reactant_vector product_vector net_change '
                         'combinatorial_factors')):
    """
    Stoichiometric vectors of a single reaction over all network species.

    Attributes
    ----------
    reactant_vector, product_vector : numpy.ndarray of int
        Multiplicity of each species as a reactant or product (0 when the
        species does not take part).
    net_change : numpy.ndarray of int
        ``product_vector - reactant_vector``.
    combinatorial_factors : dict
        Species name to ``1/m!`` for every reactant with multiplicity m > 1.
    """
    __slots__ = ()


def _species_index(species):
    return {getattr(s, 'name', s): i for i, s in enumerate(species)}


def _vector(mapping, index):
    v = np.zeros(len(index), dtype=int)
    for name, m in mapping.items():
        v[index[name]] = m
    return v


def build_stoichiometry(reaction, species):
    """
    Build the stoichiometric vectors of one reaction.

    Parameters
    ----------
    reaction : pycrn.core.Reaction
    species : sequence of str or pycrn.core.Species
        All network species, in index order.

    Returns
    -------
    Stoichiometry
    """
    index = _species_index(species)
    reactants = _vector(reaction.reactants, index)
    products = _vector(reaction.products, index)
    factors = {name: combinatorial_factor(m)
               for name, m in reaction.reactants.items() if m > 1}
    return Stoichiometry(reactants, products, products - reactants, factors)


def stoichiometry_matrices(reactions, species):
    """
    Return the reactant, product and net stoichiometry matrices.

    Each matrix is a ``scipy.sparse.csr_matrix`` of integers with one row per
    species and one column per reaction.
    """
    index = _species_index(species)
    shape = (len(index), len(reactions))
    reactant_sm = scipy.sparse.lil_matrix(shape, dtype='int')
    product_sm = scipy.sparse.lil_matrix(shape, dtype='int')
    for i, reaction in enumerate(reactions):
        for name, m in reaction.reactants.items():
            reactant_sm[index[name], i] = m
        for name, m in reaction.products.items():
            product_sm[index[name], i] = m
    reactant_sm = reactant_sm.tocsr()
    product_sm = product_sm.tocsr()
    return reactant_sm, product_sm, (product_sm - reactant_sm).tocsr()
