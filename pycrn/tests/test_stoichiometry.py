from fractions import Fraction

import numpy as np
import pytest

from pycrn.core import Reaction
from pycrn.expression import Name
from pycrn.stoichiometry import combinatorial_factor, build_stoichiometry, \
    stoichiometry_matrices


def test_combinatorial_factor():
    assert combinatorial_factor(0) == 1
    assert combinatorial_factor(1) == 1
    assert combinatorial_factor(2) == Fraction(1, 2)
    assert combinatorial_factor(3) == Fraction(1, 6)
    assert combinatorial_factor(4) == Fraction(1, 24)
    with pytest.raises(ValueError):
        combinatorial_factor(-1)
    with pytest.raises(ValueError):
        combinatorial_factor(2.0)


def test_build_stoichiometry():
    reaction = Reaction({'X': 2, 'Y': 1}, {'Z': 1}, Name('k'))
    s = build_stoichiometry(reaction, ['X', 'Y', 'Z', 'W'])
    np.testing.assert_array_equal(s.reactant_vector, [2, 1, 0, 0])
    np.testing.assert_array_equal(s.product_vector, [0, 0, 1, 0])
    np.testing.assert_array_equal(s.net_change, [-2, -1, 1, 0])
    assert s.combinatorial_factors == {'X': Fraction(1, 2)}


def test_catalyst_has_no_net_change():
    reaction = Reaction({'E': 1, 'S': 1}, {'E': 1, 'P': 1}, Name('k'))
    s = build_stoichiometry(reaction, ['E', 'S', 'P'])
    np.testing.assert_array_equal(s.net_change, [0, -1, 1])


def test_empty_set_sides():
    synthesis = build_stoichiometry(Reaction({}, {'X': 1}, Name('k')), ['X'])
    degradation = build_stoichiometry(Reaction({'X': 1}, {}, Name('k')),
                                      ['X'])
    np.testing.assert_array_equal(synthesis.net_change, [1])
    np.testing.assert_array_equal(degradation.net_change, [-1])


def test_stoichiometry_matrices():
    reactions = [Reaction({'X': 1}, {'X': 2}, Name('c1')),
                 Reaction({'X': 1}, {}, Name('c2')),
                 Reaction({}, {'X': 1}, Name('c3'))]
    reactant, product, net = stoichiometry_matrices(reactions, ['X'])
    assert net.shape == (1, 3)
    np.testing.assert_array_equal(reactant.toarray(), [[1, 1, 0]])
    np.testing.assert_array_equal(product.toarray(), [[2, 0, 1]])
    np.testing.assert_array_equal(net.toarray(), [[1, -1, 1]])
    assert np.issubdtype(net.dtype, np.integer)
