import numpy as np
import pytest

from pycrn.builder import Builder
from pycrn.core import MissingReverseRateError, UnknownSymbolError


def test_parameter_values_and_overrides():
    b = Builder(params_dict={'k_deg': 2.0})
    k_syn = b.parameter('k_syn', 10, factor=0.5)
    k_deg = b.parameter('k_deg', 1, factor=3)
    assert k_syn.value == 5.0
    assert k_deg.value == 6.0
    assert b['k_syn'] is k_syn
    with pytest.raises(KeyError):
        b['k_missing']


def test_build_network():
    b = Builder(name='production')
    b.parameter('k_syn', 5.0)
    b.parameter('k_deg', 2.0)
    b.reaction('k_syn', {}, {'X': 1})
    b.reaction(b['k_deg'], {'X': 1}, {})
    rn = b.network()
    assert rn.name == 'production'
    assert rn.parameters.keys() == ['k_syn', 'k_deg']
    p = rn.parameter_vector()
    np.testing.assert_array_equal(p, [5.0, 2.0])
    np.testing.assert_allclose(rn.f([4.0], p), [5.0 - 8.0])


def test_bidirectional_reaction():
    b = Builder()
    added = b.reaction(('kf', 'kb'), {'A': 1, 'B': 1}, {'AB': 1}, '<-->')
    assert len(added) == 2
    rn = b.network()
    assert rn.species.keys() == ['A', 'B', 'AB']
    assert rn.parameters.keys() == ['kf', 'kb']
    with pytest.raises(MissingReverseRateError):
        b.reaction('kf', {'A': 1}, {'B': 1}, '<-->')


def test_literal_rate_reaction():
    b = Builder()
    b.reaction('v*X/(K + X)', {'X': 1}, {'P': 1}, '=>')
    rn = b.network()
    assert not rn.reactions[0].mass_action
    np.testing.assert_allclose(rn.rates([2.0, 0.0], [3.0, 2.0]), [1.5])


def test_reactions_text_and_declared_parameters():
    b = Builder()
    b.parameter('c1', 2.0)
    b.reactions('''
    begin
        c1, X --> 2X
        c2, X --> 0
    end c1 c2
    ''')
    assert b.parameters.keys() == ['c1', 'c2']
    assert b['c2'].value is None
    rn = b.network()
    np.testing.assert_allclose(rn.f([5.0], rn.parameter_vector({'c2': 1.0})),
                               [5.0])


def test_undeclared_rate_parameter():
    b = Builder()
    b.parameter('k1', 1.0)
    b.reaction('k2', {'X': 1}, {})
    with pytest.raises(UnknownSymbolError):
        b.network()


def test_noise_scaling():
    b = Builder()
    b.parameter('k', 1.0)
    b.reaction('k', {'X': 1}, {})
    b.noise_scaling('eta')
    rn = b.network()
    assert rn.noise_parameter.name == 'eta'
    np.testing.assert_allclose(rn.g([4.0], [1.0, 3.0]), [6.0])


def test_builder_subclass_motif():
    class GeneBuilder(Builder):
        def expression_motif(self, gene, protein):
            self.parameter('k_%s' % protein, 10)
            self.parameter('d_%s' % protein, 0.1)
            self.reaction('k_%s' % protein, {gene: 1}, {gene: 1, protein: 1})
            self.reaction('d_%s' % protein, {protein: 1}, {})

    b = GeneBuilder()
    b.expression_motif('G1', 'P1')
    b.expression_motif('G2', 'P2')
    rn = b.network()
    assert rn.species.keys() == ['G1', 'P1', 'G2', 'P2']
    assert len(rn.reactions) == 4
    f = rn.f([1.0, 0.0, 1.0, 0.0], rn.parameter_vector())
    np.testing.assert_allclose(f, [0.0, 10.0, 0.0, 10.0])
