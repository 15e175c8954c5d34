import functools

import numpy as np

from pycrn import functions


def with_clean_registry(func):
    """Decorate a test to restore the rate function registry afterwards.

    Functions registered by the test are removed, and built-ins it replaced
    or unregistered are put back, however the test exits.
    """
    @functools.wraps(func)
    def inner(*args, **kwargs):
        saved = dict(functions._registry)
        try:
            return func(*args, **kwargs)
        finally:
            functions._registry.clear()
            functions._registry.update(saved)
    return inner


def assert_networks_equivalent(network, other, y=None, p=None, t=0.0):
    """Check that two networks define the same system, asserting that they
    have the same species, parameters, reactions and net-change vectors.

    If a state ``y`` and parameter vector ``p`` are given, the rate of
    change and the jump propensities of both networks are also compared at
    that point.
    """
    assert network.species.keys() == other.species.keys(), \
        "Species differ: %s vs %s" % (network.species.keys(),
                                      other.species.keys())
    assert network.parameters.keys() == other.parameters.keys(), \
        "Parameters differ: %s vs %s" % (network.parameters.keys(),
                                         other.parameters.keys())
    assert len(network.reactions) == len(other.reactions), \
        "Network %s has %d reactions, %s has %d" % \
        (network.name, len(network.reactions), other.name,
         len(other.reactions))
    for i, (r1, r2) in enumerate(zip(network.reactions, other.reactions)):
        assert r1 == r2, "Mismatch at reaction %d: %r not equal to %r" % \
            (i, r1, r2)
    for i, (j1, j2) in enumerate(zip(network.jumps, other.jumps)):
        np.testing.assert_array_equal(j1.net_change, j2.net_change,
                                      err_msg='Net change of reaction %d'
                                              % i)
    if y is not None and p is not None:
        np.testing.assert_allclose(network.f(y, p, t), other.f(y, p, t))
        np.testing.assert_allclose(network.rates(y, p, t),
                                   other.rates(y, p, t))
