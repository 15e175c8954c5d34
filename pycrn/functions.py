"""
Process-wide registry of functions callable from rate expressions.

A rate expression such as ``hill(X, v, K, n)`` is resolved against this
registry by name and arity when a network is assembled. Networks bind the
:class:`RateFunction` object found at that moment, so registering,
replacing or removing a function afterwards has no effect on networks that
have already been assembled.

Register custom functions during initialization, before any network that
uses them is built::

    >>> import numpy as np
    >>> from pycrn.functions import register_rate_function
    >>> register_rate_function('logistic', 2,
    ...                        lambda x, k: 1 / (1 + np.exp(-k * x)))
    RateFunction('logistic', 2)

The registry is not synchronized. Concurrent registration and assembly
race, with the last writer winning.
"""

import warnings

import numpy as np
import sympy

from pycrn.core import UnknownRateFunctionError, RateFunctionRedefinedWarning
from pycrn.logging import get_logger

__all__ = ['RateFunction', 'register_rate_function',
           'unregister_rate_function', 'get_rate_function', 'rate_functions',
           'reset_rate_functions', 'hill', 'hillr', 'mm', 'mmr']


class RateFunction(object):

    """
    A named pure numeric function usable in rate expressions.

    Parameters
    ----------
    name : string
        Name used to call the function from a rate expression.
    arity : int
        Number of arguments.
    fn : callable
        Pure numeric function of ``arity`` arguments. It must not mutate
        its arguments or hold state.
    symbolic : callable, optional
        Function of ``arity`` sympy expressions returning a sympy
        expression. Required for symbolic Jacobians of networks using the
        function.

    """

    def __init__(self, name, arity, fn, symbolic=None):
        if not isinstance(name, str) or not name.isidentifier():
            raise ValueError('Not a valid rate function name: %r' % (name, ))
        if isinstance(arity, bool) or not isinstance(arity, int) or arity < 0:
            raise ValueError('Rate function arity must be a non-negative '
                             'integer, got %r' % (arity, ))
        if not callable(fn):
            raise TypeError('Rate function %s is not callable' % name)
        self.name = name
        self.arity = arity
        self.fn = fn
        self.symbolic = symbolic

    def __call__(self, *args):
        return self.fn(*args)

    def __repr__(self):
        return '%s(%s, %d)' % (self.__class__.__name__, repr(self.name),
                               self.arity)


def hill(x, v, k, n):
    """Hill function: v * x^n / (k^n + x^n)."""
    return v * x ** n / (k ** n + x ** n)


def hillr(x, v, k, n):
    """Repressive Hill function: v * k^n / (k^n + x^n)."""
    return v * k ** n / (k ** n + x ** n)


def mm(x, v, k):
    """Michaelis-Menten function: v * x / (k + x)."""
    return v * x / (k + x)


def mmr(x, v, k):
    """Repressive Michaelis-Menten function: v * k / (k + x)."""
    return v * k / (k + x)


def _builtin_functions():
    # hill and friends are written with operators only, so they accept sympy
    # arguments as they are
    return [
        RateFunction('hill', 4, hill, hill),
        RateFunction('hillr', 4, hillr, hillr),
        RateFunction('mm', 3, mm, mm),
        RateFunction('mmr', 3, mmr, mmr),
        RateFunction('exp', 1, np.exp, sympy.exp),
        RateFunction('log', 1, np.log, sympy.log),
        RateFunction('sqrt', 1, np.sqrt, sympy.sqrt),
        RateFunction('abs', 1, np.abs, sympy.Abs),
    ]


_registry = {f.name: f for f in _builtin_functions()}


def register_rate_function(name, arity, fn, symbolic=None):
    """
    Register a function for use in rate expressions.

    Re-registering an existing name replaces the previous entry (the later
    registration wins) and issues a :class:`RateFunctionRedefinedWarning`.

    Parameters
    ----------
    name, arity, fn, symbolic
        See :class:`RateFunction`.

    Returns
    -------
    The registered :class:`RateFunction`.
    """
    function = RateFunction(name, arity, fn, symbolic)
    previous = _registry.get(name)
    if previous is not None:
        warnings.warn("Rate function '%s' (arity %d) replaced by a new "
                      "definition of arity %d" % (name, previous.arity,
                                                  arity),
                      RateFunctionRedefinedWarning, stacklevel=2)
    _registry[name] = function
    get_logger(__name__).debug('Registered rate function %s/%d', name, arity)
    return function


def unregister_rate_function(name):
    """Remove a rate function from the registry."""
    try:
        del _registry[name]
    except KeyError:
        raise UnknownRateFunctionError(
            "No rate function named '%s' is registered" % name) from None
    get_logger(__name__).debug('Unregistered rate function %s', name)


def get_rate_function(name, arity):
    """
    Look up a registered rate function by name and arity.

    Raises
    ------
    UnknownRateFunctionError
        If no function of that name is registered, or it takes a different
        number of arguments.
    """
    function = _registry.get(name)
    if function is None:
        raise UnknownRateFunctionError(
            "Rate expression calls unknown function '%s'" % name)
    if function.arity != arity:
        raise UnknownRateFunctionError(
            "Rate function '%s' takes %d argument(s), called with %d" %
            (name, function.arity, arity))
    return function


def rate_functions():
    """Return a snapshot of the registry as a dict of name to RateFunction."""
    return dict(_registry)


def reset_rate_functions():
    """Restore the registry to the built-in functions only."""
    _registry.clear()
    _registry.update((f.name, f) for f in _builtin_functions())
