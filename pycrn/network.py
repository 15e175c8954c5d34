"""
Assembly of reaction networks into numerical functions.

A :class:`ReactionNetwork` takes expanded reactions (or reaction clauses),
builds the species and parameter tables, resolves and compiles every rate
law, and exposes the generated functions consumed by external solvers:

- :meth:`ReactionNetwork.f` -- deterministic rate of change of each species
- :meth:`ReactionNetwork.g` -- Chemical Langevin diffusion amplitude of
  each reaction
- :attr:`ReactionNetwork.jumps` -- per-reaction propensities paired with
  integer net-change vectors

All three take a state vector ``y`` indexed like :attr:`species`, a
parameter vector ``p`` indexed like :attr:`parameters` and the time ``t``::

    >>> from pycrn import reaction_network
    >>> rn = reaction_network('''
    ... begin
    ...     c1, X --> 2X
    ...     c2, X --> 0
    ...     c3, 0 --> X
    ... end c1 c2 c3
    ... ''')
    >>> rn.f([5.0], [2.0, 1.0, 0.5], 0.0)
    array([5.5])
    >>> [float(j.propensity([5.0], [2.0, 1.0, 0.5])) for j in rn.jumps]
    [10.0, 5.0, 0.5]

"""

import collections
from collections.abc import Mapping
import numbers

import numpy as np
import sympy

from pycrn.core import (
    TIME_SYMBOL, DEFAULT_NOISE_PARAMETER, Species, Parameter, ComponentSet,
    DuplicateSymbolError, UnknownSymbolError, format_multiplicities
)
from pycrn.expression import SpeciesRef, ParameterRef, TimeRef, FunctionCall
from pycrn.grammar import parse_network
from pycrn.logging import get_logger
from pycrn.parser import ReactionClause, expand_clause
from pycrn.rates import rate_law, resolve_rate_law, CompiledRate
from pycrn.stoichiometry import build_stoichiometry, stoichiometry_matrices

__all__ = ['ReactionNetwork', 'Jump', 'reaction_network',
           'MASS_ACTION', 'CONSTANT_RATE', 'VARIABLE_RATE']

MASS_ACTION = 'mass_action'
CONSTANT_RATE = 'constant_rate'
VARIABLE_RATE = 'variable_rate'


class Jump(collections.namedtuple(
        'Jump', 'index reaction propensity net_change kind reactant_stoich '
                'net_stoich')):
    """
    A discrete reaction event for stochastic simulation.

    Attributes
    ----------
    index : int
        Position of the reaction in the network.
    reaction : pycrn.core.Reaction
    propensity : pycrn.rates.CompiledRate
        ``propensity(y, p, t)``, the compiled rate law of the reaction.
    net_change : numpy.ndarray of int
        Change in every species count when the reaction fires.
    kind : str
        ``'mass_action'`` when the reaction is mass-action with a rate
        constant independent of species and time, ``'variable_rate'`` when
        the propensity depends on time and ``'constant_rate'`` otherwise.
    reactant_stoich, net_stoich : tuple of (int, int)
        Sparse (species index, count) pairs of the reactant multiplicities
        and of the non-zero net changes.
    """
    __slots__ = ()

    def affect(self, y):
        """Return the state after one firing of the reaction."""
        return np.asarray(y) + self.net_change


class ReactionNetwork(object):

    """
    A compiled chemical reaction network.

    Parameters
    ----------
    reactions : iterable of pycrn.core.Reaction or pycrn.parser.ReactionClause
        The reactions, in order. Clauses are expanded in place.
    parameters : iterable of str or pycrn.core.Parameter, optional
        Parameter names (or Parameters carrying default values) in the order
        of the parameter vector. When omitted, every name used in a rate
        expression that is neither a species nor the time ``t`` becomes a
        parameter, in order of first appearance.
    name : string, optional
        Name of the network, used in log messages.
    noise_scaling : bool or string, optional
        Parameter scaling the diffusion term. A string names the parameter
        (appended if it is not declared). True uses the trailing unused
        declared parameter if there is one, and otherwise appends a
        parameter named ``noise_scaling``. None (default) uses the trailing
        declared parameter if no rate refers to it. False disables noise
        scaling.
    log_level : bool or int, optional
        Override the log level for this network's logger.

    Attributes
    ----------
    species : pycrn.core.ComponentSet of pycrn.core.Species
        In order of first appearance across the reactions (reactants, then
        products).
    parameters : pycrn.core.ComponentSet of pycrn.core.Parameter
    reactions : tuple of pycrn.core.Reaction
    rate_laws : tuple of pycrn.expression.RateExpression
        Resolved rate law of each reaction.
    jumps : tuple of Jump
    noise_parameter : pycrn.core.Parameter or None
    reactant_stoichiometry, product_stoichiometry, net_stoichiometry :
    scipy.sparse.csr_matrix
        Species x reactions integer matrices.

    Raises
    ------
    GroupingArityError, MissingReverseRateError, InvalidStoichiometryError
        From clause expansion.
    UnknownSymbolError
        A rate refers to a name that is not a species, a parameter or ``t``.
    UnknownRateFunctionError
        A rate calls an unregistered function.
    DuplicateSymbolError
        A name is declared twice, or used as both species and parameter.

    """

    def __init__(self, reactions, parameters=None, name='network',
                 noise_scaling=None, log_level=None):
        self.name = name
        self._log = get_logger(__name__, network=self, log_level=log_level)
        self.reactions = tuple(_expand(reactions))
        self.species = ComponentSet()
        for reaction in self.reactions:
            for species_name in reaction.species_names():
                if species_name not in self.species:
                    self.species.add(Species(species_name,
                                             index=len(self.species)))
        self.parameters = ComponentSet()
        self.noise_parameter = None
        self._build_parameters(parameters, noise_scaling)

        symbols = {TIME_SYMBOL: TimeRef()}
        symbols.update((s.name, SpeciesRef(s.name, s.index))
                       for s in self.species)
        symbols.update((p.name, ParameterRef(p.name, p.index))
                       for p in self.parameters)

        self.stoichiometries = tuple(build_stoichiometry(r, self.species)
                                     for r in self.reactions)
        self._compiled = tuple(
            CompiledRate(resolve_rate_law(rate_law(r, s), symbols))
            for r, s in zip(self.reactions, self.stoichiometries))
        self.rate_laws = tuple(c.expression for c in self._compiled)

        (self.reactant_stoichiometry, self.product_stoichiometry,
         self.net_stoichiometry) = stoichiometry_matrices(self.reactions,
                                                          self.species)
        self._net_dense = self.net_stoichiometry.toarray()
        self.jumps = tuple(self._make_jump(i, symbols)
                           for i in range(len(self.reactions)))
        self._symbolic = None

        self._log.info('Assembled %d reaction(s) over %d species and %d '
                       'parameter(s)', len(self.reactions),
                       len(self.species), len(self.parameters))

    def _build_parameters(self, parameters, noise_scaling):
        used = []
        for reaction in self.reactions:
            for symbol in reaction.rate.names():
                if symbol not in used:
                    used.append(symbol)

        if parameters is None:
            declared = [Parameter(n) for n in used
                        if n not in self.species and n != TIME_SYMBOL]
            trailing = None
        else:
            declared = [Parameter(p.name, p.value)
                        if isinstance(p, Parameter) else Parameter(p)
                        for p in parameters]
            trailing = declared[-1].name if declared and \
                declared[-1].name not in used else None

        for p in declared:
            if p.name in self.species:
                raise DuplicateSymbolError(
                    "'%s' is used as both a species and a parameter" %
                    p.name)
            p.index = len(self.parameters)
            self.parameters.add(p)

        noise_name = _noise_parameter_name(trailing, noise_scaling)
        if noise_name is not None:
            if noise_name in self.species:
                raise DuplicateSymbolError(
                    "Noise scaling parameter '%s' is also a species" %
                    noise_name)
            if noise_name not in self.parameters:
                self.parameters.add(Parameter(noise_name, 1.0,
                                              index=len(self.parameters)))
            self.noise_parameter = self.parameters[noise_name]
            self.noise_parameter.is_noise_scaling = True
            self._log.debug('Noise scaling parameter: %s', noise_name)

        for p in self.parameters:
            if p.name not in used and p is not self.noise_parameter:
                self._log.warning("Parameter '%s' is not used by any "
                                  "reaction", p.name)

    def _make_jump(self, i, symbols):
        reaction = self.reactions[i]
        compiled = self._compiled[i]
        if compiled.depends_on_time:
            kind = VARIABLE_RATE
        elif reaction.mass_action and not resolve_rate_law(
                reaction.rate, symbols).depends_on_species():
            kind = MASS_ACTION
        else:
            kind = CONSTANT_RATE
        net_change = self.stoichiometries[i].net_change
        reactant_stoich = tuple((self.species.index(n), m)
                                for n, m in reaction.reactants.items())
        net_stoich = tuple((j, int(d)) for j, d in enumerate(net_change)
                           if d != 0)
        return Jump(i, reaction, compiled, net_change, kind, reactant_stoich,
                    net_stoich)

    @property
    def stoichiometry_matrix(self):
        """The net stoichiometry matrix (species x reactions)."""
        return self.net_stoichiometry

    def rates(self, y, p, t=0.0):
        """Evaluate the rate law of every reaction."""
        y = np.asarray(y, dtype=float)
        p = np.asarray(p, dtype=float)
        return np.array([c.fn(y, p, t) for c in self._compiled], dtype=float)

    def f(self, y, p, t=0.0):
        """Deterministic rate of change of every species."""
        return self.net_stoichiometry.dot(self.rates(y, p, t))

    def g(self, y, p, t=0.0):
        """
        Chemical Langevin diffusion amplitude of every reaction.

        Entry ``j`` is ``sqrt(rate_j)``, multiplied by the value of the noise
        scaling parameter when the network has one.
        """
        v = np.sqrt(self.rates(y, p, t))
        if self.noise_parameter is not None:
            v = v * np.asarray(p, dtype=float)[self.noise_parameter.index]
        return v

    def diffusion_matrix(self, y, p, t=0.0):
        """
        Noise matrix for SDE solvers (species x reactions).

        Entry ``(i, j)`` is the net change of species ``i`` in reaction ``j``
        times ``g(y, p, t)[j]``.
        """
        return self._net_dense * self.g(y, p, t)

    def parameter_vector(self, values=None):
        """
        Build a parameter vector in network order.

        Parameters
        ----------
        values : dict or sequence, optional
            A dict of parameter name to value overrides, or a full sequence
            of values in parameter order. Parameters not given take their
            default :attr:`pycrn.core.Parameter.value`.

        Returns
        -------
        numpy.ndarray of float
        """
        if values is not None and not isinstance(values, Mapping):
            values = np.asarray(values, dtype=float)
            if values.shape != (len(self.parameters), ):
                raise ValueError('Expected %d parameter values, got %d' %
                                 (len(self.parameters), values.size))
            return values
        values = values or {}
        unknown = [k for k in values if k not in self.parameters]
        if unknown:
            raise UnknownSymbolError('Unknown parameter(s): %s' %
                                     ', '.join(unknown))
        vector = []
        for p in self.parameters:
            value = values.get(p.name, p.value)
            if value is None or not isinstance(value, numbers.Real):
                raise ValueError("No numeric value for parameter '%s'" %
                                 p.name)
            vector.append(value)
        return np.array(vector, dtype=float)

    def _get_symbolic(self):
        if self._symbolic is None:
            self._symbolic = _SymbolicNetwork(self)
        return self._symbolic

    @property
    def odes(self):
        """Right-hand side of the ODE of each species, as sympy expressions
        over the Species and Parameter symbols and ``t``."""
        return self._get_symbolic().odes

    def jacobian(self, y, p, t=0.0):
        """Jacobian of :meth:`f` with respect to the species
        (species x species)."""
        return self._get_symbolic().jacobian(y, p, t)

    def parameter_jacobian(self, y, p, t=0.0):
        """Jacobian of :meth:`f` with respect to the parameters
        (species x parameters)."""
        return self._get_symbolic().parameter_jacobian(y, p, t)

    def __repr__(self):
        return ("<%s '%s' (species: %d, parameters: %d, reactions: %d) at "
                "0x%x>" % (self.__class__.__name__, self.name,
                           len(self.species), len(self.parameters),
                           len(self.reactions), id(self)))

    def __str__(self):
        lines = ['%s, %s' % (r.rate, _format_reaction(r))
                 for r in self.reactions]
        return '\n'.join(lines)


def _format_reaction(reaction):
    return '%s %s %s' % (format_multiplicities(reaction.reactants),
                         '-->' if reaction.mass_action else '=>',
                         format_multiplicities(reaction.products))


def _expand(reactions):
    for r in reactions:
        if isinstance(r, ReactionClause):
            for expanded in expand_clause(r):
                yield expanded
        else:
            yield r


def _noise_parameter_name(trailing, noise_scaling):
    if noise_scaling is not None and \
            not isinstance(noise_scaling, (bool, str)):
        raise ValueError('noise_scaling must be a bool, a string or None')
    if noise_scaling is False:
        return None
    if isinstance(noise_scaling, str):
        return noise_scaling
    if trailing is not None:
        return trailing
    if noise_scaling is True:
        return DEFAULT_NOISE_PARAMETER
    return None


class _SymbolicNetwork(object):
    """Symbolic rate laws and lambdified Jacobians of a network."""

    def __init__(self, network):
        n_species = len(network.species)
        n_parameters = len(network.parameters)
        self.y = sympy.MatrixSymbol('y', n_species, 1)
        self.p = sympy.MatrixSymbol('p', n_parameters, 1)
        self.t = sympy.Symbol(TIME_SYMBOL, real=True)
        y_elements = [self.y[i, 0] for i in range(n_species)]
        p_elements = [self.p[i, 0] for i in range(n_parameters)]
        self.kinetics = sympy.Matrix(len(network.reactions), 1, [
            law.as_sympy(y_elements, p_elements, self.t)
            for law in network.rate_laws
        ])
        self.net_stoichiometry = network.net_stoichiometry
        self.n_species = n_species
        self.n_parameters = n_parameters
        # Functions without a symbolic form stay sympy.Function calls;
        # lambdify looks their names up here
        self.modules = [{
            node.name: node.function.fn
            for law in network.rate_laws for node in law.walk()
            if isinstance(node, FunctionCall) and node.function is not None
        }, 'numpy']

        species = list(network.species)
        parameters = list(network.parameters)
        net = network.net_stoichiometry.toarray()
        laws = [law.as_sympy(species, parameters, self.t)
                for law in network.rate_laws]
        self.odes = [
            sympy.Add(*[int(net[i, j]) * laws[j]
                        for j in range(len(laws)) if net[i, j] != 0])
            for i in range(n_species)
        ]
        self._jacobian_y = None
        self._jacobian_p = None
        self._name = network.name
        self._log = network._log

    def _lambdify_jacobian(self, wrt):
        self._log.debug('Computing Jacobian matrix with respect to %s', wrt)
        jac = self.kinetics.jacobian(wrt)
        if jac.has(sympy.Derivative) or jac.has(sympy.Subs):
            raise ValueError('Network %s calls a rate function with no '
                             'symbolic form; register it with symbolic= to '
                             'compute Jacobians' % self._name)
        return sympy.lambdify([self.y, self.p, self.t], jac,
                              modules=self.modules)

    def jacobian(self, y, p, t):
        if self.n_species == 0:
            return np.zeros((0, 0))
        if self._jacobian_y is None:
            self._jacobian_y = self._lambdify_jacobian(self.y)
        y = np.asarray(y, dtype=float)
        p = np.asarray(p, dtype=float)
        jv = np.asarray(self._jacobian_y(y[:, None], p[:, None], t),
                        dtype=float)
        return self.net_stoichiometry.dot(jv)

    def parameter_jacobian(self, y, p, t):
        if self.n_species == 0 or self.n_parameters == 0:
            return np.zeros((self.n_species, self.n_parameters))
        if self._jacobian_p is None:
            self._jacobian_p = self._lambdify_jacobian(self.p)
        y = np.asarray(y, dtype=float)
        p = np.asarray(p, dtype=float)
        jv = np.asarray(self._jacobian_p(y[:, None], p[:, None], t),
                        dtype=float)
        return self.net_stoichiometry.dot(jv)


def reaction_network(text, parameters=None, name='network',
                     noise_scaling=None, log_level=None):
    """
    Parse reaction network text and assemble it.

    Parameter order is taken from ``parameters`` when given, otherwise from
    the names following ``end`` in the text, otherwise inferred. See
    :class:`ReactionNetwork` for the other arguments and
    :mod:`pycrn.grammar` for the text syntax.
    """
    definition = parse_network(text)
    if parameters is None:
        parameters = definition.parameters
    return ReactionNetwork(definition.clauses, parameters=parameters,
                           name=name, noise_scaling=noise_scaling,
                           log_level=log_level)
