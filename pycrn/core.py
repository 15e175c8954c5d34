import re
import types
from collections.abc import Mapping, Sequence, Set

import sympy

TIME_SYMBOL = 't'
DEFAULT_NOISE_PARAMETER = 'noise_scaling'


class Symbol(sympy.Dummy):
    def __new__(cls, name, real=True, **kwargs):
        return super(Symbol, cls).__new__(cls, name, real=real, **kwargs)

    def _lambdacode(self, printer, **kwargs):
        """ custom printer method that ensures that the dummyid is not
        appended when printing code """
        return self.name


class Component(object):

    """
    The base class for all the named things contained within a network.

    Parameters
    ----------
    name : string
        Name of the component. Must be a valid identifier, unique within the
        containing network, and must not be the reserved time symbol.

    Attributes
    ----------
    name : string
        Name of the component.
    index : int or None
        Position of the component in its network table (None until the
        component is placed in a network).

    """

    def __init__(self, name, index=None):
        if not valid_name(name):
            raise InvalidComponentNameError(name)
        self.name = name
        self.index = index


def valid_name(name):
    """Return True if ``name`` can be used for a species or parameter."""
    return isinstance(name, str) and name.isidentifier() and \
        name != TIME_SYMBOL


class Species(Component, Symbol):

    """
    Network component representing a chemical species.

    Species are created by the network assembler in order of first
    appearance across all reactions, so ``index`` is the position of the
    species in the state vector of every generated function.

    """

    def __new__(cls, name, index=None):
        return super(Species, cls).__new__(cls, name, real=True)

    def __init__(self, name, index=None):
        Component.__init__(self, name, index)

    def __repr__(self):
        return '%s(%s, %s)' % (self.__class__.__name__, repr(self.name),
                               repr(self.index))

    def __str__(self):
        return repr(self)


class Parameter(Component, Symbol):

    """
    Network component representing a named rate parameter.

    The value of a parameter is normally supplied at call time through the
    parameter vector; ``value`` is only a default used by
    :meth:`pycrn.network.ReactionNetwork.parameter_vector`.

    Parameters
    ----------
    value : number, optional
        Default numerical value. None (default) means the value must be
        supplied explicitly.
    is_noise_scaling : bool, optional
        Marks the parameter that scales the diffusion term of the network.

    """

    def __new__(cls, name, value=None, index=None, is_noise_scaling=False):
        return super(Parameter, cls).__new__(cls, name, real=True)

    def __init__(self, name, value=None, index=None, is_noise_scaling=False):
        self.value = value
        self.is_noise_scaling = is_noise_scaling
        Component.__init__(self, name, index)

    @property
    def value(self):
        return self._value

    @value.setter
    def value(self, new_value):
        self._value = None if new_value is None else float(new_value)

    def __repr__(self):
        ret = '%s(%s, %s' % (self.__class__.__name__, repr(self.name),
                             repr(self.value))
        if self.is_noise_scaling:
            ret += ', is_noise_scaling=True'
        return ret + ')'

    def __str__(self):
        return repr(self)


class Reaction(object):

    """
    A single irreversible reaction, as produced by clause expansion.

    Reversible and grouped shorthand is expanded before reactions are
    created, so every Reaction has exactly one direction and one rate.

    Parameters
    ----------
    reactants, products : mapping of str to int
        Species name to multiplicity. Zero entries are dropped; all others
        must be positive integers.
    rate : pycrn.expression.RateExpression
        The rate as written in the reaction clause. For mass-action
        reactions this is the rate constant; otherwise it is the full rate.
    mass_action : bool, optional
        If True (default), the rate law is inferred by mass action.
    reversible : bool, optional
        True if the reaction came from a bidirectional clause. For
        traceability only; it has no effect on the generated functions.
    line : int, optional
        Source line of the clause the reaction was expanded from.

    """

    def __init__(self, reactants, products, rate, mass_action=True,
                 reversible=False, line=None):
        self._reactants = types.MappingProxyType(
            _clean_multiplicities(reactants))
        self._products = types.MappingProxyType(
            _clean_multiplicities(products))
        self._rate = rate
        self._mass_action = bool(mass_action)
        self._reversible = bool(reversible)
        self._line = line

    reactants = property(lambda self: self._reactants)
    products = property(lambda self: self._products)
    rate = property(lambda self: self._rate)
    mass_action = property(lambda self: self._mass_action)
    reversible = property(lambda self: self._reversible)
    line = property(lambda self: self._line)

    def species_names(self):
        """Species names in order of appearance (reactants, then
        products)."""
        names = list(self.reactants)
        names.extend(n for n in self.products if n not in self.reactants)
        return names

    def is_synth(self):
        """Return a bool indicating whether this is a synthesis reaction."""
        return not self.reactants

    def is_deg(self):
        """Return a bool indicating whether this is a degradation reaction."""
        return not self.products

    def __eq__(self, other):
        if not isinstance(other, Reaction):
            return NotImplemented
        return (dict(self.reactants) == dict(other.reactants) and
                dict(self.products) == dict(other.products) and
                self.rate == other.rate and
                self.mass_action == other.mass_action)

    def __hash__(self):
        return hash((tuple(sorted(self.reactants.items())),
                     tuple(sorted(self.products.items())),
                     self.rate, self.mass_action))

    def __repr__(self):
        arrow = '-->' if self.mass_action else '=>'
        return '%s(%s %s %s, %s)' % (
            self.__class__.__name__, format_multiplicities(self.reactants),
            arrow, format_multiplicities(self.products), self.rate)


def _clean_multiplicities(mapping):
    cleaned = {}
    for name, count in mapping.items():
        if count == 0:
            continue
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise InvalidStoichiometryError(
                'Multiplicity of %s must be a positive integer, got %r' %
                (name, count))
        cleaned[name] = count
    return cleaned


def format_multiplicities(mapping):
    """Render a multiplicity mapping as a species sum, e.g. '2*X + Y'."""
    if not mapping:
        return '∅'
    return ' + '.join(name if count == 1 else '%d*%s' % (count, name)
                      for name, count in mapping.items())


class ReactionNetworkError(ValueError):
    """Base class for errors in a reaction network definition."""
    pass

class ReactionSyntaxError(ReactionNetworkError):
    """Malformed reaction network text."""
    def __init__(self, message, line=None):
        if line is not None:
            message = 'Line %d: %s' % (line, message)
        ReactionNetworkError.__init__(self, message)
        self.line = line

class GroupingArityError(ReactionNetworkError):
    """Grouped (tuple) shorthand with mismatched lengths."""
    pass

class MissingReverseRateError(ReactionNetworkError):
    """Bidirectional arrow with only one rate supplied."""
    pass

class InvalidStoichiometryError(ReactionNetworkError):
    """Stoichiometric coefficient that is not a positive integer."""
    pass

class UnknownRateFunctionError(ReactionNetworkError):
    """Rate expression calls an unregistered function name or arity."""
    pass

class UnknownSymbolError(ReactionNetworkError):
    """Rate expression references a name absent from the network tables."""
    pass

class DuplicateSymbolError(ReactionNetworkError):
    """A name is declared twice or used both as species and parameter."""
    pass

class InvalidComponentNameError(ReactionNetworkError):
    """Inappropriate component name."""
    def __init__(self, name):
        ReactionNetworkError.__init__(
            self, "Not a valid component name: '%s'" % (name, ))

class RateFunctionRedefinedWarning(UserWarning):
    """A rate function registration overwrote an existing one."""
    pass


class ComponentSet(Set, Mapping, Sequence):
    """
    An add-and-read-only container for storing network Components.

    It behaves mostly like an ordered set, but components can also be retrieved
    by name *or* index by using the [] operator (like a combination of a dict
    and a list). Components cannot be removed or replaced. Iteration returns
    the component objects.

    Parameters
    ----------
    iterable : iterable of Components, optional
        Initial contents of the set.

    """

    # The implementation is based on a list instead of a linked list (as
    # OrderedSet is), since we only allow add and retrieve, not delete.

    def __init__(self, iterable=None):
        self._elements = []
        self._map = {}
        self._index_map = {}
        if iterable is not None:
            for value in iterable:
                self.add(value)

    def __iter__(self):
        return iter(self._elements)

    def __contains__(self, c):
        if isinstance(c, str):
            return c in self._map
        if not isinstance(c, Component):
            raise TypeError("Can only work with Components, got a %s" % type(c))
        return c.name in self._map and self[c.name] is c

    def __len__(self):
        return len(self._elements)

    def add(self, c):
        if c not in self:
            if c.name in self._map:
                raise DuplicateSymbolError(
                    "Tried to add a component with a duplicate name: %s"
                    % c.name)
            self._elements.append(c)
            self._map[c.name] = c
            self._index_map[c.name] = len(self._elements) - 1

    def __getitem__(self, key):
        # Must support both Sequence and Mapping behavior. Component names
        # are identifiers, so integer keys are never ambiguous.
        if isinstance(key, (int, slice)):
            return self._elements[key]
        else:
            return self._map[key]

    def __getattr__(self, name):
        if name.startswith('_'):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError("Network has no component '%s'" % name)

    def get(self, key, default=None):
        if isinstance(key, int):
            raise ValueError("get is undefined for integer arguments, use []"
                             "instead")
        try:
            return self[key]
        except KeyError:
            return default

    def filter(self, filter_predicate):
        """
        Filter a ComponentSet using a predicate

        Parameters
        ----------
        filter_predicate: callable
            Called with a single Component, returns a bool indicating a
            match.

        Returns
        -------
        ComponentSet
            A ComponentSet containing Components matching the predicate

        Examples
        --------

        >>> from pycrn import reaction_network
        >>> rn = reaction_network('c1, X --> 2X\\nc2, X --> 0')
        >>> rn.parameters.filter(lambda c: c.name.endswith('2'))
        ComponentSet([
         Parameter('c2', None),
         ])

        """
        return ComponentSet(filter(filter_predicate, self))

    def keys(self):
        return [c.name for c in self]

    def values(self):
        return [c for c in self]

    def items(self):
        return list(zip(self.keys(), self))

    def index(self, c):
        # O(1) lookup, where the Sequence mixin implementation is O(n).
        if isinstance(c, str):
            return self._index_map[c]
        if not c in self:
            raise ValueError("%s is not in ComponentSet" % c)
        return self._index_map[c.name]

    def __and__(self, other):
        # collections.Set's __and__ mixin iterates over other, not self; keep
        # the ordering of self instead.
        if not isinstance(other, ComponentSet):
            return Set.__and__(self, other)
        return ComponentSet(value for value in self if value in other)

    def __repr__(self):
        return 'ComponentSet([\n' + \
            ''.join(' %s,\n' % repr(x) for x in self) + \
            ' ])'
