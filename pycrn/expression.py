"""
Rate expression trees.

Rate expressions are parsed into a small tree of immutable nodes:

- :class:`Constant` -- a literal number
- :class:`Name` -- a symbol not yet bound to the network tables
- :class:`SpeciesRef`, :class:`ParameterRef`, :class:`TimeRef` -- resolved
  references into the state vector, the parameter vector and time
- :class:`BinaryOp` -- ``+ - * / ^``
- :class:`FunctionCall` -- a call into the rate function registry

Parsing produces :class:`Name` nodes; the network assembler resolves them
with :meth:`RateExpression.resolve` once the species and parameter tables
are known, binding function calls to concrete registry entries at the same
time. Resolved trees are then compiled into closures of ``(y, p, t)`` with
:meth:`RateExpression.compile`, or converted into sympy expressions with
:meth:`RateExpression.as_sympy`.
"""

import numbers
import operator

import sympy

from pycrn.core import TIME_SYMBOL, UnknownSymbolError

_OPERATORS = {
    '+': operator.add,
    '-': operator.sub,
    '*': operator.mul,
    '/': operator.truediv,
    '^': operator.pow,
}

_PRECEDENCE = {'+': 1, '-': 1, '*': 2, '/': 2, '^': 4}


class RateExpression(object):
    """Base class for all expression tree nodes."""

    __slots__ = ()

    def children(self):
        return ()

    def walk(self):
        """Iterate over all nodes of the tree (pre-order)."""
        yield self
        for child in self.children():
            for node in child.walk():
                yield node

    def names(self):
        """Symbol names referenced by the expression, in order of first
        appearance."""
        names = []
        for node in self.walk():
            name = getattr(node, 'symbol_name', None)
            if name is not None and name not in names:
                names.append(name)
        return names

    def calls(self):
        """(name, arity) of every function call, in order of appearance."""
        return [(node.name, len(node.args)) for node in self.walk()
                if isinstance(node, FunctionCall)]

    def depends_on_time(self):
        return any(isinstance(node, TimeRef) for node in self.walk())

    def depends_on_species(self):
        return any(isinstance(node, SpeciesRef) for node in self.walk())

    def resolve(self, symbols, lookup):
        """
        Bind names and function calls to the network tables.

        Parameters
        ----------
        symbols : mapping of str to RateExpression
            Name to :class:`SpeciesRef`, :class:`ParameterRef` or
            :class:`TimeRef`.
        lookup : callable
            ``lookup(name, arity)`` returning a
            :class:`pycrn.functions.RateFunction`.

        Returns
        -------
        A new, fully resolved, RateExpression.
        """
        return self

    def compile(self):
        """Return a closure ``fn(y, p, t)`` evaluating the expression."""
        raise NotImplementedError

    def evaluate(self, y, p, t=0.0):
        return self.compile()(y, p, t)

    def as_sympy(self, species, parameters, time):
        """
        Convert a resolved expression into a sympy expression.

        Parameters
        ----------
        species, parameters : sequence of sympy.Symbol
            Symbols indexed like the state and parameter vectors.
        time : sympy.Symbol
            The time symbol.
        """
        raise NotImplementedError

    def _key(self):
        raise NotImplementedError

    def __eq__(self, other):
        if type(self) is not type(other):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self):
        return hash((type(self).__name__, self._key()))

    def __repr__(self):
        return '%s(%s)' % (self.__class__.__name__,
                           ', '.join(repr(k) for k in self._key()))

    def __str__(self):
        return self._format(0)

    def _format(self, precedence):
        raise NotImplementedError


class Constant(RateExpression):
    __slots__ = ('value', )

    def __init__(self, value):
        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise TypeError('Constant value must be a real number, got %r'
                            % (value, ))
        self.value = value

    def compile(self):
        value = self.value

        def constant(y, p, t):
            return value
        return constant

    def as_sympy(self, species, parameters, time):
        return sympy.sympify(self.value)

    def _key(self):
        return (self.value, )

    def _format(self, precedence):
        text = repr(self.value)
        if self.value < 0 and precedence > _PRECEDENCE['*']:
            return '(%s)' % text
        return text


class Name(RateExpression):
    """A symbol that has not been bound to a species or parameter yet."""
    __slots__ = ('symbol_name', )

    def __init__(self, name):
        self.symbol_name = name

    def resolve(self, symbols, lookup):
        try:
            return symbols[self.symbol_name]
        except KeyError:
            raise UnknownSymbolError(
                "Rate expression references unknown symbol '%s'" %
                self.symbol_name) from None

    def compile(self):
        raise ValueError("Cannot compile unresolved symbol '%s'" %
                         self.symbol_name)

    def as_sympy(self, species, parameters, time):
        return sympy.Symbol(self.symbol_name)

    def _key(self):
        return (self.symbol_name, )

    def _format(self, precedence):
        return self.symbol_name


class SpeciesRef(RateExpression):
    __slots__ = ('symbol_name', 'index')

    def __init__(self, name, index):
        self.symbol_name = name
        self.index = index

    def compile(self):
        i = self.index

        def species(y, p, t):
            return y[i]
        return species

    def as_sympy(self, species, parameters, time):
        return species[self.index]

    def _key(self):
        return (self.symbol_name, self.index)

    def _format(self, precedence):
        return self.symbol_name


class ParameterRef(RateExpression):
    __slots__ = ('symbol_name', 'index')

    def __init__(self, name, index):
        self.symbol_name = name
        self.index = index

    def compile(self):
        i = self.index

        def parameter(y, p, t):
            return p[i]
        return parameter

    def as_sympy(self, species, parameters, time):
        return parameters[self.index]

    def _key(self):
        return (self.symbol_name, self.index)

    def _format(self, precedence):
        return self.symbol_name


class TimeRef(RateExpression):
    __slots__ = ()
    symbol_name = TIME_SYMBOL

    def compile(self):
        def time(y, p, t):
            return t
        return time

    def as_sympy(self, species, parameters, time):
        return time

    def _key(self):
        return ()

    def _format(self, precedence):
        return TIME_SYMBOL


class BinaryOp(RateExpression):
    __slots__ = ('op', 'left', 'right')

    def __init__(self, op, left, right):
        if op not in _OPERATORS:
            raise ValueError('Unknown operator: %s' % op)
        self.op = op
        self.left = left
        self.right = right

    def children(self):
        return (self.left, self.right)

    def resolve(self, symbols, lookup):
        return BinaryOp(self.op, self.left.resolve(symbols, lookup),
                        self.right.resolve(symbols, lookup))

    def compile(self):
        fn = _OPERATORS[self.op]
        left = self.left.compile()
        right = self.right.compile()

        def binary_op(y, p, t):
            return fn(left(y, p, t), right(y, p, t))
        return binary_op

    def as_sympy(self, species, parameters, time):
        left = self.left.as_sympy(species, parameters, time)
        right = self.right.as_sympy(species, parameters, time)
        if self.op == '^':
            return sympy.Pow(left, right)
        return _OPERATORS[self.op](left, right)

    def _key(self):
        return (self.op, self.left, self.right)

    def _format(self, precedence):
        prec = _PRECEDENCE[self.op]
        if self.op == '^':
            left = self.left._format(prec + 1)
            right = self.right._format(prec)
        else:
            left = self.left._format(prec)
            right = self.right._format(prec + 1 if self.op in '-/' else prec)
        if self.op in '+-':
            text = '%s %s %s' % (left, self.op, right)
        else:
            text = '%s%s%s' % (left, self.op, right)
        return '(%s)' % text if prec < precedence else text


class FunctionCall(RateExpression):
    """
    A call to a registered rate function.

    ``function`` is None until the call is resolved, after which it holds
    the :class:`pycrn.functions.RateFunction` in effect at resolution time.
    """
    __slots__ = ('name', 'args', 'function')

    def __init__(self, name, args, function=None):
        self.name = name
        self.args = tuple(args)
        self.function = function

    def children(self):
        return self.args

    def resolve(self, symbols, lookup):
        return FunctionCall(self.name,
                            [a.resolve(symbols, lookup) for a in self.args],
                            lookup(self.name, len(self.args)))

    def compile(self):
        if self.function is None:
            raise ValueError("Cannot compile unresolved function call '%s'"
                             % self.name)
        fn = self.function.fn
        args = tuple(a.compile() for a in self.args)

        def function_call(y, p, t):
            return fn(*[a(y, p, t) for a in args])
        return function_call

    def as_sympy(self, species, parameters, time):
        args = [a.as_sympy(species, parameters, time) for a in self.args]
        if self.function is not None and self.function.symbolic is not None:
            return self.function.symbolic(*args)
        return sympy.Function(self.name)(*args)

    def _key(self):
        return (self.name, self.args)

    def _format(self, precedence):
        return '%s(%s)' % (self.name,
                           ', '.join(a._format(0) for a in self.args))


def as_expression(value):
    """Coerce a number, string or RateExpression to a RateExpression."""
    if isinstance(value, RateExpression):
        return value
    if isinstance(value, numbers.Real) and not isinstance(value, bool):
        return Constant(value)
    if isinstance(value, str):
        from pycrn.grammar import parse_expression
        return parse_expression(value)
    raise TypeError('Cannot convert %r to a rate expression' % (value, ))


def negate(expression):
    """Unary minus, folded into the constant for numeric literals."""
    if isinstance(expression, Constant):
        return Constant(-expression.value)
    return BinaryOp('*', Constant(-1), expression)
