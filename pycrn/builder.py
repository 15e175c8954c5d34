"""
A wrapper class, ``Builder``, that facilitates the programmatic construction of
reaction networks.

Parameters and reactions are added by invoking the wrapper methods of the
class,

- :py:meth:`pycrn.builder.Builder.parameter`
- :py:meth:`pycrn.builder.Builder.reaction`
- :py:meth:`pycrn.builder.Builder.reactions`
- :py:meth:`pycrn.builder.Builder.noise_scaling`

and the compiled :class:`pycrn.network.ReactionNetwork` is assembled with
:py:meth:`pycrn.builder.Builder.network`. The builder implements
``__getitem__`` so that ``self['k1']`` returns the parameter with that name.

Creating custom network builders
--------------------------------

A useful application of the Builder class is to create subclasses that
implement motifs for combinatorial network building::

    class GeneBuilder(pycrn.builder.Builder):

        def expression_motif(self, gene, protein):
            k = self.parameter('k_%s' % protein, 10)
            d = self.parameter('d_%s' % protein, 0.1)
            self.reaction(k, {gene: 1}, {gene: 1, protein: 1})
            self.reaction(d, {protein: 1}, {})

Parameter values given when a parameter is declared can be overridden by name
through ``params_dict``, so the same builder can produce networks with
different default parameter vectors.
"""

from pycrn.core import Parameter, ComponentSet
from pycrn.expression import Name, as_expression
from pycrn.grammar import parse_network
from pycrn.network import ReactionNetwork
from pycrn.parser import as_arrow, expand_clause, ReactionClause, \
    SpeciesSum, BIDIRECTIONAL

__all__ = ['Builder']


class Builder(object):

    def __init__(self, params_dict=None, name='network'):
        """Base constructor for all network builder classes.

        Parameters
        ----------
        params_dict : dict
            The params_dict allows any parameter value to be overriden
            by name; any parameters not included in the dict will be set
            to default values. For example, if params_dict contains::

                {'k_deg': 1e-2}

            then the parameter k_deg will be assigned a value of 1e-2;
            all other parameters will take on default values. However,
            note that the parameter value given will be multiplied by any
            scaling factor passed in when the parameter is declared.
        name : string
            Name of the network to build.
        """
        self.name = name
        self.parameters = ComponentSet()
        """The parameters declared so far, in order."""
        self.reaction_list = []
        """The expanded reactions added so far, in order."""
        self.params_dict = params_dict
        """A dict of parameter values to override default values."""
        self._noise_scaling = None

    def parameter(self, name, value, factor=1):
        """Adds a parameter to the Builder's network.

        If the parameter with the given name is in the ``params_dict``, then
        the value in the ``params_dict`` is used to construct the parameter,
        and the argument ``value`` is ignored. In all cases the parameter
        value is multiplied by a scaling factor specified by the argument
        ``factor``, which allows unit conversions (e.g. between
        concentrations and copy numbers) while keeping the same nominal
        value.

        Parameters
        ----------
        name : string
            The name of the parameter to add
        value : number
            The value of the parameter
        factor : number
            A scaling factor to be applied to the parameter value.
        """
        if self.params_dict is not None and name in self.params_dict:
            param_val = self.params_dict[name] * factor
        else:
            param_val = value * factor

        p = Parameter(name, param_val, index=len(self.parameters))
        self.parameters.add(p)
        return p

    def reaction(self, rate, reactants, products, arrow='-->'):
        """Adds one reaction (or a pair, for bidirectional arrows).

        Parameters
        ----------
        rate : number, string, Parameter or RateExpression, or a pair of them
            The rate constant (or full rate for literal-rate arrows).
            Bidirectional arrows take a ``(forward, backward)`` pair.
        reactants, products : mapping of str to int
            Species name to multiplicity. Empty for the empty set.
        arrow : string
            Any reaction arrow glyph, e.g. ``'-->'``, ``'<-->'`` or ``'=>'``.

        Returns
        -------
        list of pycrn.core.Reaction
            The reactions added.
        """
        arrow = as_arrow(arrow)
        if arrow.direction == BIDIRECTIONAL and isinstance(rate, (tuple,
                                                                 list)):
            rate = tuple(_rate_expression(r) for r in rate)
        else:
            rate = _rate_expression(rate)
        clause = ReactionClause(rate, arrow, _species_sum(reactants),
                                _species_sum(products))
        reactions = expand_clause(clause)
        self.reaction_list.extend(reactions)
        return reactions

    def reactions(self, text):
        """Adds the reactions in a block of reaction network text.

        Parameter names declared after ``end`` that have not been declared
        with :py:meth:`parameter` are added without a value.
        """
        definition = parse_network(text)
        added = []
        for clause in definition.clauses:
            added.extend(expand_clause(clause))
        for name in definition.parameters or ():
            if name not in self.parameters:
                self.parameters.add(Parameter(name,
                                              index=len(self.parameters)))
        self.reaction_list.extend(added)
        return added

    def noise_scaling(self, name=True):
        """Sets the noise scaling parameter (see
        :class:`pycrn.network.ReactionNetwork`)."""
        self._noise_scaling = name

    def network(self, **kwargs):
        """Assembles the network from the components added so far."""
        parameters = list(self.parameters) if self.parameters else None
        kwargs.setdefault('name', self.name)
        kwargs.setdefault('noise_scaling', self._noise_scaling)
        return ReactionNetwork(self.reaction_list, parameters=parameters,
                               **kwargs)

    def __getitem__(self, index):
        """Returns the parameter with the given name."""
        return self.parameters[index]


def _rate_expression(rate):
    if isinstance(rate, Parameter):
        return Name(rate.name)
    return as_expression(rate)


def _species_sum(mapping):
    return SpeciesSum([(m, name) for name, m in mapping.items()])
