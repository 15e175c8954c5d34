__version__ = '0.1.0'

from pycrn.core import (
    Species, Parameter, Reaction, ComponentSet, ReactionNetworkError,
    ReactionSyntaxError, GroupingArityError, MissingReverseRateError,
    InvalidStoichiometryError, UnknownRateFunctionError, UnknownSymbolError,
    DuplicateSymbolError, InvalidComponentNameError,
    RateFunctionRedefinedWarning
)
from pycrn.functions import (
    register_rate_function, unregister_rate_function, get_rate_function,
    rate_functions, reset_rate_functions
)
from pycrn.grammar import parse_network, parse_reactions, parse_expression
from pycrn.network import ReactionNetwork, Jump, reaction_network

__all__ = ['Species', 'Parameter', 'Reaction', 'ComponentSet',
           'ReactionNetworkError', 'ReactionSyntaxError', 'GroupingArityError',
           'MissingReverseRateError', 'InvalidStoichiometryError',
           'UnknownRateFunctionError', 'UnknownSymbolError',
           'DuplicateSymbolError', 'InvalidComponentNameError',
           'RateFunctionRedefinedWarning', 'register_rate_function',
           'unregister_rate_function', 'get_rate_function', 'rate_functions',
           'reset_rate_functions', 'parse_network', 'parse_reactions',
           'parse_expression', 'ReactionNetwork', 'Jump', 'reaction_network']
