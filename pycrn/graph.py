"""
Graph views of a reaction network, as ``networkx.DiGraph`` objects.

Species nodes are named ``s0, s1, ...`` and reaction nodes ``r0, r1, ...``
after their index in the network, with the species or reaction name stored
in the ``label`` attribute.
"""

import networkx as nx

__all__ = ['reaction_graph', 'species_graph']


def reaction_graph(network):
    """
    Bipartite species/reaction graph.

    Reactants link to the reaction node and the reaction node links to its
    products, with the multiplicity in the ``stoichiometry`` edge attribute.
    A species that is both a reactant and a product of the same reaction (a
    modifier, e.g. a catalyst) gets a single edge into the reaction node with
    ``modifier=True``.

    Parameters
    ----------
    network : pycrn.network.ReactionNetwork

    Returns
    -------
    networkx.DiGraph
    """
    graph = nx.DiGraph(name=network.name)
    for s in network.species:
        graph.add_node('s%d' % s.index, label=s.name, bipartite=0)
    for i, reaction in enumerate(network.reactions):
        reaction_node = 'r%d' % i
        graph.add_node(reaction_node, label=str(network.rate_laws[i]),
                       bipartite=1, reversible=reaction.reversible)
        reactants = set(reaction.reactants)
        products = set(reaction.products)
        modifiers = reactants & products
        for name in reaction.species_names():
            species_node = 's%d' % network.species.index(name)
            if name in modifiers:
                graph.add_edge(species_node, reaction_node, modifier=True,
                               stoichiometry=reaction.reactants[name])
            elif name in reactants:
                graph.add_edge(species_node, reaction_node, modifier=False,
                               stoichiometry=reaction.reactants[name])
            else:
                graph.add_edge(reaction_node, species_node, modifier=False,
                               stoichiometry=reaction.products[name])
    return graph


def species_graph(network):
    """
    Species interaction graph.

    There is an edge from every reactant to every product of each reaction;
    the ``reactions`` edge attribute lists the indices of the reactions
    inducing it.

    Returns
    -------
    networkx.DiGraph
    """
    graph = nx.DiGraph(name=network.name)
    for s in network.species:
        graph.add_node('s%d' % s.index, label=s.name)
    for i, reaction in enumerate(network.reactions):
        for r in reaction.reactants:
            for p in reaction.products:
                u = 's%d' % network.species.index(r)
                v = 's%d' % network.species.index(p)
                if graph.has_edge(u, v):
                    graph[u][v]['reactions'].append(i)
                else:
                    graph.add_edge(u, v, reactions=[i])
    return graph
