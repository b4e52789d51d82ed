import random
from typing import Dict, Tuple

import networkx as nx

from ..errors import ShapeMismatch


def _slot_map(network) -> Dict[int, Tuple[str, int]]:
    """Maps node ids to structurally comparable slots: ("input", k),
    ("hidden", k) or ("output", k), counted along the evaluation order."""
    slots = {}
    for k, nid in enumerate(network.input_nodes()):
        slots[nid] = ("input", k)
    for k, nid in enumerate(network.hidden_nodes()):
        slots[nid] = ("hidden", k)
    for k, nid in enumerate(network.output_nodes()):
        slots[nid] = ("output", k)
    return slots


def _connection_genes(network):
    slots = _slot_map(network)
    genes = {}
    for conn in network.connections.values():
        key = (slots[conn.in_node], slots[conn.out_node])
        genes[key] = {
            "weight": conn.weight,
            "gater": slots[conn.gater] if conn.gater is not None else None,
            "enabled": conn.enabled,
            "recurrent": conn.recurrent,
        }
    return genes


def cross_over(parent1, parent2, equal=False):
    """Performs crossover between two parent networks.

    Nodes are aligned by slot. Connections present in both parents are
    inherited from either one at random; the others come from the fitter
    parent, or from both when `equal` is set or the scores tie. The
    offspring's node order is re-derived from its forward connections, so
    it is feed-forward whatever order the parents used.
    """
    from .network import Network

    if parent1.input_size != parent2.input_size or parent1.output_size != parent2.output_size:
        raise ShapeMismatch("Parents don't have the same input/output sizes")

    score1 = parent1.score or 0.0
    score2 = parent2.score or 0.0
    hidden1 = parent1.hidden_nodes()
    hidden2 = parent2.hidden_nodes()

    if equal or score1 == score2:
        low, high = sorted((len(hidden1), len(hidden2)))
        num_hidden = random.randint(low, high)
    elif score1 > score2:
        num_hidden = len(hidden1)
    else:
        num_hidden = len(hidden2)

    child = Network(parent1.input_size, parent1.output_size, config=parent1.config, connected=False)
    child.dropout = parent1.dropout

    # Node genes, slot by slot
    slot_ids = {}
    for k, nid in enumerate(child.input_nodes()):
        slot_ids[("input", k)] = nid
    for k, nid in enumerate(child.output_nodes()):
        slot_ids[("output", k)] = nid
        source = parent1 if random.random() >= 0.5 else parent2
        gene = source.nodes[source.output_nodes()[k]]
        child.nodes[nid].bias = gene.bias
        child.nodes[nid].activation_type = gene.activation_type
    for k in range(num_hidden):
        options = [p.nodes[h[k]] for p, h in ((parent1, hidden1), (parent2, hidden2)) if k < len(h)]
        gene = random.choice(options)
        slot_ids[("hidden", k)] = child.add_node(gene.type, bias=gene.bias, activation_type=gene.activation_type)

    # Connection genes
    genes1 = _connection_genes(parent1)
    genes2 = _connection_genes(parent2)
    inherited = {}
    for key, gene in genes1.items():
        if key in genes2:
            inherited[key] = gene if random.random() >= 0.5 else genes2[key]
        elif score1 >= score2 or equal:
            inherited[key] = gene
    if score2 >= score1 or equal:
        for key, gene in genes2.items():
            if key not in genes1:
                inherited[key] = gene

    inherited = {
        (slot_ids[a], slot_ids[b]): gene for (a, b), gene in inherited.items()
        if a in slot_ids and b in slot_ids
    }

    # Re-derive the order: forward genes form a DAG, a gene closing a cycle
    # stays recurrent
    hidden_ids = [slot_ids[("hidden", k)] for k in range(num_hidden)]
    graph = nx.DiGraph()
    graph.add_nodes_from(hidden_ids)
    for (in_id, out_id), gene in sorted(inherited.items(), key=lambda item: item[1]["recurrent"]):
        if gene["recurrent"] or in_id == out_id:
            continue
        if in_id not in graph or out_id not in graph:
            continue
        if nx.has_path(graph, out_id, in_id):
            gene["recurrent"] = True
            continue
        graph.add_edge(in_id, out_id)

    rank = {nid: k for k, nid in enumerate(hidden_ids)}
    sorted_hidden = list(nx.lexicographical_topological_sort(graph, key=lambda nid: rank[nid]))
    child.order = child.input_nodes() + sorted_hidden + child.output_nodes()

    for (in_id, out_id), gene in inherited.items():
        cid = child.connect(in_id, out_id, gene["weight"])
        conn = child.connections[cid]
        conn.enabled = gene["enabled"]
        gater = gene["gater"]
        if gater is not None and gater in slot_ids and slot_ids[gater] not in (in_id, out_id):
            child.gate(slot_ids[gater], cid)

    return child
