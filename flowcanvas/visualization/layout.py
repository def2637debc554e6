"""
Layout Algorithms
Deterministic ranked layout for positioning workflow graph nodes
"""
from collections import deque
from typing import Dict, Iterable, List, Optional, Set, Tuple

from flowcanvas.core.config import get_settings
from flowcanvas.core.logging import get_logger
from flowcanvas.workflow.graph_builder import GraphNode, WorkflowGraph

logger = get_logger(__name__)


# ============================================================================
# LAYOUT CONSTANTS
# ============================================================================

# Node dimensions
NODE_WIDTH = 250
NODE_HEIGHT = 80
START_NODE_SIZE = 30

# Spacing
NODE_SPACING = 50      # between nodes of one rank
RANK_SPACING = 150     # between ranks

Position = Dict[str, float]


# ============================================================================
# RANKING
# ============================================================================

def assign_ranks(graph: WorkflowGraph) -> Dict[str, int]:
    """
    Rank every node by its longest-path distance from the start node

    Back edges found by a depth-first walk from the start node are ignored,
    so cyclic graphs still terminate. Nodes the start node cannot reach are
    placed on rank 0.

    Args:
        graph: Workflow graph

    Returns:
        Dictionary mapping node_id to rank
    """
    adj_list = _build_adjacency_list(graph)
    ranks = {node.id: 0 for node in graph.nodes}

    start = graph.start_node
    if start is None:
        return ranks

    reachable, back_edges = _find_back_edges(adj_list, start.id)

    in_degree = {node_id: 0 for node_id in reachable}
    for node_id in reachable:
        for neighbor in adj_list[node_id]:
            if (node_id, neighbor) not in back_edges:
                in_degree[neighbor] += 1

    queue = deque([start.id])
    while queue:
        current = queue.popleft()
        for neighbor in adj_list[current]:
            if (current, neighbor) in back_edges:
                continue
            ranks[neighbor] = max(ranks[neighbor], ranks[current] + 1)
            in_degree[neighbor] -= 1
            if in_degree[neighbor] == 0:
                queue.append(neighbor)

    return ranks


def _find_back_edges(
    adj_list: Dict[str, List[str]],
    root_id: str
) -> Tuple[Set[str], Set[Tuple[str, str]]]:
    """Iterative DFS returning the reachable set and the edges closing a cycle"""
    on_path = {root_id}
    seen = {root_id}
    back_edges: Set[Tuple[str, str]] = set()
    stack = [(root_id, iter(adj_list[root_id]))]

    while stack:
        node_id, children = stack[-1]
        for child in children:
            if child in on_path:
                back_edges.add((node_id, child))
            elif child not in seen:
                seen.add(child)
                on_path.add(child)
                stack.append((child, iter(adj_list[child])))
                break
        else:
            on_path.discard(node_id)
            stack.pop()

    return seen, back_edges


# ============================================================================
# CROSSING REDUCTION
# ============================================================================

def order_ranks(
    graph: WorkflowGraph,
    ranks: Dict[str, int],
    sweeps: Optional[int] = None
) -> List[List[str]]:
    """
    Order the nodes of each rank to reduce edge crossings

    Barycenter heuristic: alternate downward and upward sweeps, keeping the
    ordering with the fewest crossings seen. Starting order and tie-breaks
    are by node id so the result does not depend on list order.

    Args:
        graph: Workflow graph
        ranks: Rank per node id
        sweeps: Number of down+up sweep pairs (defaults to settings)

    Returns:
        List of layers, each layer an ordered list of node IDs
    """
    if sweeps is None:
        sweeps = get_settings().LAYOUT_CROSSING_SWEEPS

    layer_count = max(ranks.values(), default=0) + 1
    layers: List[List[str]] = [[] for _ in range(layer_count)]
    start_id = graph.start_node.id if graph.start_node else None
    for node_id in sorted(ranks, key=lambda n: (n != start_id, n)):
        layers[ranks[node_id]].append(node_id)

    down: Dict[str, List[str]] = {node_id: [] for node_id in ranks}
    up: Dict[str, List[str]] = {node_id: [] for node_id in ranks}
    for source, target in _layer_edges(graph, ranks):
        down[target].append(source)
        up[source].append(target)

    best = [list(layer) for layer in layers]
    best_crossings = count_crossings(best, up)

    for _ in range(sweeps):
        if best_crossings == 0:
            break
        for i in range(1, layer_count):
            layers[i] = _barycenter_order(layers[i], layers[i - 1], down)
        for i in range(layer_count - 2, -1, -1):
            layers[i] = _barycenter_order(layers[i], layers[i + 1], up)

        crossings = count_crossings(layers, up)
        if crossings < best_crossings:
            best = [list(layer) for layer in layers]
            best_crossings = crossings

    logger.debug(f"Rank ordering settled with {best_crossings} crossings")
    return best


def _layer_edges(graph: WorkflowGraph, ranks: Dict[str, int]) -> List[Tuple[str, str]]:
    """Distinct edges joining adjacent ranks, sorted"""
    pairs = {
        (edge.source, edge.target)
        for edge in graph.edges
        if edge.source in ranks
        and edge.target in ranks
        and ranks[edge.target] == ranks[edge.source] + 1
    }
    return sorted(pairs)


def _barycenter_order(
    layer: List[str],
    fixed_layer: List[str],
    neighbors: Dict[str, List[str]]
) -> List[str]:
    fixed_index = {node_id: i for i, node_id in enumerate(fixed_layer)}

    def sort_key(item: Tuple[int, str]):
        index, node_id = item
        placed = [fixed_index[n] for n in neighbors[node_id] if n in fixed_index]
        barycenter = sum(placed) / len(placed) if placed else float(index)
        return (barycenter, index, node_id)

    return [node_id for _, node_id in sorted(enumerate(layer), key=sort_key)]


def count_crossings(layers: List[List[str]], successors: Dict[str, List[str]]) -> int:
    """
    Count edge crossings between each pair of adjacent layers

    Args:
        layers: Ordered layers
        successors: Successor ids per node restricted to adjacent-rank edges

    Returns:
        Total number of crossings
    """
    total = 0
    for upper, lower in zip(layers, layers[1:]):
        lower_index = {node_id: i for i, node_id in enumerate(lower)}
        sequence = [
            lower_index[target]
            for source in upper
            for target in sorted(successors.get(source, []), key=lambda t: lower_index.get(t, -1))
            if target in lower_index
        ]
        total += _count_inversions(sequence)
    return total


def _count_inversions(values: List[int]) -> int:
    if len(values) < 2:
        return 0
    mid = len(values) // 2
    left, right = values[:mid], values[mid:]
    inversions = _count_inversions(left) + _count_inversions(right)
    left.sort()
    right.sort()
    j = 0
    for value in left:
        while j < len(right) and right[j] < value:
            j += 1
        inversions += j
    return inversions


# ============================================================================
# COORDINATES
# ============================================================================

def node_size(node: GraphNode) -> Tuple[float, float]:
    """Width and height of a node, honouring size hints"""
    default = START_NODE_SIZE if node.is_start else None
    width = node.width if node.width is not None else (default or NODE_WIDTH)
    height = node.height if node.height is not None else (default or NODE_HEIGHT)
    return float(width), float(height)


def _assign_coordinates(graph: WorkflowGraph, layers: List[List[str]]) -> Dict[str, Position]:
    nodes = graph.node_map()
    positions: Dict[str, Position] = {}
    row_top = 0.0

    for layer in layers:
        if not layer:
            continue
        sizes = [node_size(nodes[node_id]) for node_id in layer]
        row_height = max(height for _, height in sizes)
        row_width = sum(width for width, _ in sizes) + NODE_SPACING * (len(layer) - 1)

        cursor = -row_width / 2
        for node_id, (width, height) in zip(layer, sizes):
            positions[node_id] = {"x": cursor, "y": row_top + (row_height - height) / 2}
            cursor += width + NODE_SPACING

        row_top += row_height + RANK_SPACING

    return positions


# ============================================================================
# LAYOUT ENTRY POINTS
# ============================================================================

def layout_positions(graph: WorkflowGraph, sweeps: Optional[int] = None) -> Dict[str, Position]:
    """
    Calculate a full layout and return positions only

    Every node receives a position, including nodes that already have one.

    Args:
        graph: Workflow graph
        sweeps: Optional crossing-reduction sweep count

    Returns:
        Dictionary mapping node_id to top-left position {x, y}
    """
    ranks = assign_ranks(graph)
    layers = order_ranks(graph, ranks, sweeps)
    return _assign_coordinates(graph, layers)


def apply_layout(graph: WorkflowGraph) -> WorkflowGraph:
    """
    Auto-arrange every node of the graph in place

    Args:
        graph: Workflow graph

    Returns:
        Graph with positioned nodes
    """
    logger.info(f"Applying ranked layout to {len(graph.nodes)} nodes")

    positions = layout_positions(graph)
    for node in graph.nodes:
        node.position = dict(positions[node.id])

    return graph


def missing_positions(
    graph: WorkflowGraph,
    missing_ids: Optional[Iterable[str]] = None
) -> Dict[str, Position]:
    """
    Calculate positions for the nodes that lack one, without mutating the graph

    Missing nodes take their full-layout coordinates shifted by the mean
    offset between stored and computed positions of the fixed nodes, then
    move right until they no longer overlap another placed node. With no
    fixed node at all the full layout is returned for every node.

    Args:
        graph: Workflow graph
        missing_ids: Node IDs to place (defaults to nodes without a position)

    Returns:
        Dictionary mapping node_id to top-left position {x, y}
    """
    if missing_ids is None:
        missing = {node.id for node in graph.nodes if node.position is None}
    else:
        missing = set(missing_ids)

    targets = [node for node in graph.nodes if node.id in missing]
    if not targets:
        return {}

    computed = layout_positions(graph)
    fixed = [node for node in graph.nodes if node.id not in missing and node.position is not None]
    if not fixed:
        return computed

    logger.info(f"Placing {len(targets)} unpositioned nodes around {len(fixed)} fixed nodes")

    dx = sum(n.position["x"] - computed[n.id]["x"] for n in fixed) / len(fixed)
    dy = sum(n.position["y"] - computed[n.id]["y"] for n in fixed) / len(fixed)

    placed = [(n.position["x"], n.position["y"]) + node_size(n) for n in fixed]
    targets.sort(key=lambda n: (computed[n.id]["y"], computed[n.id]["x"], n.id))

    positions: Dict[str, Position] = {}
    for node in targets:
        width, height = node_size(node)
        x = computed[node.id]["x"] + dx
        y = computed[node.id]["y"] + dy
        while any(_overlaps((x, y, width, height), box) for box in placed):
            x += width + NODE_SPACING
        positions[node.id] = {"x": x, "y": y}
        placed.append((x, y, width, height))
        logger.debug(f"Placed node {node.id} at ({x}, {y})")

    return positions


def layout_missing(
    graph: WorkflowGraph,
    missing_ids: Optional[Iterable[str]] = None
) -> WorkflowGraph:
    """
    Position only the nodes that lack a position, holding the others fixed

    Args:
        graph: Workflow graph
        missing_ids: Node IDs to place (defaults to nodes without a position)

    Returns:
        Graph with every node positioned
    """
    positions = missing_positions(graph, missing_ids)
    for node in graph.nodes:
        if node.id in positions:
            node.position = dict(positions[node.id])

    return graph


# ============================================================================
# HELPER FUNCTIONS
# ============================================================================

def _build_adjacency_list(graph: WorkflowGraph) -> Dict[str, List[str]]:
    """
    Build adjacency list from graph edges

    Successors are de-duplicated, restricted to known nodes and sorted by id.

    Args:
        graph: Workflow graph

    Returns:
        Adjacency list
    """
    adj_list: Dict[str, Set[str]] = {node.id: set() for node in graph.nodes}

    for edge in graph.edges:
        if edge.source in adj_list and edge.target in adj_list:
            adj_list[edge.source].add(edge.target)

    return {node_id: sorted(targets) for node_id, targets in adj_list.items()}


def _overlaps(a: Tuple[float, float, float, float], b: Tuple[float, float, float, float]) -> bool:
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return ax < bx + bw and bx < ax + aw and ay < by + bh and by < ay + ah
