"""
Graph Model
Flat node/edge representation of a workflow as the editing surface sees it
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from flowcanvas.core.constants import NodeType, START_NODE_ID
from flowcanvas.schemas.models import Task


# ============================================================================
# GRAPH STRUCTURES
# ============================================================================

@dataclass
class GraphNode:
    """
    Graph node representing a task or the workflow entry

    Attributes:
        id: Unique node ID (equal to the task id for task nodes)
        type: Node type (start or task)
        task: Task backing the node; None for the start node
        position: Optional top-left position {x, y}
        width: Optional size hint used by the layout engine
        height: Optional size hint used by the layout engine
    """
    id: str
    type: NodeType = NodeType.TASK
    task: Optional[Task] = None
    position: Optional[Dict[str, float]] = None
    width: Optional[float] = None
    height: Optional[float] = None

    @property
    def is_start(self) -> bool:
        return self.type == NodeType.START

    @property
    def label(self) -> str:
        if self.is_start:
            return "Start"
        return self.task.display_name if self.task else self.id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = {
            "id": self.id,
            "type": self.type.value,
            "label": self.label,
        }
        if self.task is not None:
            result["data"] = {"task": self.task.to_dict()}
        if self.position:
            result["position"] = dict(self.position)
        return result


def edge_id_for(source: str, target: str) -> str:
    """Canonical edge id for a source/target pair"""
    return f"edge-{source}-{target}"


@dataclass
class GraphEdge:
    """
    Graph edge: ``target`` runs after ``source``

    Attributes:
        id: Unique edge ID
        source: Source node ID
        target: Target node ID
    """
    id: str
    source: str
    target: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
        }


@dataclass
class WorkflowGraph:
    """
    Complete workflow graph

    Node and edge lists carry no ordering guarantee. Cycles and duplicate
    edges are representable; the serializer and validator deal with them.

    Attributes:
        nodes: List of graph nodes
        edges: List of graph edges
        metadata: Graph metadata (workflow id and name)
    """
    nodes: List[GraphNode] = field(default_factory=list)
    edges: List[GraphEdge] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # identity lookups
    # ------------------------------------------------------------------

    def get_node(self, node_id: str) -> Optional[GraphNode]:
        """Get node by ID"""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def node_map(self) -> Dict[str, GraphNode]:
        return {node.id: node for node in self.nodes}

    def get_edge(self, edge_id: str) -> Optional[GraphEdge]:
        """Get edge by ID"""
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None

    def has_edge(self, source: str, target: str) -> bool:
        return any(e.source == source and e.target == target for e in self.edges)

    @property
    def start_node(self) -> Optional[GraphNode]:
        for node in self.nodes:
            if node.is_start:
                return node
        return None

    @property
    def start_node_id(self) -> str:
        start = self.start_node
        return start.id if start else START_NODE_ID

    def task_nodes(self) -> List[GraphNode]:
        """All non-start nodes"""
        return [node for node in self.nodes if not node.is_start]

    # ------------------------------------------------------------------
    # adjacency lookups
    # ------------------------------------------------------------------

    def adjacency(self) -> Dict[str, List[str]]:
        """Successor lists keyed by every node id (edge order preserved)"""
        adj_list: Dict[str, List[str]] = {node.id: [] for node in self.nodes}
        for edge in self.edges:
            if edge.source in adj_list:
                adj_list[edge.source].append(edge.target)
        return adj_list

    def predecessors(self) -> Dict[str, List[str]]:
        """Predecessor lists keyed by every node id"""
        preds: Dict[str, List[str]] = {node.id: [] for node in self.nodes}
        for edge in self.edges:
            preds.setdefault(edge.target, []).append(edge.source)
        return preds

    def children_of(self, node_id: str) -> List[str]:
        return [edge.target for edge in self.edges if edge.source == node_id]

    def parents_of(self, node_id: str) -> List[str]:
        return [edge.source for edge in self.edges if edge.target == node_id]

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
            "metadata": self.metadata,
        }


# ============================================================================
# CONSTRUCTION
# ============================================================================

def make_start_node(position: Optional[Dict[str, float]] = None) -> GraphNode:
    return GraphNode(id=START_NODE_ID, type=NodeType.START, position=position)


def make_task_node(task: Task, position: Optional[Dict[str, float]] = None) -> GraphNode:
    """Wrap a task in a graph node; children never live on the node's task"""
    return GraphNode(id=task.id, type=NodeType.TASK, task=task.without_children(), position=position)


def create_graph(workflow_id: str = "", workflow_name: str = "") -> WorkflowGraph:
    """Create an empty graph holding only the start node"""
    return WorkflowGraph(
        nodes=[make_start_node()],
        edges=[],
        metadata={"workflow_id": workflow_id, "workflow_name": workflow_name},
    )
