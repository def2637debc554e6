"""
flowcanvas - structural core of a visual workflow editor.

Graph model, deterministic layout, graph <-> document serialization and
validation for directed task pipelines.
"""
from flowcanvas.schemas.models import Task, WorkflowDocument, NodePosition
from flowcanvas.workflow.graph_builder import GraphNode, GraphEdge, WorkflowGraph, create_graph
from flowcanvas.visualization.layout import apply_layout, layout_positions, layout_missing
from flowcanvas.visualization.graph_mapper import export_workflow, import_workflow
from flowcanvas.validator import validate_workflow, has_errors, Finding

__version__ = "1.0.0"

__all__ = [
    "Task",
    "WorkflowDocument",
    "NodePosition",
    "GraphNode",
    "GraphEdge",
    "WorkflowGraph",
    "create_graph",
    "apply_layout",
    "layout_positions",
    "layout_missing",
    "export_workflow",
    "import_workflow",
    "validate_workflow",
    "has_errors",
    "Finding",
]
