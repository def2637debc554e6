"""
Workflow visualization module.
Layout, graph editing and graph <-> document conversion.
"""
from .graph_mapper import GraphMapper, export_workflow, import_workflow
from .graph_editor import GraphEditor
from .layout import (
    apply_layout,
    layout_positions,
    layout_missing,
    missing_positions,
    assign_ranks,
    order_ranks,
)
from .function_builder import build_task_function, parse_default_value

__all__ = [
    "GraphMapper",
    "GraphEditor",
    "export_workflow",
    "import_workflow",
    "apply_layout",
    "layout_positions",
    "layout_missing",
    "missing_positions",
    "assign_ranks",
    "order_ranks",
    "build_task_function",
    "parse_default_value",
]
