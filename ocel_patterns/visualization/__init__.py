"""
Visualization support for mined patterns and causal models.

This module provides the topology side of visualization only:
- layout requests (nodes with size hints, edges) for an external layout engine
- Mermaid flowchart export for Markdown reports

Example usage:
    from ocel_patterns.visualization import MermaidGenerator, variant_topology

    request = variant_topology(variant.tokens)
    mermaid_code = MermaidGenerator().generate(request)
"""

from .topology import (
    LATENT_NODE_SIZE,
    OBSERVED_NODE_SIZE,
    VARIANT_NODE_SIZE,
    LayoutEdge,
    LayoutEngine,
    LayoutNode,
    LayoutRequest,
    causal_topology,
    request_layout,
    variant_topology,
)

from .mermaid import (
    MermaidGenerator,
    causal_diagram,
    variant_diagram,
)

__all__ = [
    # Topology
    "LATENT_NODE_SIZE",
    "OBSERVED_NODE_SIZE",
    "VARIANT_NODE_SIZE",
    "LayoutEdge",
    "LayoutEngine",
    "LayoutNode",
    "LayoutRequest",
    "causal_topology",
    "request_layout",
    "variant_topology",
    # Mermaid generation
    "MermaidGenerator",
    "causal_diagram",
    "variant_diagram",
]
