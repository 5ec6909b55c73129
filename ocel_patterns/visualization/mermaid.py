"""
Mermaid flowchart export of variant and causal topologies.

Mermaid is a Markdown-based diagramming tool that renders in GitHub,
GitLab, and many documentation platforms, which makes it a convenient
text form of a layout request for reports.

Output example:
    ```mermaid
    flowchart LR
        n0(["Goods Receipt"])
        n1(["Goods Issue"])
        n0 -->|MAT_PLA| n1
    ```
"""

import logging
from typing import Dict, List, Optional

from .topology import LayoutRequest, causal_topology, variant_topology

logger = logging.getLogger(__name__)


class MermaidGenerator:
    """
    Renders a LayoutRequest as a Mermaid flowchart.

    Node shapes by kind:
    - event: stadium
    - object: subroutine box
    - latent: circle
    - observed: rectangle
    """

    NODE_SHAPES = {
        "event": ('(["', '"])'),
        "object": ('[["', '"]]'),
        "latent": ('(("', '"))'),
        "observed": ('["', '"]'),
    }

    EMPHASIS_STYLE = "stroke:#ef4444,stroke-width:3px"

    def __init__(self, direction: str = "LR"):
        """
        Initialize the Mermaid generator.

        Args:
            direction: Flow direction - 'LR' (left-right), 'TB' (top-bottom),
                      'RL' (right-left), 'BT' (bottom-top)
        """
        self.direction = direction

    def generate(self, request: LayoutRequest, title: Optional[str] = None) -> str:
        """
        Generate a Mermaid flowchart.

        Args:
            request: Topology to render
            title: Optional title for the diagram

        Returns:
            Mermaid markdown string
        """
        lines = self._header(title)

        if not request.nodes:
            logger.warning("No nodes to render")
            lines.append("    NoData([No pattern data available])")
            return "\n".join(lines)

        # Mermaid ids must be plain identifiers; labels keep the original names
        ids: Dict[str, str] = {}
        for i, node in enumerate(request.nodes):
            ids[node.id] = f"n{i}"
            opening, closing = self.NODE_SHAPES.get(node.kind, self.NODE_SHAPES["event"])
            lines.append(f"    n{i}{opening}{self._escape(node.label or node.id)}{closing}")

        lines.append("")

        styles: List[str] = []
        link_index = 0
        for edge in request.edges:
            if edge.source not in ids or edge.target not in ids:
                continue
            arrow = "==>" if edge.emphasized else "-->"
            if edge.label:
                lines.append(f"    {ids[edge.source]} {arrow}|{self._escape(edge.label)}| {ids[edge.target]}")
            else:
                lines.append(f"    {ids[edge.source]} {arrow} {ids[edge.target]}")
            if edge.emphasized:
                styles.append(f"    linkStyle {link_index} {self.EMPHASIS_STYLE}")
            link_index += 1

        if styles:
            lines.append("")
            lines.extend(styles)

        return "\n".join(lines)

    def generate_with_code_block(self, request: LayoutRequest, title: Optional[str] = None) -> str:
        """Generate the diagram wrapped in a markdown code block."""
        return f"```mermaid\n{self.generate(request, title=title)}\n```"

    def _header(self, title: Optional[str]) -> List[str]:
        lines = []
        if title:
            lines.append("---")
            lines.append(f"title: {title}")
            lines.append("---")
        lines.append(f"flowchart {self.direction}")
        return lines

    @staticmethod
    def _escape(text: str) -> str:
        return text.replace('"', "#quot;").replace("|", "#124;")


def variant_diagram(tokens, title: Optional[str] = None, direction: str = "LR") -> str:
    """Convenience function: Mermaid diagram of variant or pattern tokens."""
    return MermaidGenerator(direction=direction).generate(variant_topology(tokens), title=title)


def causal_diagram(model, title: Optional[str] = None, direction: str = "TB") -> str:
    """Convenience function: Mermaid diagram of a causal model."""
    return MermaidGenerator(direction=direction).generate(causal_topology(model), title=title)
