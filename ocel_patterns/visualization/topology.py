"""
Graph topology for the external layout collaborator.

The engine never draws anything. It hands a layout engine the node list
(with size hints) and the edge list of a variant or causal model; whatever
the engine returns is passed back untouched.

Variant graphs expand transaction tokens:
- "A-->B-->C(df_MAT_PLA)" becomes event nodes A_MAT_PLA, B_MAT_PLA, C_MAT_PLA
  with pairwise edges; GLOBAL steps keep their plain event name
- "A-->SUPPLIER(e2o)" becomes event node A_SUPPLIER -> object node SUPPLIER
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence

from ..causal.estimator import CausalModel
from ..features.transactions import DF_TAG_PREFIX, E2O_TAG, GLOBAL_SCOPE, parse_token

logger = logging.getLogger(__name__)

# Node size hints
VARIANT_NODE_SIZE = (92, 44)
LATENT_NODE_SIZE = (180, 80)
OBSERVED_NODE_SIZE = (140, 60)

# Layered left-to-right layout hints
DEFAULT_LAYOUT_OPTIONS = {
    "algorithm": "layered",
    "direction": "RIGHT",
    "spacing.nodeNodeBetweenLayers": "40",
    "spacing.nodeNode": "24",
    "edgeRouting": "ORTHOGONAL",
}


@dataclass
class LayoutNode:
    """A node with size hint; kind is event, object, latent or observed."""
    id: str
    width: float
    height: float
    label: str = ""
    kind: str = "event"

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'width': self.width,
            'height': self.height,
            'label': self.label,
            'kind': self.kind,
        }


@dataclass
class LayoutEdge:
    """A directed edge between two node ids."""
    id: str
    source: str
    target: str
    label: str = ""
    emphasized: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'source': self.source,
            'target': self.target,
            'label': self.label,
            'emphasized': self.emphasized,
        }


@dataclass
class LayoutRequest:
    """Topology handed to a layout engine."""
    nodes: List[LayoutNode] = field(default_factory=list)
    edges: List[LayoutEdge] = field(default_factory=list)
    options: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_LAYOUT_OPTIONS))

    def node(self, node_id: str) -> Optional[LayoutNode]:
        for n in self.nodes:
            if n.id == node_id:
                return n
        return None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'nodes': [n.to_dict() for n in self.nodes],
            'edges': [e.to_dict() for e in self.edges],
            'options': dict(self.options),
        }


class LayoutEngine(Protocol):
    """Anything that can position a LayoutRequest."""

    def layout(self, request: LayoutRequest) -> Any:
        ...


def request_layout(engine: LayoutEngine, request: LayoutRequest) -> Any:
    """
    Hand a topology to a layout engine.

    Layout failures are logged and yield None; they never reach the mining
    results.
    """
    try:
        return engine.layout(request)
    except Exception as e:
        logger.error(f"Layout engine failed for {len(request.nodes)} nodes: {e}")
        return None


def variant_topology(tokens: Sequence[str]) -> LayoutRequest:
    """
    Expand variant or pattern tokens into a layout request.

    Tokens that are not e2o or df tokens are skipped.
    """
    width, height = VARIANT_NODE_SIZE
    nodes: Dict[str, LayoutNode] = {}
    edges: List[LayoutEdge] = []

    def add_node(node_id: str, label: str, kind: str) -> None:
        nodes[node_id] = LayoutNode(id=node_id, width=width, height=height, label=label, kind=kind)

    for token in tokens:
        parsed = parse_token(token)
        if parsed is None:
            continue
        steps, tag = parsed

        if tag.startswith(DF_TAG_PREFIX):
            scope = tag[len(DF_TAG_PREFIX):]
            for i in range(len(steps) - 1):
                if scope == GLOBAL_SCOPE:
                    source, target = steps[i], steps[i + 1]
                else:
                    source, target = f"{steps[i]}_{scope}", f"{steps[i + 1]}_{scope}"
                add_node(source, steps[i], "event")
                add_node(target, steps[i + 1], "event")
                edges.append(LayoutEdge(
                    id=f"{token}#{i}",
                    source=source,
                    target=target,
                    label="" if scope == GLOBAL_SCOPE else scope,
                ))
        elif tag == E2O_TAG:
            if len(steps) != 2 or not steps[0] or not steps[1]:
                continue
            event_type, object_label = steps
            event_id = f"{event_type}_{object_label}"
            add_node(event_id, event_type, "event")
            add_node(object_label, object_label, "object")
            edges.append(LayoutEdge(id=token, source=event_id, target=object_label))

    return LayoutRequest(nodes=list(nodes.values()), edges=edges)


def causal_topology(model: CausalModel) -> LayoutRequest:
    """Layout request for a causal model; paths between hidden variables are dropped."""
    nodes = []
    for variable in model.variables:
        width, height = LATENT_NODE_SIZE if variable.is_latent else OBSERVED_NODE_SIZE
        nodes.append(LayoutNode(
            id=variable.id,
            width=width,
            height=height,
            label=variable.name,
            kind=variable.kind,
        ))

    present = {n.id for n in nodes}
    edges = [
        LayoutEdge(
            id=path.id,
            source=path.source,
            target=path.target,
            label=f"{path.coefficient:.2f}",
            emphasized=path.is_significant,
        )
        for path in model.paths
        if path.source in present and path.target in present
    ]
    return LayoutRequest(nodes=nodes, edges=edges)
