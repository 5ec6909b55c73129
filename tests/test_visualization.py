"""
Tests for layout topologies and Mermaid export.
"""

import pytest

from ocel_patterns.causal import CausalModel
from ocel_patterns.causal.estimator import CausalPath, CausalVariable
from ocel_patterns.visualization import (
    LATENT_NODE_SIZE,
    OBSERVED_NODE_SIZE,
    VARIANT_NODE_SIZE,
    LayoutEdge,
    LayoutNode,
    LayoutRequest,
    MermaidGenerator,
    causal_diagram,
    causal_topology,
    request_layout,
    variant_diagram,
    variant_topology,
)


@pytest.fixture
def variant_tokens():
    return [
        "Goods Receipt-->Goods Issue (Sale)(df_MAT_PLA)",
        "Goods Receipt-->SUPPLIER(e2o)",
        "not a token",
    ]


@pytest.fixture
def small_model():
    return CausalModel(
        domain="inventory",
        lead_type="MAT_PLA",
        variables=[
            CausalVariable(id="stock_health", name="Stock Health", kind="latent", category="performance"),
            CausalVariable(id="stockout_freq", name="Stock-out Frequency", kind="observed",
                           category="performance", mean=0.1, std_dev=0.05, value=0.1),
        ],
        paths=[
            CausalPath(id="path_sh_stockout_freq", source="stock_health", target="stockout_freq",
                       coefficient=0.8, is_significant=True, kind="loading"),
            CausalPath(id="path_sh_re", source="stock_health", target="repl_efficiency",
                       coefficient=0.1, is_significant=False, kind="structural"),
        ],
    )


class TestVariantTopology:
    """Tests for token expansion."""

    def test_nodes_and_edges(self, variant_tokens):
        request = variant_topology(variant_tokens)

        assert [n.id for n in request.nodes] == [
            "Goods Receipt_MAT_PLA",
            "Goods Issue (Sale)_MAT_PLA",
            "Goods Receipt_SUPPLIER",
            "SUPPLIER",
        ]
        assert len(request.edges) == 2
        assert request.edges[0].label == "MAT_PLA"
        assert request.node("SUPPLIER").kind == "object"

    def test_size_hints(self, variant_tokens):
        request = variant_topology(variant_tokens)

        for node in request.nodes:
            assert (node.width, node.height) == VARIANT_NODE_SIZE

    def test_global_steps_use_plain_names(self):
        request = variant_topology(["A-->B-->C(df_GLOBAL)"])

        assert [n.id for n in request.nodes] == ["A", "B", "C"]
        assert [(e.source, e.target) for e in request.edges] == [("A", "B"), ("B", "C")]
        assert all(e.label == "" for e in request.edges)

    def test_empty(self):
        request = variant_topology([])

        assert request.nodes == []
        assert request.to_dict()['options']['algorithm'] == "layered"


class TestCausalTopology:
    """Tests for causal model topology."""

    def test_sizes_and_emphasis(self, small_model):
        request = causal_topology(small_model)

        assert (request.node("stock_health").width, request.node("stock_health").height) == LATENT_NODE_SIZE
        assert (request.node("stockout_freq").width, request.node("stockout_freq").height) == OBSERVED_NODE_SIZE
        assert len(request.edges) == 1
        assert request.edges[0].emphasized
        assert request.edges[0].label == "0.80"


class TestRequestLayout:
    """Tests for the layout collaborator boundary."""

    def test_result_passed_through(self):
        class Engine:
            def layout(self, request):
                return {"positions": len(request.nodes)}

        request = LayoutRequest(nodes=[LayoutNode(id="a", width=1, height=1)])

        assert request_layout(Engine(), request) == {"positions": 1}

    def test_failure_yields_none(self):
        class BrokenEngine:
            def layout(self, request):
                raise RuntimeError("no layout today")

        assert request_layout(BrokenEngine(), LayoutRequest()) is None


class TestMermaidGenerator:
    """Tests for Mermaid flowchart output."""

    def test_variant_flowchart(self, variant_tokens):
        mermaid = MermaidGenerator().generate(variant_topology(variant_tokens))

        assert mermaid.startswith("flowchart LR")
        assert 'n0(["Goods Receipt"])' in mermaid
        assert 'n3[["SUPPLIER"]]' in mermaid
        assert "n0 -->|MAT_PLA| n1" in mermaid
        assert "n2 --> n3" in mermaid

    def test_empty_request(self):
        mermaid = MermaidGenerator().generate(LayoutRequest())

        assert "NoData" in mermaid

    def test_emphasized_edges(self, small_model):
        mermaid = causal_diagram(small_model)

        assert mermaid.startswith("flowchart TB")
        assert "n0 ==>|0.80| n1" in mermaid
        assert "linkStyle 0 stroke:#ef4444,stroke-width:3px" in mermaid
        assert 'n0(("Stock Health"))' in mermaid

    def test_quotes_escaped(self):
        request = LayoutRequest(nodes=[LayoutNode(id="q", width=1, height=1, label='say "hi"')])

        mermaid = MermaidGenerator().generate(request)

        assert "#quot;hi#quot;" in mermaid

    def test_pipes_escaped_in_edge_labels(self):
        request = LayoutRequest(
            nodes=[LayoutNode(id="a", width=1, height=1), LayoutNode(id="b", width=1, height=1)],
            edges=[LayoutEdge(id="e", source="a", target="b", label="A|B")],
        )

        mermaid = MermaidGenerator().generate(request)

        assert "n0 -->|A#124;B| n1" in mermaid

    def test_title_and_code_block(self):
        request = LayoutRequest(
            nodes=[LayoutNode(id="a", width=1, height=1), LayoutNode(id="b", width=1, height=1)],
            edges=[LayoutEdge(id="e", source="a", target="b")],
        )

        output = MermaidGenerator(direction="TB").generate_with_code_block(request, title="Demo")

        assert output.startswith("```mermaid\n---\ntitle: Demo\n---\nflowchart TB")
        assert output.endswith("```")

    def test_variant_diagram(self, variant_tokens):
        assert "flowchart LR" in variant_diagram(variant_tokens)
