"""
Tests for report generation.
"""

import json

import pytest

from ocel_patterns import __version__
from ocel_patterns.config import MiningConfig
from ocel_patterns.engine import compute
from ocel_patterns.ocel import OCELLog
from ocel_patterns.report import ReportGenerator, generate_json_report, generate_markdown_report


@pytest.fixture
def snapshot(sample_log):
    return compute(sample_log, MiningConfig())


class TestJsonReport:
    """Tests for JSON output."""

    def test_structure(self, snapshot):
        report = json.loads(generate_json_report(snapshot))

        assert report['metadata']['version'] == __version__
        assert report['summary']['lead_type'] == "MAT_PLA"
        assert report['summary']['n_patterns'] == 2
        assert report['patterns']['patterns'][0]['support'] == 2
        assert report['config']['lead_object_type'] == "MAT_PLA"
        assert report['causal']['n_instances'] == 3

    def test_without_metadata(self, snapshot):
        report = json.loads(generate_json_report(snapshot, include_metadata=False))

        assert 'metadata' not in report
        assert 'summary' in report

    def test_empty_log(self):
        report = json.loads(generate_json_report(compute(OCELLog())))

        assert report['lead_type'] is None
        assert report['causal'] is None
        assert report['summary']['n_significant_paths'] == 0


class TestMarkdownReport:
    """Tests for Markdown output."""

    def test_sections(self, snapshot):
        markdown = generate_markdown_report(snapshot)

        assert markdown.startswith("# OCEL Pattern Report")
        assert "## Frequent Patterns" in markdown
        assert "## Lifecycle Patterns" in markdown
        assert "## Variants" in markdown
        assert "## Causal Model" in markdown
        assert "### Parameters Used" in markdown
        assert "- min_support_percent: 10.0" in markdown

    def test_diagrams(self, snapshot):
        with_diagrams = generate_markdown_report(snapshot)
        without = generate_markdown_report(snapshot, include_diagrams=False)

        assert "```mermaid" in with_diagrams
        assert "```mermaid" not in without

    def test_variant_signature_pipes_escaped(self, snapshot):
        markdown = generate_markdown_report(snapshot)

        assert "\\|" in markdown

    def test_max_rows(self, snapshot):
        markdown = ReportGenerator(output_format="markdown", max_rows=1).generate(snapshot)

        assert "| 1 | 2 | 5 |" in markdown
        assert "| 2 | 1 | 8 |" not in markdown


class TestReportGenerator:
    """Tests for generator construction."""

    def test_invalid_format(self):
        with pytest.raises(ValueError):
            ReportGenerator(output_format="html")

    def test_default_is_json(self, snapshot):
        output = ReportGenerator().generate(snapshot)

        assert json.loads(output)['n_events'] == 8
