"""
Report Generator for analysis snapshots.

Generates output in various formats:
- JSON for programmatic use
- Markdown for human reading, with Mermaid diagrams of the top variant and
  the causal model

Includes timestamp, version, and the configuration needed to reproduce the run.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List

from .. import __version__
from ..engine import AnalysisSnapshot
from ..visualization.mermaid import MermaidGenerator
from ..visualization.topology import causal_topology, variant_topology


class ReportGenerator:
    """
    Generates reports from analysis snapshots in various formats.
    """

    def __init__(
        self,
        output_format: str = "json",
        include_metadata: bool = True,
        include_diagrams: bool = True,
        max_rows: int = 20,
    ):
        """
        Initialize the report generator.

        Args:
            output_format: Output format ('json' or 'markdown')
            include_metadata: Include generation metadata
            include_diagrams: Embed Mermaid diagrams in Markdown output
            max_rows: Maximum rows per Markdown table
        """
        if output_format not in ("json", "markdown"):
            raise ValueError(f"Unsupported format: {output_format}. Use 'json' or 'markdown'.")
        self.output_format = output_format
        self.include_metadata = include_metadata
        self.include_diagrams = include_diagrams
        self.max_rows = max_rows

    def generate(self, snapshot: AnalysisSnapshot) -> str:
        """
        Generate a report from a snapshot.

        Args:
            snapshot: Result of engine.compute

        Returns:
            Formatted report string
        """
        if self.output_format == 'markdown':
            return self._generate_markdown(snapshot)
        return self._generate_json(snapshot)

    def _generate_json(self, snapshot: AnalysisSnapshot) -> str:
        """Generate JSON report."""
        report: Dict[str, Any] = {}
        if self.include_metadata:
            report['metadata'] = self._generate_metadata(snapshot)
        report['summary'] = self._generate_summary(snapshot)
        report.update(snapshot.to_dict())
        return json.dumps(report, indent=2, default=str)

    def _generate_markdown(self, snapshot: AnalysisSnapshot) -> str:
        """Generate Markdown report."""
        lines: List[str] = []
        summary = self._generate_summary(snapshot)

        lines.append("# OCEL Pattern Report")
        lines.append("")
        if self.include_metadata:
            metadata = self._generate_metadata(snapshot)
            lines.append(f"**Generated**: {metadata['generated_at']}")
            lines.append(f"**Version**: {metadata['version']}")
            lines.append("")

        lines.append("## Summary")
        lines.append("")
        lines.append(f"- **Lead Object Type**: {summary['lead_type']}")
        lines.append(f"- **Events / Objects**: {summary['n_events']} / {summary['n_objects']}")
        lines.append(f"- **Transactions**: {summary['n_transactions']}")
        lines.append(f"- **Frequent Patterns**: {summary['n_patterns']}")
        if summary['truncated']:
            lines.append("- **Note**: candidate cap reached, pattern list is partial")
        lines.append(f"- **Lifecycle Patterns**: {summary['n_lifecycle_patterns']}")
        lines.append(f"- **Variants**: {summary['n_variants']}")
        lines.append("")

        patterns = snapshot.patterns
        if patterns.patterns:
            lines.append("## Frequent Patterns")
            lines.append("")
            lines.append("| # | Support | Size | Items |")
            lines.append("|---|---------|------|-------|")
            for i, p in enumerate(patterns.patterns[:self.max_rows], 1):
                lines.append(f"| {i} | {p.support} | {p.size} | {'; '.join(p.items)} |")
            lines.append("")

        lifecycle = snapshot.lifecycle
        if lifecycle.patterns:
            lines.append("## Lifecycle Patterns")
            lines.append("")
            lines.append("| # | Support | Sequence |")
            lines.append("|---|---------|----------|")
            for i, p in enumerate(lifecycle.patterns[:self.max_rows], 1):
                lines.append(f"| {i} | {p.support} | {' → '.join(p.items)} |")
            lines.append("")

        if snapshot.variants:
            lines.append("## Variants")
            lines.append("")
            lines.append("| # | Instances | Signature |")
            lines.append("|---|-----------|-----------|")
            for i, v in enumerate(snapshot.variants[:self.max_rows], 1):
                signature = v.signature.replace("|", "\\|")
                lines.append(f"| {i} | {v.count} | {signature} |")
            lines.append("")
            if self.include_diagrams:
                diagram = MermaidGenerator().generate_with_code_block(
                    variant_topology(snapshot.variants[0].tokens)
                )
                lines.append("### Most Frequent Variant")
                lines.append("")
                lines.append(diagram)
                lines.append("")

        if snapshot.causal is not None:
            model = snapshot.causal.model
            lines.append("## Causal Model")
            lines.append("")
            lines.append(f"Domain: {model.domain}, instances: {snapshot.causal.table.n_instances}")
            lines.append("")
            lines.append("| Path | Coefficient | Significant |")
            lines.append("|------|-------------|-------------|")
            for path in model.paths:
                mark = "yes" if path.is_significant else "no"
                lines.append(f"| {path.source} → {path.target} | {path.coefficient:.3f} | {mark} |")
            lines.append("")
            if self.include_diagrams and model.variables:
                lines.append(MermaidGenerator(direction="TB").generate_with_code_block(
                    causal_topology(model)
                ))
                lines.append("")

        lines.append("## Appendix: Reproducibility")
        lines.append("")
        lines.append("### Parameters Used")
        lines.append("")
        for key, value in snapshot.config.to_dict().items():
            lines.append(f"- {key}: {value}")

        return '\n'.join(lines)

    def _generate_metadata(self, snapshot: AnalysisSnapshot) -> Dict[str, Any]:
        """Generate report metadata."""
        return {
            'generated_at': datetime.now(timezone.utc).isoformat(),
            'version': __version__,
            'lead_type': snapshot.lead_type,
        }

    def _generate_summary(self, snapshot: AnalysisSnapshot) -> Dict[str, Any]:
        """Generate summary statistics."""
        causal = snapshot.causal
        return {
            'lead_type': snapshot.lead_type,
            'n_events': snapshot.n_events,
            'n_objects': snapshot.n_objects,
            'n_transactions': snapshot.patterns.n_transactions,
            'n_patterns': len(snapshot.patterns.patterns),
            'truncated': snapshot.patterns.truncated,
            'n_lifecycle_patterns': len(snapshot.lifecycle.patterns),
            'n_variants': len(snapshot.variants),
            'n_significant_paths': len(causal.model.significant_paths()) if causal else 0,
        }


def generate_json_report(snapshot: AnalysisSnapshot, include_metadata: bool = True) -> str:
    """Convenience function to generate a JSON report."""
    return ReportGenerator(output_format="json", include_metadata=include_metadata).generate(snapshot)


def generate_markdown_report(snapshot: AnalysisSnapshot, include_diagrams: bool = True) -> str:
    """Convenience function to generate a Markdown report."""
    return ReportGenerator(output_format="markdown", include_diagrams=include_diagrams).generate(snapshot)
