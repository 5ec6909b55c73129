"""
Main CLI entry point for the OCEL Pattern Engine.

Usage:
    ocel-patterns patterns --input log.json --lead-type MAT_PLA
    ocel-patterns lifecycle --input log.json --signature
    ocel-patterns causal --input log.json --domain inventory
    ocel-patterns generate --output synthetic.json --materials 30
    ocel-patterns run --input log.json --output-dir ./output --format both
"""

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Optional

import click
import numpy as np

from . import __version__
from .config import MiningConfig
from .context.event_context import EventContextAnalyzer
from .engine import (
    compute,
    compute_causal,
    compute_lifecycle,
    compute_patterns,
    compute_variants,
    resolve_lead_type,
)
from .errors import OCELFormatError
from .ocel.loader import load_ocel
from .ocel.models import OCELLog
from .report.generator import ReportGenerator
from .synthetic.config import GeneratorConfig
from .synthetic.generator import InventoryLogGenerator


def convert_for_json(obj: Any) -> Any:
    """Convert objects to JSON-serializable types, including numpy types."""
    if isinstance(obj, dict):
        return {str(k): convert_for_json(v) for k, v in obj.items()}
    elif isinstance(obj, (list, tuple)):
        return [convert_for_json(item) for item in obj]
    elif isinstance(obj, (np.integer,)):
        return int(obj)
    elif isinstance(obj, (np.floating,)):
        return float(obj)
    elif isinstance(obj, np.ndarray):
        return obj.tolist()
    elif isinstance(obj, np.bool_):
        return bool(obj)
    else:
        return obj


def _load_log(path: str) -> OCELLog:
    """Load a log or exit with the format problems on stderr."""
    click.echo(f"Loading {path}...")
    try:
        log = load_ocel(path)
    except OCELFormatError as e:
        click.echo(f"Error: {e}", err=True)
        for problem in e.problems[:20]:
            click.echo(f"  - {problem}", err=True)
        sys.exit(1)
    click.echo(f"Loaded {len(log.events)} events and {len(log.objects)} objects")
    return log


def _build_config(config_file: Optional[str], **options: Any) -> MiningConfig:
    """Config from an optional JSON file with explicit CLI options on top."""
    config = MiningConfig()
    if config_file:
        with open(config_file, 'r', encoding='utf-8') as f:
            config = MiningConfig.from_dict(json.load(f))
    changes = {key: value for key, value in options.items() if value is not None}
    config = config.with_overrides(**changes)
    for message in config.validate():
        click.echo(f"Warning: adjusted {message}", err=True)
    return config


def _emit(data: Dict[str, Any], output: Optional[str]) -> None:
    """Write a JSON result to a file, or print it."""
    text = json.dumps(convert_for_json(data), indent=2, default=str)
    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text)
        click.echo(f"Saved results to {output_path}")
    else:
        click.echo(text)


input_option = click.option('--input', '-i', 'input_path', required=True, type=click.Path(exists=True),
                            help='OCEL 2.0 JSON log')
output_option = click.option('--output', '-o', type=click.Path(), default=None,
                             help='Output JSON file (prints to stdout if omitted)')
lead_type_option = click.option('--lead-type', '-t', default=None,
                                help='Lead object type (falls back to the first type of the log)')
config_option = click.option('--config', '-c', 'config_file', type=click.Path(exists=True), default=None,
                             help='JSON file with MiningConfig fields')
status_option = click.option('--status', default=None,
                             help="Status segment to analyze ('All' disables segmentation)")


@click.group()
@click.version_option(version=__version__)
@click.option('--log-level', type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              default='WARNING', help='Logging verbosity')
def cli(log_level: str):
    """OCEL Pattern Engine

    Mines frequent structural patterns, lifecycle sequences and variants of
    a lead object type in an OCEL 2.0 log, and estimates a latent-variable
    model over per-instance indicators.
    """
    logging.basicConfig(
        level=getattr(logging, log_level),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )


@cli.command()
@input_option
@output_option
@lead_type_option
@config_option
@status_option
@click.option('--min-support', type=float, default=None, help='Minimum support in percent')
@click.option('--max-patterns', type=int, default=None, help='Maximum patterns reported')
@click.option('--max-candidates', type=int, default=None, help='Apriori candidate cap')
@click.option('--min-length', type=int, default=None, help='Minimum pattern size')
@click.option('--df-window', type=int, default=None, help='Directly-follows window size')
@click.option('--e2o/--no-e2o', default=None, help='Include event-to-object tokens')
@click.option('--marker', default=None, help='Problem marker activity')
@click.option('--prefilter/--no-prefilter', default=None,
              help='Keep only transactions containing the marker')
@click.option('--postfilter/--no-postfilter', default=None,
              help='Keep only patterns containing the marker')
def patterns(input_path: str, output: Optional[str], lead_type: Optional[str], config_file: Optional[str],
             status: Optional[str], min_support: Optional[float], max_patterns: Optional[int],
             max_candidates: Optional[int], min_length: Optional[int], df_window: Optional[int],
             e2o: Optional[bool], marker: Optional[str], prefilter: Optional[bool], postfilter: Optional[bool]):
    """Mine frequent structural patterns (Apriori, maximal itemsets)."""
    log = _load_log(input_path)
    config = _build_config(
        config_file,
        lead_object_type=lead_type,
        status=status,
        min_support_percent=min_support,
        max_patterns=max_patterns,
        max_candidates=max_candidates,
        min_pattern_length=min_length,
        df_window=df_window,
        include_e2o=e2o,
        problem_marker=marker,
        problem_prefilter=prefilter,
        problem_postfilter=postfilter,
    )

    analysis = compute_patterns(log, config)
    if analysis.lead_type is None:
        click.echo("Error: log has no object types", err=True)
        sys.exit(1)

    click.echo(f"Mined {analysis.n_transactions} transactions of '{analysis.lead_type}' "
               f"(min support {analysis.min_support})")
    if analysis.truncated:
        click.echo("Warning: candidate cap reached, results are partial", err=True)
    click.echo(f"Found {len(analysis.patterns)} maximal patterns")
    _emit(analysis.to_dict(), output)


@cli.command()
@input_option
@output_option
@lead_type_option
@config_option
@status_option
@click.option('--min-support', type=float, default=None, help='Minimum support in percent')
@click.option('--max-patterns', type=int, default=None, help='Maximum patterns reported')
@click.option('--signature/--no-signature', default=None,
              help='Annotate steps with related object types')
def lifecycle(input_path: str, output: Optional[str], lead_type: Optional[str], config_file: Optional[str],
              status: Optional[str], min_support: Optional[float], max_patterns: Optional[int],
              signature: Optional[bool]):
    """Mine sequential lifecycle patterns (PrefixSpan)."""
    log = _load_log(input_path)
    config = _build_config(
        config_file,
        lead_object_type=lead_type,
        status=status,
        sequence_min_support_percent=min_support,
        max_patterns=max_patterns,
        sequence_signature=signature,
    )

    analysis = compute_lifecycle(log, config)
    click.echo(f"Found {analysis.n_found} sequential patterns in {analysis.n_sequences} sequences "
               f"(min support {analysis.min_support})")
    _emit(analysis.to_dict(), output)


@cli.command()
@input_option
@output_option
@lead_type_option
@config_option
@status_option
@click.option('--source', type=click.Choice(['transactions', 'sequences']), default=None,
              help='Group by transaction tokens or by step sequences')
@click.option('--limit', type=int, default=None, help='Maximum variants reported')
def variants(input_path: str, output: Optional[str], lead_type: Optional[str], config_file: Optional[str],
             status: Optional[str], source: Optional[str], limit: Optional[int]):
    """Group lead instances into variants."""
    log = _load_log(input_path)
    config = _build_config(config_file, lead_object_type=lead_type, status=status, variant_source=source)

    found = compute_variants(log, config)
    click.echo(f"Found {len(found)} variants")
    if limit is not None:
        found = found[:max(0, limit)]
    _emit({
        'lead_type': resolve_lead_type(log, config),
        'n_variants': len(found),
        'variants': [v.to_dict() for v in found],
    }, output)


@cli.command()
@input_option
@output_option
@lead_type_option
@config_option
@click.option('--domain', type=click.Choice(['inventory', 'process']), default=None,
              help='Indicator and latent catalogue')
@click.option('--observed', multiple=True, help='Observed indicator ids to include (repeatable)')
@click.option('--latent', multiple=True, help='Latent variable ids to include (repeatable)')
def causal(input_path: str, output: Optional[str], lead_type: Optional[str], config_file: Optional[str],
           domain: Optional[str], observed: tuple, latent: tuple):
    """Estimate the correlation/latent-variable model."""
    log = _load_log(input_path)
    config = _build_config(
        config_file,
        lead_object_type=lead_type,
        domain=domain,
        selected_observed=tuple(observed) or None,
        selected_latent=tuple(latent) or None,
    )

    analysis = compute_causal(log, config)
    if analysis is None:
        click.echo("Error: log has no object types", err=True)
        sys.exit(1)

    significant = analysis.model.significant_paths()
    click.echo(f"Estimated {len(analysis.model.paths)} paths over {analysis.table.n_instances} instances "
               f"({len(significant)} significant)")
    _emit(analysis.to_dict(), output)


@cli.command()
@input_option
@output_option
@lead_type_option
@click.option('--activity', '-a', default=None, help='Activity to correlate context with')
@click.option('--window', '-w', 'windows', type=int, multiple=True,
              help='Window length in days (repeatable, default 14 and 28)')
@click.option('--scaled', is_flag=True, help='Report log-scaled correlations')
def context(input_path: str, output: Optional[str], lead_type: Optional[str], activity: Optional[str],
            windows: tuple, scaled: bool):
    """Correlate windowed event context with an activity."""
    log = _load_log(input_path)
    config = MiningConfig(lead_object_type=lead_type) if lead_type else MiningConfig()
    resolved = resolve_lead_type(log, config)
    if resolved is None:
        click.echo("Error: log has no object types", err=True)
        sys.exit(1)

    analyzer = EventContextAnalyzer(lead_type=resolved, windows_days=windows or (14, 28))
    result = analyzer.analyze(log, activity)
    click.echo(f"Correlated context of {result.n_events} events with '{result.activity}'")
    for window, feature, c in result.strongest(3):
        click.echo(f"  {window} {feature}: {c:+.3f}")

    data = result.to_dict()
    if scaled:
        data['scaled'] = result.scaled()
    _emit(data, output)


@cli.command()
@click.option('--output', '-o', required=True, type=click.Path(), help='Output OCEL JSON file')
@click.option('--seed', default=42, type=int, help='Random seed for reproducibility')
@click.option('--materials', default=20, type=int, help='Number of MAT_PLA objects')
@click.option('--suppliers', default=5, type=int, help='Number of suppliers')
@click.option('--days', default=180, type=int, help='Simulated days')
@click.option('--start-date', default='2024-01-01', help='First simulated day (YYYY-MM-DD)')
def generate(output: str, seed: int, materials: int, suppliers: int, days: int, start_date: str):
    """Generate a synthetic inventory OCEL log."""
    try:
        config = GeneratorConfig(
            seed=seed,
            num_materials=materials,
            num_suppliers=suppliers,
            num_days=days,
            start_date=start_date,
        )
    except ValueError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Generating {materials} materials over {days} days (seed {seed})...")
    generator = InventoryLogGenerator(config)
    log = generator.generate()
    output_path = generator.save(log, output)

    click.echo(f"  Goods issues: {generator.stats['goods_issues']}")
    click.echo(f"  Goods receipts: {generator.stats['goods_receipts']}")
    click.echo(f"  Status changes: {generator.stats['status_changes']}")
    click.echo(f"Wrote {len(log.events)} events to {output_path}")


@cli.command()
@input_option
@click.option('--output-dir', '-o', required=True, type=click.Path(), help='Directory for all outputs')
@click.option('--format', '-f', 'output_format', type=click.Choice(['json', 'markdown', 'both']),
              default='both', help='Output format for reports')
@lead_type_option
@config_option
@status_option
@click.option('--min-support', type=float, default=None, help='Pattern minimum support in percent')
@click.option('--domain', type=click.Choice(['inventory', 'process']), default=None,
              help='Indicator and latent catalogue')
def run(input_path: str, output_dir: str, output_format: str, lead_type: Optional[str],
        config_file: Optional[str], status: Optional[str], min_support: Optional[float],
        domain: Optional[str]):
    """Run every analysis and write the reports.

    Output files:
    - report.json - Complete snapshot in JSON format
    - report.md   - Human-readable report with Mermaid diagrams
    """
    output_path = Path(output_dir)
    output_path.mkdir(parents=True, exist_ok=True)

    click.echo("=" * 60)
    click.echo("OCEL Pattern Engine")
    click.echo("=" * 60)
    click.echo(f"Input: {input_path}")
    click.echo(f"Output: {output_path}")
    click.echo("=" * 60)

    log = _load_log(input_path)
    config = _build_config(
        config_file,
        lead_object_type=lead_type,
        status=status,
        min_support_percent=min_support,
        domain=domain,
    )

    click.echo("\nAnalyzing...")
    snapshot = compute(log, config)
    click.echo(f"  Lead type: {snapshot.lead_type}")
    click.echo(f"  Frequent patterns: {len(snapshot.patterns.patterns)}")
    click.echo(f"  Lifecycle patterns: {len(snapshot.lifecycle.patterns)}")
    click.echo(f"  Variants: {len(snapshot.variants)}")
    if snapshot.causal is not None:
        click.echo(f"  Significant paths: {len(snapshot.causal.model.significant_paths())}")

    click.echo("\nWriting output files...")
    if output_format in ('json', 'both'):
        with open(output_path / 'report.json', 'w', encoding='utf-8') as f:
            f.write(ReportGenerator(output_format='json').generate(snapshot))
        click.echo("  Wrote report.json")
    if output_format in ('markdown', 'both'):
        with open(output_path / 'report.md', 'w', encoding='utf-8') as f:
            f.write(ReportGenerator(output_format='markdown').generate(snapshot))
        click.echo("  Wrote report.md")

    click.echo("\n" + "=" * 60)
    click.echo("Pipeline complete!")
    click.echo("=" * 60)


def main():
    """Main entry point."""
    cli()


if __name__ == '__main__':
    main()
