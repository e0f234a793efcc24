"""Command line entry point: build reports and validate datasets."""

import json
import sys

import click

from .core.aggregator import DatasetAggregator
from .core.data_loader import DataLoader
from .core.validator import RecordValidator, summarize
from .utils.logging_config import setup_logging

KIND_DATASETS = {
    'part': 'parts',
    'bom': 'bom',
    'supplier': 'suppliers',
}


def _load(data_dir: str, strict: bool):
    try:
        return DataLoader(data_dir, strict=strict).load_all()
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.option('--log-level',
              type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR']),
              default='WARNING',
              help='Logging level')
@click.option('--log-format',
              type=click.Choice(['json', 'text']),
              default='json',
              help='Log record format')
def main(log_level: str, log_format: str):
    """ARCBOS Ops record validation and reporting."""
    setup_logging(level=log_level, format_type=log_format)


@main.command()
@click.argument('data_dir', type=click.Path(exists=True, file_okay=False))
@click.option('--as-of', default=None, help='Reference date for the change window (ISO-8601)')
@click.option('--window-days', type=int, default=7, help='Change window length in days')
@click.option('--strict', is_flag=True, help='Fail when a data file is missing')
def report(data_dir: str, as_of: str, window_days: int, strict: bool):
    """Print the dashboard report for DATA_DIR as JSON."""
    snapshot = _load(data_dir, strict)
    aggregator = DatasetAggregator(snapshot.build_index(), snapshot.rules)
    result = aggregator.build_report(as_of=as_of, window_days=window_days)
    click.echo(json.dumps(result, indent=2, default=str))


@main.command()
@click.argument('data_dir', type=click.Path(exists=True, file_okay=False))
@click.option('--kind', '-k',
              type=click.Choice(sorted(KIND_DATASETS)),
              default='part',
              help='Record kind to validate')
@click.option('--max', 'max_items', type=int, default=8, help='Maximum issues to print')
@click.option('--as-json', is_flag=True, help='Print issues as JSON')
@click.option('--strict', is_flag=True, help='Fail when a data file is missing')
def validate(data_dir: str, kind: str, max_items: int, as_json: bool, strict: bool):
    """Validate one dataset in DATA_DIR and print the most severe issues."""
    snapshot = _load(data_dir, strict)
    validator = RecordValidator(snapshot.rules, snapshot.build_index())
    records = getattr(snapshot, KIND_DATASETS[kind])
    result = validator.validate_batch(kind, records, batch_id=KIND_DATASETS[kind])
    top = summarize(result.issues, max_items)

    if as_json:
        click.echo(json.dumps({
            'totalRows': result.total_rows,
            'validRows': result.valid_rows,
            'qualityScore': result.quality_score,
            'issues': [i.to_dict() for i in top],
        }, indent=2))
        return

    click.echo(f"{result.valid_rows}/{result.total_rows} valid, "
               f"quality score {result.quality_score:.1f}/100")
    if not top:
        click.echo("No blocking issues detected")
    for issue in top:
        click.echo(f"{issue.title}\n    {issue.meta}")


if __name__ == "__main__":
    main()
