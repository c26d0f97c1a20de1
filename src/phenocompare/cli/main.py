"""Main CLI entry point for PhenoCompare"""
import logging
import sys

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from ..core.config import PhenoCompareConfig, default_group_names
from ..core.exceptions import PhenoCompareError, ConfigurationError
from ..ontology import parse_obo
from ..patients import CohortLoader
from ..gene_groups import GeneGroups, GeneGroupSelector
from ..processing.aggregator import TermCountAggregator
from ..report import OUTPUT_FORMATS, ResultFormatter, write_results, plot_counts
from ..information_content import (
    load_associations,
    compute_information_content,
    write_information_content,
)
from .commands import config_group

console = Console()
logger = logging.getLogger(__name__)


def _load_config(ctx) -> PhenoCompareConfig:
    return PhenoCompareConfig(ctx.obj.get("config_file") if ctx.obj else None)


@click.group()
@click.version_option(version='0.1.0', prog_name='phenocompare')
@click.option('--config', 'config_file', type=click.Path(dir_okay=False),
              help='Configuration file (default: ~/.phenocompare_config.json)')
@click.option('--verbose', '-v', is_flag=True, help='Enable debug logging')
@click.pass_context
def cli(ctx, config_file, verbose):
    """PhenoCompare - compare patient cohorts over the HPO hierarchy

    For every HPO term covering at least one patient, count the patients of
    each group showing that term or a more specific one.
    """
    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    if verbose:
        logging.getLogger().setLevel(logging.DEBUG)


@cli.command()
@click.argument('group_dirs', nargs=-1, required=True,
                type=click.Path(exists=True, file_okay=False, dir_okay=True))
@click.option('--output', '-o', required=True, type=click.Path(dir_okay=False),
              help='Output file for the count table')
@click.option('--hpo', 'hpo_path', type=click.Path(exists=True, dir_okay=False),
              help='HPO ontology in OBO format (default: configured hpo_path)')
@click.option('--workers', '-w', type=int, help='Number of counting threads')
@click.option('--format', '-f', 'output_format', type=click.Choice(OUTPUT_FORMATS),
              help='Output format')
@click.option('--names', help='Comma-separated group names, e.g. cases,controls')
@click.option('--gene-groups', type=click.Path(exists=True, dir_okay=False),
              help='Split one patient directory by early/late pathway genes listed in this file')
@click.option('--plot', 'plot_path', type=click.Path(dir_okay=False),
              help='Also save a bar chart of the most divergent terms')
@click.option('--top', default=20, show_default=True, help='Number of terms in the plot')
@click.option('--no-progress', is_flag=True, help='Disable progress bars')
@click.pass_context
def compare(ctx, group_dirs, output, hpo_path, workers, output_format, names,
            gene_groups, plot_path, top, no_progress):
    """Count patients per HPO term for each group

    Examples:

        phenocompare compare groupA/ groupB/ -o counts.txt --hpo hp.obo

        phenocompare compare patients/ --gene-groups genes.tsv -o counts.tsv -f tsv
    """
    try:
        config = _load_config(ctx)
        settings = config.snapshot()

        # Command line overrides apply to this run only
        if gene_groups:
            settings.grouping = "genes"
            settings.gene_groups_path = gene_groups
        if names:
            settings.group_names = [n.strip() for n in names.split(",") if n.strip()]
        if settings.grouping == "genes":
            settings.num_groups = 2
            if len(group_dirs) != 1:
                raise click.UsageError("Gene grouping takes exactly one patient directory")
            if not names and not config.get("group_names"):
                settings.group_names = ["early", "late"]
        elif len(group_dirs) != settings.num_groups:
            raise click.UsageError(
                f"Expected {settings.num_groups} group directories, got {len(group_dirs)}"
            )
        if not names and len(settings.group_names) != settings.num_groups:
            settings.group_names = default_group_names(settings.num_groups)
        if workers is not None:
            settings.max_workers = workers
        if output_format is not None:
            settings.output_format = output_format
        if hpo_path:
            settings.hpo_path = hpo_path
        if no_progress:
            settings.progress_bar = False
        settings.validate()

        if not settings.hpo_path:
            raise ConfigurationError(
                "No ontology given: use --hpo or 'phenocompare config set hpo_path <file>'"
            )

        hierarchy = parse_obo(settings.hpo_path)
        loader = CohortLoader(show_progress=settings.progress_bar)

        if settings.grouping == "genes":
            if not settings.gene_groups_path:
                raise ConfigurationError("Gene grouping needs gene_groups_path or --gene-groups")
            pool = loader.load(group_dirs[0])
            selector = GeneGroupSelector(GeneGroups.from_file(settings.gene_groups_path))
            groups = list(selector.partition(pool, names=settings.group_names))
        else:
            groups = [
                loader.load(directory, name=name)
                for directory, name in zip(group_dirs, settings.group_names)
            ]

        table = TermCountAggregator(hierarchy, max_workers=settings.max_workers).aggregate(groups)

        formatter = ResultFormatter(hierarchy, settings.group_names)
        write_results(output, table, formatter, settings.output_format)
        if plot_path:
            plot_counts(table, hierarchy, [len(g) for g in groups], plot_path,
                        group_names=settings.group_names, top=top)
    except PhenoCompareError as e:
        console.print(f"[red]ERROR: {escape(str(e))}[/red]")
        sys.exit(1)

    summary = Table(title="Comparison Summary")
    summary.add_column("Group", style="cyan")
    summary.add_column("Source", style="dim")
    summary.add_column("Patients", style="green")
    for group in groups:
        summary.add_row(group.name, group.source, str(len(group)))
    console.print(summary)
    console.print(f"[green]✓ {len(table)} terms written to {output}[/green]")


@cli.command()
@click.argument('associations', type=click.Path(exists=True, dir_okay=False))
@click.option('--output', '-o', required=True, type=click.Path(dir_okay=False),
              help='Output TSV of term and information content')
def ic(associations, output):
    """Compute information content of HPO terms from an annotation file

    Example:

        phenocompare ic phenotype.hpoa -o ic.tsv
    """
    try:
        pairs = load_associations(associations)
        information_content = compute_information_content(pairs)
        write_information_content(output, information_content)
    except PhenoCompareError as e:
        console.print(f"[red]ERROR: {escape(str(e))}[/red]")
        sys.exit(1)
    console.print(f"[green]✓ Information content of {len(information_content)} terms written to {output}[/green]")


cli.add_command(config_group, name='config')


def main():
    """Main entry point"""
    cli(obj={})


if __name__ == '__main__':
    main()
