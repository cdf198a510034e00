"""Command-line interface for dicer-consensus.

Provides CLI commands for deriving consensus dicercalls from a cluster table.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

import click

from dicer_consensus import __version__


def setup_logging(verbose: bool = False, debug: bool = False) -> logging.Logger:
    """Setup logging for CLI commands."""
    level = logging.DEBUG if debug else (logging.INFO if verbose else logging.WARNING)
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%H:%M:%S",
    )
    return logging.getLogger("dicer_consensus")


@click.group()
@click.version_option(version=__version__, prog_name="dicer-consensus")
@click.option("-v", "--verbose", is_flag=True, help="Enable verbose output")
@click.option("--debug", is_flag=True, help="Enable debug output")
@click.pass_context
def cli(ctx: click.Context, verbose: bool, debug: bool) -> None:
    """dicer-consensus: consensus dicercalls across replicate samples.

    Examples:

        # Consensus over all replicates, ties excluded
        dicer-consensus consensus -i clusters.tsv -o out/consensus.tsv

        # Heterograft samples only, drop clusters without a consensus
        dicer-consensus consensus -i clusters.tsv -o out/consensus.tsv \\
            --condition hetero_1 --condition hetero_2 --tidy

        # Chimeric filter against self-graft controls
        dicer-consensus consensus -i clusters.tsv -o out/consensus.tsv \\
            --chimeric --genome-id B_chr1 --control self_1 --control self_2
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["debug"] = debug
    ctx.obj["logger"] = setup_logging(verbose, debug)


@cli.command()
@click.option("--input", "-i", "input_path", required=True, type=click.Path(exists=True),
              help="Cluster table (.csv or .tsv)")
@click.option("--out", "-o", "output_path", required=True, type=click.Path(),
              help="Output table (.csv or .tsv)")
@click.option("--config", "-c", type=click.Path(exists=True),
              help="Consensus configuration file (YAML)")
@click.option("--condition", "conditions", multiple=True,
              help="Replicate sample to vote with (repeatable; default all)")
@click.option("--ties", type=click.Choice(["exclude", "random"]), default=None,
              help="Tie policy [default exclude]")
@click.option("--tidy/--no-tidy", default=None,
              help="Drop clusters whose consensus is N")
@click.option("--chimeric/--no-chimeric", default=None,
              help="Remove likely mapping errors using control samples")
@click.option("--control", "controls", multiple=True,
              help="Control sample for the chimeric filter (repeatable)")
@click.option("--genome-id", default=None, help="Chromosome id of the non-native genome")
@click.option("--genome-match", type=click.Choice(["exact", "prefix"]), default=None,
              help="Match genome id exactly or as a chromosome prefix")
@click.option("--seed", type=int, default=None, help="Seed for the random tie policy")
@click.option("--n-jobs", type=int, default=None, help="Parallel workers")
@click.option("--log", "log_path", type=click.Path(), default=None,
              help="Also write a timestamped run log here")
@click.pass_context
def consensus(
    ctx: click.Context,
    input_path: str,
    output_path: str,
    config: Optional[str],
    conditions: Tuple[str, ...],
    ties: Optional[str],
    tidy: Optional[bool],
    chimeric: Optional[bool],
    controls: Tuple[str, ...],
    genome_id: Optional[str],
    genome_match: Optional[str],
    seed: Optional[int],
    n_jobs: Optional[int],
    log_path: Optional[str],
) -> None:
    """Derive the consensus dicercall of every cluster.

    Appends DicerCounts (replicates supporting the call) and DicerConsensus
    (size class or N) to the table, and writes a per-label summary next to
    the output.
    """
    logger = ctx.obj["logger"]

    # Import here to avoid slow startup
    from dicer_consensus.core.consensus import ConsensusConfig, ConsensusEngine, ConsensusError
    from dicer_consensus.io import get_logger, load_cluster_table, log_yaml, write_dataframe

    try:
        cfg = ConsensusConfig.from_yaml(Path(config)) if config else ConsensusConfig()
    except ConsensusError as exc:
        raise click.ClickException(str(exc)) from exc
    if conditions:
        cfg.conditions = list(conditions)
    if ties is not None:
        cfg.ties = ties
    if tidy is not None:
        cfg.tidy = tidy
    if chimeric is not None:
        cfg.chimeric = chimeric
    if controls:
        cfg.controls = list(controls)
    if genome_id is not None:
        cfg.genome_id = genome_id
    if genome_match is not None:
        cfg.genome_match = genome_match
    if seed is not None:
        cfg.seed = seed
    if n_jobs is not None:
        cfg.parallel.n_jobs = n_jobs

    if log_path:
        logger, actual_log = get_logger("dicer_consensus.run", log_path)
        click.echo(f"Logging to: {actual_log}")

    logger.info(f"Input: {input_path}")
    logger.info(f"Output: {output_path}")
    log_yaml(logger, "parameters", cfg.to_dict())

    data = load_cluster_table(input_path, call_prefix=cfg.columns.call_prefix)
    try:
        result = ConsensusEngine(cfg, logger=logger).execute(data)
    except ConsensusError as exc:
        raise click.ClickException(str(exc)) from exc

    out_file = write_dataframe(result.data, output_path)
    summary_file = out_file.with_name(f"{out_file.stem}_summary.csv")
    write_dataframe(result.summary, summary_file)
    log_yaml(logger, "result", result.to_dict())

    click.echo(
        f"Consensus complete: {result.n_rows_out:,}/{result.n_rows_in:,} clusters, "
        f"{result.n_unclassified:,} unclassified"
    )
    click.echo(f"Output saved to: {out_file}")


@cli.command()
@click.option("--input", "-i", "input_path", required=True, type=click.Path(exists=True),
              help="Cluster table (.csv or .tsv)")
@click.option("--prefix", default="DicerCall_", help="Dicercall column prefix")
def samples(input_path: str, prefix: str) -> None:
    """List replicate samples that have a dicercall column."""
    from dicer_consensus.core.consensus import replicate_samples
    from dicer_consensus.io import load_cluster_table

    data = load_cluster_table(input_path, call_prefix=prefix)
    names = replicate_samples(data, prefix)
    if not names:
        raise click.ClickException(f"No columns with prefix '{prefix}' found")
    for name in names:
        click.echo(name)


def main() -> None:
    """Main entry point for CLI."""
    cli(obj={})


if __name__ == "__main__":
    main()
