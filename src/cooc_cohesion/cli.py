"""Command line entry points for :mod:`cooc_cohesion`."""

from __future__ import annotations

import argparse
import logging
import re
from pathlib import Path
from typing import Iterable, Optional

from .compare import compare_periods
from .config.analysis import AnalysisConfig
from .config.const import (
    CENTRALITY_MEASURES,
    DEFAULT_ABUNDANCE_CUTOFF,
    DEFAULT_CORRELATION_THRESHOLD,
    DEFAULT_DAMPING,
    DEFAULT_PERIOD_COLUMN,
    DEFAULT_PERIOD_LABELS,
    DEFAULT_TAXONOMIC_RANK,
    DEFAULT_WALK_LENGTH,
    MASKING_POLICIES,
)
from .io import (
    load_abundance_table,
    load_sample_metadata,
    load_taxonomy_table,
    write_cohesion,
    write_comparison,
    write_network,
    write_summary,
)
from .utils.datamanag.abundance import sample_periods, taxonomy_labels
from .workflow import hub_taxa, run_pipeline

__all__ = ["create_parser", "run_analysis", "main"]


DEFAULT_OUTPUT_ROOT = Path("results")


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="%(asctime)s %(levelname)s %(message)s")


def _slug(label: str) -> str:
    return re.sub(r"[^A-Za-z0-9_.-]+", "_", str(label)).strip("_") or "period"


def create_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build period co-occurrence networks and per-sample cohesion scores",
    )
    parser.add_argument("--abundance", "-a", type=Path, required=True, help="Taxon-by-sample abundance table (CSV/TSV)")
    parser.add_argument("--metadata", "-m", type=Path, required=True, help="Sample metadata table (CSV/TSV)")
    parser.add_argument("--taxonomy", "-t", type=Path, default=None, help="Optional taxon-by-rank taxonomy table")
    parser.add_argument(
        "--period-column",
        default=DEFAULT_PERIOD_COLUMN,
        help="Metadata column holding the period label",
    )
    parser.add_argument(
        "--periods",
        nargs="+",
        default=list(DEFAULT_PERIOD_LABELS),
        help="Period labels in chronological order",
    )
    parser.add_argument(
        "--group-rank",
        default="Phylum",
        help="Taxonomic rank used as the vertex group label",
    )
    parser.add_argument(
        "--aggregate-rank",
        default=None,
        help=f"Aggregate taxa to this rank before analysis (e.g. {DEFAULT_TAXONOMIC_RANK})",
    )
    parser.add_argument("--samples-as-rows", action="store_true", help="The abundance table stores one sample per row")
    parser.add_argument("--relative", action="store_true", help="Convert counts to relative abundances first")
    parser.add_argument(
        "--threshold",
        type=float,
        default=DEFAULT_CORRELATION_THRESHOLD,
        help="Correlation an edge must strictly exceed",
    )
    parser.add_argument(
        "--abundance-cutoff",
        type=float,
        default=DEFAULT_ABUNDANCE_CUTOFF,
        help="Mean abundance a taxon must exceed within a period",
    )
    parser.add_argument("--damping", type=float, default=DEFAULT_DAMPING, help="PageRank damping factor")
    parser.add_argument("--walk-length", type=int, default=DEFAULT_WALK_LENGTH, help="Walktrap random-walk length")
    parser.add_argument("--masking", choices=MASKING_POLICIES, default="zero", help="Connectedness masking policy")
    parser.add_argument(
        "--weighted-centrality",
        action="store_true",
        help="Let correlation weights modulate the centrality measures",
    )
    parser.add_argument("--max-workers", type=int, default=1, help="Periods analysed concurrently")
    parser.add_argument("--top-hubs", type=int, default=10, help="Number of hub taxa listed per period")
    parser.add_argument(
        "--hub-measure",
        choices=CENTRALITY_MEASURES,
        default="hubscore",
        help="Centrality used to rank hub taxa",
    )
    parser.add_argument(
        "--output-root",
        type=Path,
        default=DEFAULT_OUTPUT_ROOT,
        help="Directory where artefacts will be written",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ...)",
    )
    return parser


def run_analysis(argv: Optional[Iterable[str]] = None) -> int:
    parser = create_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    try:
        config = AnalysisConfig(
            threshold=args.threshold,
            abundance_cutoff=args.abundance_cutoff,
            damping=args.damping,
            walk_length=args.walk_length,
            masking=args.masking,
            weighted_centrality=args.weighted_centrality,
            max_workers=args.max_workers,
        )
    except ValueError as exc:
        parser.error(str(exc))

    abundance = load_abundance_table(args.abundance, samples_as_rows=args.samples_as_rows)
    logging.info("Loaded %d taxa x %d samples from %s", abundance.n_taxa, abundance.n_samples, args.abundance)

    taxonomy = None
    if args.taxonomy is not None:
        table = load_taxonomy_table(args.taxonomy)
        if args.aggregate_rank:
            abundance = abundance.aggregate(taxonomy_labels(table, args.aggregate_rank))
            logging.info("Aggregated to %d taxa at rank %s", abundance.n_taxa, args.aggregate_rank)
        taxonomy = taxonomy_labels(table, args.group_rank, key_rank=args.aggregate_rank)
    elif args.aggregate_rank:
        parser.error("--aggregate-rank requires --taxonomy")

    if args.relative:
        abundance = abundance.relative()

    metadata = load_sample_metadata(args.metadata)
    periods = sample_periods(metadata, args.period_column, args.periods)

    result = run_pipeline(abundance, periods, taxonomy, config, period_labels=args.periods)

    output = args.output_root
    output.mkdir(parents=True, exist_ok=True)
    for label, period_result in result.periods.items():
        write_network(period_result.graph, output / "networks", f"network_{_slug(label)}")
        hubs = hub_taxa(period_result, top_n=args.top_hubs, by=args.hub_measure)
        hubs.to_csv(output / f"hubs_{_slug(label)}.csv")
    write_cohesion(result.cohesion, output / "cohesion.csv")
    write_summary(result.summary(), output / "summary.csv")
    logging.info("Summary:\n%s", result.summary().to_string(index=False))

    analysed = list(result.periods.values())
    if len(analysed) >= 2:
        comparison = compare_periods(analysed[0], analysed[-1])
        write_comparison(
            comparison,
            output / f"comparison_{_slug(comparison.reference)}_{_slug(comparison.other)}.csv",
        )
        logging.info(
            "%s -> %s: %d shared, %d gained, %d lost taxa; edge Jaccard %.3f",
            comparison.reference,
            comparison.other,
            len(comparison.shared_taxa),
            len(comparison.gained_taxa),
            len(comparison.lost_taxa),
            comparison.edge_jaccard,
        )

    for label, message in result.failures.items():
        logging.warning("Period %s was not analysed: %s", label, message)

    logging.info("Artefacts written to %s", output)
    return 0 if result.periods else 1


def main() -> int:  # pragma: no cover - convenience wrapper
    return run_analysis()


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
