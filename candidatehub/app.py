import argparse
import json
import sys
from pathlib import Path

from . import __version__
from .config import ConfigError, Settings, build_store
from .env import load_env
from .logger import get_logger
from .matcher import filter_candidates
from .models import AnalysisResult, Candidate
from .repository import CandidateRepository
from .schema import validate_analysis, validate_status


def _load_json(path_str: str):
    input_path = Path(path_str)
    if not input_path.exists():
        raise SystemExit(f"Input file not found: {input_path}")
    with input_path.open("r", encoding="utf-8") as f:
        try:
            return json.load(f)
        except json.JSONDecodeError as e:
            print(f"Invalid JSON in {input_path}: {e}", file=sys.stderr)
            raise SystemExit(2)


def _print_candidate(candidate: Candidate) -> None:
    m = candidate.commit_metrics
    print(f"ID: {candidate.id}")
    print(f"  Name: {candidate.name} (@{candidate.github_username})")
    print(f"  Email: {candidate.email}")
    print(f"  Status: {candidate.status}")
    print(f"  Position: {candidate.position}")
    print(f"  Match score: {candidate.match_score}")
    print(
        f"  Metrics: quality={m.code_quality_score} consistency={m.consistency_score} "
        f"collaboration={m.collaboration_score} diversity={m.technical_diversity_score} "
        f"overall={m.overall_score} commits={m.total_commits}"
    )
    print(f"  Created: {candidate.created_at}")


def _report_degraded(result) -> None:
    if result.degraded:
        print(f"[warn] store unavailable, change kept in memory only: {result.cause}")


def cmd_list(repo: CandidateRepository, args: argparse.Namespace) -> None:
    candidates = filter_candidates(
        repo.list(),
        search_term=args.search,
        status_filter=args.status,
        position_filter=args.position,
        score_filter=args.score,
    )
    if not candidates:
        print("No candidates found.")
        return
    print(f"Found {len(candidates)} candidates:\n")
    for candidate in candidates:
        _print_candidate(candidate)
        print()


def cmd_show(repo: CandidateRepository, args: argparse.Namespace) -> None:
    candidate = repo.get_by_id(args.id)
    if candidate is None:
        raise SystemExit(f"Candidate not found: {args.id}")
    _print_candidate(candidate)


def cmd_validate(repo: CandidateRepository, args: argparse.Namespace) -> None:
    errors = validate_analysis(_load_json(args.input))
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    print("Valid")


def cmd_ingest(repo: CandidateRepository, args: argparse.Namespace) -> None:
    data = _load_json(args.input)
    errors = validate_analysis(data)
    if errors:
        print("Invalid:")
        for e in errors:
            print(f" - {e}")
        raise SystemExit(2)
    result = repo.upsert_from_analysis(AnalysisResult.from_dict(data))
    _report_degraded(result)
    print(f"Candidate: {result.value.id}")
    print(f"Match score: {result.value.match_score}")


def cmd_status(repo: CandidateRepository, args: argparse.Namespace) -> None:
    errors = validate_status(args.status)
    if errors:
        print(errors[0])
        raise SystemExit(2)
    result = repo.update_status(args.id, args.status)
    _report_degraded(result)
    if result.value is None:
        raise SystemExit(f"Candidate not found: {args.id}")
    print(f"{result.value.id}: {result.value.status}")


def cmd_delete(repo: CandidateRepository, args: argparse.Namespace) -> None:
    result = repo.delete(args.id)
    _report_degraded(result)
    print(f"Deleted: {args.id}")


def cmd_compare(repo: CandidateRepository, args: argparse.Namespace) -> None:
    # compare() reads the cache, so warm it first.
    repo.list()
    comparison = repo.compare(args.first, args.second)
    if comparison is None:
        raise SystemExit("Both candidates must exist to compare them.")
    first, second = comparison.candidate1, comparison.candidate2
    print(f"{first.github_username} vs {second.github_username}\n")
    for name, metric in comparison.metrics.items():
        winner = first if metric.winner == first.id else second
        print(f"  {name:<20} {metric.difference:+8.1f}  -> {winner.github_username}")
    print()
    print(f"Wins: {first.github_username}={comparison.candidate1_wins} {second.github_username}={comparison.candidate2_wins}")
    print(f"Overall: {comparison.overall_winner.github_username}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="candidatehub", description="Candidate records with offline fallback")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--metrics", action="store_true", help="Log record store metrics before exiting")

    subparsers = parser.add_subparsers(dest="command")

    lst = subparsers.add_parser("list", help="List candidates, optionally filtered")
    lst.add_argument("--search", default="", help="Substring of name or GitHub username")
    lst.add_argument("--status", default="all", help="pending, reviewed, hired, rejected or all")
    lst.add_argument("--position", default="all", help="Benchmark position or all")
    lst.add_argument("--score", default="all", choices=["all", "high", "medium", "low"], help="Match score bucket")
    lst.set_defaults(func=cmd_list)

    shw = subparsers.add_parser("show", help="Show one candidate")
    shw.add_argument("id", help="Candidate ID")
    shw.set_defaults(func=cmd_show)

    val = subparsers.add_parser("validate", help="Validate an analysis result JSON")
    val.add_argument("--input", required=True, help="Path to analysis JSON")
    val.set_defaults(func=cmd_validate)

    ing = subparsers.add_parser("ingest", help="Create or update a candidate from an analysis result JSON")
    ing.add_argument("--input", required=True, help="Path to analysis JSON")
    ing.set_defaults(func=cmd_ingest)

    sts = subparsers.add_parser("status", help="Change a candidate's status")
    sts.add_argument("id", help="Candidate ID")
    sts.add_argument("status", help="pending, reviewed, hired or rejected")
    sts.set_defaults(func=cmd_status)

    dlt = subparsers.add_parser("delete", help="Delete a candidate")
    dlt.add_argument("id", help="Candidate ID")
    dlt.set_defaults(func=cmd_delete)

    cmp_ = subparsers.add_parser("compare", help="Compare two candidates metric by metric")
    cmp_.add_argument("first", help="First candidate ID")
    cmp_.add_argument("second", help="Second candidate ID")
    cmp_.set_defaults(func=cmd_compare)

    return parser


def main(argv=None):
    # Load .env if present (CANDIDATEHUB_*, FIREBASE_*)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if not hasattr(args, "func"):
        parser.print_help()
        return

    try:
        settings = Settings.from_env()
        logger = get_logger(level=settings.log_level, log_dir=settings.log_dir)
        store = build_store(settings, logger=logger)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        raise SystemExit(2)

    repo = CandidateRepository(store, collection=settings.collection, logger=logger)
    try:
        args.func(repo, args)
    finally:
        if args.metrics:
            logger.log_metrics_summary()


if __name__ == "__main__":
    main()
