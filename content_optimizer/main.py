"""
CLI entry point for Content Optimizer.
Provides commands: recommend, variants
"""
import argparse
import json
import sys
from pathlib import Path
import logging

from content_optimizer.config import settings
from content_optimizer.orchestrator import Orchestrator
from content_optimizer.scoring.registry import ModelRegistry
from content_optimizer.db.db import configure, init_db

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False):
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else getattr(logging, settings.log_level.upper(), logging.INFO)
    log_file = Path(settings.log_file)
    log_file.parent.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(sys.stdout)
        ]
    )


def load_json_file(filepath: str) -> dict:
    """Load JSON configuration file."""
    try:
        with open(filepath, 'r') as f:
            return json.load(f)
    except FileNotFoundError:
        logger.error(f"File not found: {filepath}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        logger.error(f"Invalid JSON in {filepath}: {e}")
        sys.exit(1)


def build_orchestrator(args) -> Orchestrator:
    """Load the model registry named on the command line."""
    registry = ModelRegistry.from_dict(load_json_file(args.models))
    return Orchestrator(registry)


def cmd_recommend(args):
    """Run recommend command."""
    logger.info("Starting recommendation...")

    base = load_json_file(args.base)
    weights = load_json_file(args.weights) if args.weights else None

    orchestrator = build_orchestrator(args)

    result = orchestrator.recommend(
        segment=args.segment,
        base_configuration=base,
        dimensions=args.dimensions,
        weights=weights,
        save_to_db=args.save
    )

    logger.info(f"Baseline score: {result['baseline_score']:.4f}")
    logger.info(f"Best score: {result['best_score']:.4f} (+{result['improvement']:.4f})")
    logger.info("Recommended configuration:")
    for key, value in result["best_configuration"].items():
        marker = " *" if base.get(key) != value else ""
        logger.info(f"  {key}: {value}{marker}")

    logger.info("Predicted objectives:")
    for objective, value in result["best_scores"].items():
        shown = f"{value:.4f}" if value is not None else "n/a"
        logger.info(f"  {objective}: {shown}")

    if result["skipped_dimensions"]:
        logger.warning(f"Unknown dimensions skipped: {result['skipped_dimensions']}")

    if result["run_id"]:
        logger.info(f"Optimization run saved. Run ID: {result['run_id']}")

    return result


def cmd_variants(args):
    """Run variants command."""
    base = load_json_file(args.base)
    weights = load_json_file(args.weights) if args.weights else None

    orchestrator = build_orchestrator(args)

    variants = orchestrator.variants(
        segment=args.segment,
        base_configuration=base,
        dimension=args.dimension,
        count=args.count,
        weights=weights
    )

    if len(variants) == 1:
        logger.warning(f"No variants available for '{args.dimension}'")

    table = variants.drop(columns=["configuration"])
    logger.info(f"A/B variants for {args.dimension}:\n{table.to_string(index=False)}")

    return variants


def main(argv=None):
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description='Content Optimizer - Recommend content parameters from fitted models',
        formatter_class=argparse.RawDescriptionHelpFormatter
    )

    parser.add_argument('-v', '--verbose', action='store_true', help='Enable verbose logging')
    parser.add_argument('--database_url', help='Override the database URL for saved runs')

    subparsers = parser.add_subparsers(dest='command', help='Command to run')

    # Recommend command
    recommend_parser = subparsers.add_parser('recommend', help='Recommend content parameters')
    recommend_parser.add_argument('--segment', required=True, help='Audience segment (e.g., gen_z)')
    recommend_parser.add_argument('--models', required=True, help='Path to model coefficient JSON')
    recommend_parser.add_argument('--base', required=True, help='Path to base configuration JSON')
    recommend_parser.add_argument('--dimensions', nargs='+', required=True, help='Parameters to vary, in order')
    recommend_parser.add_argument('--weights', help='Path to objective weights JSON')
    recommend_parser.add_argument('--save', action='store_true', help='Persist the run to the database')

    # Variants command
    variants_parser = subparsers.add_parser('variants', help='Score A/B variants along one parameter')
    variants_parser.add_argument('--segment', required=True, help='Audience segment')
    variants_parser.add_argument('--models', required=True, help='Path to model coefficient JSON')
    variants_parser.add_argument('--base', required=True, help='Path to base configuration JSON')
    variants_parser.add_argument('--dimension', required=True, help='Parameter to vary')
    variants_parser.add_argument('--count', type=int, default=None, help='Number of variants')
    variants_parser.add_argument('--weights', help='Path to objective weights JSON')

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    # Setup logging
    setup_logging(args.verbose)

    if args.database_url:
        configure(args.database_url)

    # Execute command
    try:
        if args.command == 'recommend':
            if args.save:
                init_db()
            return cmd_recommend(args)
        elif args.command == 'variants':
            return cmd_variants(args)
    except KeyboardInterrupt:
        logger.info("Operation cancelled by user.")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Error executing {args.command}: {e}")
        sys.exit(1)


if __name__ == '__main__':
    main()
