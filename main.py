"""
Main entry point for the geographic drill-down engine.

This script provides the command-line interface for inspecting region type
chains, replaying drill-down clicks against a chart configuration and
validating boundary uploads.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add the current directory to Python path for imports
sys.path.insert(0, str(Path(__file__).parent))

from geo_drilldown.config import DrillDownConfig
from geo_drilldown.logging_config import setup_logging
from geo_drilldown.data_loader import DataLoader
from geo_drilldown.hierarchy.hierarchy_catalog import HierarchyCatalog
from geo_drilldown.hierarchy.hierarchy_config import HierarchyConfigBuilder
from geo_drilldown.datasource.data_source import DataFrameDataSource
from geo_drilldown.datasource.drill_session import DrillSession
from geo_drilldown.utils.geojson_validator import BoundaryUploadValidator
from geo_drilldown.exceptions import (
    ConfigurationError, DataLoadError, DataSourceError, GeoDrillError, ValidationError,
    is_recoverable_error
)


DRILL_UP_TOKEN = ".."
DRILL_HOME_TOKEN = "/"


def parse_arguments(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Geographic Drill-Down Engine - resolve map chart drill-down levels"
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default="WARNING",
        help="Logging level (default: WARNING)"
    )

    parser.add_argument(
        "--log-file",
        help="Also write logs to this file"
    )

    parser.add_argument(
        "--settings",
        help="Path to JSON file with engine settings"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    chain_parser = subparsers.add_parser(
        "chain", help="Print the region type chain of a country"
    )
    chain_parser.add_argument("--regions", required=True, help="Path to regions CSV/JSON file")
    chain_parser.add_argument("--country", help="Country code (default: from settings)")

    drill_parser = subparsers.add_parser(
        "drill", help="Replay drill-down clicks against a chart configuration"
    )
    drill_parser.add_argument("--regions", required=True, help="Path to regions CSV/JSON file")
    drill_parser.add_argument("--config", required=True, help="Path to chart config JSON file")
    drill_parser.add_argument(
        "--path",
        nargs="+",
        required=True,
        help=f"Region names to click in order; '{DRILL_UP_TOKEN}' drills up one level "
             f"and '{DRILL_HOME_TOKEN}' returns home"
    )
    drill_parser.add_argument("--boundaries", help="Path to boundaries CSV/JSON file")
    drill_parser.add_argument(
        "--strict",
        action="store_true",
        help="Fail on the first refused drill instead of continuing"
    )

    geojson_parser = subparsers.add_parser(
        "validate-geojson", help="Validate a GeoJSON boundary upload"
    )
    geojson_parser.add_argument("--file", required=True, help="Path to GeoJSON file")
    geojson_parser.add_argument("--key", help="Feature property joining features to data")
    geojson_parser.add_argument("--values", help="Path to data CSV/JSON file to match against")
    geojson_parser.add_argument("--column", help="Geographic column in the data file")

    return parser.parse_args(argv)


def create_config(args) -> DrillDownConfig:
    """Create engine configuration from settings file and command line arguments."""
    settings = {}
    if args.settings:
        settings_path = Path(args.settings)
        if not settings_path.exists():
            raise FileNotFoundError(f"Settings file not found: {args.settings}")
        with open(settings_path, 'r', encoding='utf-8') as f:
            settings = json.load(f)

    settings['log_level'] = args.log_level
    if args.log_file:
        settings['log_file'] = args.log_file
    if getattr(args, 'country', None):
        settings['country_code'] = args.country

    return DrillDownConfig.from_dict(settings)


def run_chain(args, config, logger) -> int:
    """Print the region type chain and any branching."""
    loader = DataLoader(logger.logger)
    catalog = HierarchyCatalog.from_dataframe(loader.load_regions(args.regions), logger.logger)

    chain = catalog.get_region_type_chain(config.country_code)
    if not chain:
        print(f"No region type chain available for {config.country_code}")
        return 0

    print(f"Region type chain for {config.country_code}: {' -> '.join(chain)}")

    root = catalog.get_root_region(config.country_code)
    if root is not None:
        print(f"Root region: {root.label} (id {root.id})")

    branching = catalog.has_branching(config.country_code)
    for parent_type, child_types in branching.items():
        logger.log_data_quality_warning(
            f"Region type '{parent_type}' has several child types; "
            f"only '{child_types[0]}' is used for drill-down",
            {'parent_type': parent_type, 'child_types': child_types}
        )
        print(f"  Branching at {parent_type}: {', '.join(child_types)}")
    return 0


async def replay_drill_path(session: DrillSession, clicks, strict: bool, load_boundaries: bool):
    """Apply clicks in order, printing each transition."""
    print(f"Start: column '{session.active_geographic_column}'")

    for click in clicks:
        if click == DRILL_UP_TOKEN:
            session.drill_up(session.depth - 2)
            status = "drill_up"
        elif click == DRILL_HOME_TOKEN:
            session.drill_home()
            status = "drill_home"
        else:
            result = await session.drill_into(click)
            status = result.status.value
            if not result.drilled:
                print(f"  {click}: {result.message}")
                if strict and result.error is not None:
                    raise result.error

        print(f"{click}: {status} -> depth {session.depth}, "
              f"column '{session.active_geographic_column}'")

        filters = session.filters
        if filters:
            print("  filters: " + ", ".join(f"{k} = {v}" for k, v in filters.items()))

        if load_boundaries:
            boundary_set = await session.load_boundary_set()
            boundary_id = session.active_boundary_id()
            if boundary_set is not None and boundary_id is None:
                print(f"  boundary: unresolved ({len(boundary_set.boundaries)} available)")
            else:
                print(f"  boundary: {boundary_id}")

        sync = session.preview()
        if sync.missing_fields:
            print(f"  preview: {sync.status.value} (missing {', '.join(sync.missing_fields)})")
        else:
            print(f"  preview: {sync.status.value}")


def run_drill(args, config, logger) -> int:
    """Replay drill-down clicks against a chart configuration."""
    loader = DataLoader(logger.logger)
    catalog = HierarchyCatalog.from_dataframe(loader.load_regions(args.regions), logger.logger)
    chart_config = loader.load_chart_config(args.config)
    boundaries_df = loader.load_boundaries(args.boundaries) if args.boundaries else None

    country_code = chart_config.country_code or config.country_code
    chain = catalog.get_region_type_chain(country_code)
    session = DrillSession(
        DataFrameDataSource(catalog, boundaries_df, logger=logger.logger),
        chart_config,
        chain=chain,
        config=config,
        logger=logger.logger,
        drill_logger=logger
    )

    if session.hierarchy is not None and chain:
        _, issues = HierarchyConfigBuilder(chain, country_code).validate(session.hierarchy)
        for issue in issues:
            logger.log_data_quality_warning(f"Hierarchy: {issue}")

    asyncio.run(replay_drill_path(session, args.path, args.strict, boundaries_df is not None))
    return 0


def run_validate_geojson(args, config, logger) -> int:
    """Validate a GeoJSON boundary upload."""
    loader = DataLoader(logger.logger)
    geojson = loader.load_geojson(args.file)

    data_values = None
    if args.values:
        if not args.column:
            raise ValidationError(
                "--column is required with --values",
                field_name="column",
                validation_rules=["column_required_with_values"]
            )
        data_values = loader.load_column_values(args.values, args.column)

    join_key = args.key or config.boundary_join_key
    validator = BoundaryUploadValidator(config.progress_threshold, logger.logger)
    report = validator.validate(geojson, join_key, data_values)

    print(f"Features: {report.feature_count} (join key '{report.join_key}')")
    if report.duplicate_keys:
        print(f"Duplicate keys: {', '.join(report.duplicate_keys)}")
    if report.data_checked:
        print(f"Match rate: {report.match_rate:.1f}%")
        if report.unmatched_feature_keys:
            print(f"Features without data: {', '.join(report.unmatched_feature_keys)}")
        if report.unmatched_data_values:
            logger.log_data_quality_warning(
                f"{len(report.unmatched_data_values)} data value(s) have no boundary feature",
                {'join_key': join_key}
            )
            print(f"Data values without features: {', '.join(report.unmatched_data_values)}")
    print("GeoJSON is valid")
    return 0


COMMANDS = {
    "chain": run_chain,
    "drill": run_drill,
    "validate-geojson": run_validate_geojson,
}


def main(argv=None):
    """Main application entry point."""
    try:
        args = parse_arguments(argv)
        config = create_config(args)
        logger = setup_logging(config)
        logger.debug(f"Running '{args.command}' with settings {config.to_dict()}")

        exit_code = COMMANDS[args.command](args, config, logger)
        sys.exit(exit_code)

    except (ValidationError, ConfigurationError) as e:
        print(f"\nValidation Error: {e}", file=sys.stderr)
        for key, value in e.context.items():
            if value:
                print(f"  {key}: {value}", file=sys.stderr)
        sys.exit(2)

    except (DataSourceError, DataLoadError, GeoDrillError) as e:
        print(f"\nDrill-Down Error: {e}", file=sys.stderr)
        if e.error_code:
            print(f"Error code: {e.error_code}", file=sys.stderr)
        if is_recoverable_error(e):
            print("The operation may succeed if retried.", file=sys.stderr)
        sys.exit(3)

    except FileNotFoundError as e:
        print(f"\nFile Error: {e}", file=sys.stderr)
        print("Please check that all input files exist and are accessible.", file=sys.stderr)
        sys.exit(4)

    except KeyboardInterrupt:
        print("\nProcess interrupted by user", file=sys.stderr)
        sys.exit(130)

    except Exception as e:
        print(f"\nError: Unexpected error: {e}", file=sys.stderr)
        print("Please check the log files for more details.", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
