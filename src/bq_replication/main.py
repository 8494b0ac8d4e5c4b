#!/usr/bin/env python3
"""
Main entry point for the replication system.

This module provides the CLI that runs the export, load and cleanup sequence
for the daily source, the intraday source, or both.
"""

import argparse
import sys
import uuid
from pathlib import Path
from typing import List

from .audit.logger import ReplicationLogger
from .bigquery_operations import BigQueryOperations
from .config.loader import ConfigLoader
from .config.models import ReplicationSystemConfig, SourceRole
from .core.exceptions import ConfigurationError, ReplicationError
from .loading.load_dispatcher import LoadDispatcher
from .replication.replication_manager import ReplicationManager
from .storage.staging import StagingReconciler, make_gcs_path
from .utils import create_bigquery_client, create_storage_client

DEFAULT_CONFIG_FILE = "gcs.yaml"
SOURCE_CHOICES = ["daily", "intraday", "both"]


def create_logger(config, verbose: bool = False) -> ReplicationLogger:
    """Create logger instance from configuration."""
    logger = ReplicationLogger("bq_replication")
    logging_config = config.logging
    if verbose:
        logging_config = logging_config.model_copy(update={"level": "DEBUG"})
    logger.setup_logging(logging_config)
    return logger


def resolve_roles(selection: str, config: ReplicationSystemConfig) -> List[SourceRole]:
    """
    Map the --source selection onto source roles, daily first.

    ``both`` runs every configured role; naming a role explicitly requires it
    to be configured.
    """
    if selection not in SOURCE_CHOICES:
        raise ConfigurationError(
            f"Invalid source {selection!r}, must be one of {SOURCE_CHOICES}"
        )

    if selection == "both":
        return [role for role in SourceRole if role in config.sources]

    role = SourceRole(selection)
    if role not in config.sources:
        raise ConfigurationError(f"Source {role.value} is not configured")
    return [role]


def create_manager(
    config: ReplicationSystemConfig, logger: ReplicationLogger, run_id: str
) -> ReplicationManager:
    """Wire the manager with live Google Cloud clients and the sling loader."""
    bq_ops = BigQueryOperations(
        create_bigquery_client(config.project_id, config.location),
        config.project_id,
        logger,
        location=config.location,
    )
    staging = StagingReconciler(create_storage_client(config.project_id), logger)
    load_dispatcher = LoadDispatcher(logger)
    return ReplicationManager(
        config, logger, bq_ops, staging, load_dispatcher, run_id=run_id
    )


def run_dry_run(manager: ReplicationManager, roles: List[SourceRole]) -> int:
    """Log what each source would export and where, without side effects."""
    for plan in manager.plan_run(roles):
        destination = make_gcs_path(plan.source.bucket, plan.source.bucket_suffix)
        manager.logger.info(
            f"Dry-run: {plan.role.value} would export {len(plan.tables)} tables "
            f"to {destination} and load them into "
            f"{plan.template.target.object_name}",
            extra={"source": plan.role.value, "tables": list(plan.tables)},
        )
    return 0


def main():
    """Main entry point for the replication system."""
    parser = argparse.ArgumentParser(
        description="BigQuery export and sling load replication tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Replicate both sources using ./gcs.yaml
  bq-replicator

  # Replicate only the intraday source
  bq-replicator gcs.yaml --source intraday

  # Show which tables would be exported
  bq-replicator gcs.yaml --dry-run
        """,
    )

    parser.add_argument(
        "config_file",
        nargs="?",
        default=DEFAULT_CONFIG_FILE,
        help=f"Path to the YAML configuration file (default: {DEFAULT_CONFIG_FILE})",
    )

    parser.add_argument(
        "--source",
        "-s",
        choices=SOURCE_CHOICES,
        default="both",
        help="Which configured sources to replicate (default: both)",
    )

    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Only validate configuration and load-job templates",
    )

    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Show what would be replicated without exporting, loading or deleting",
    )

    parser.add_argument(
        "--verbose", "-v", action="store_true", help="Enable verbose logging"
    )

    args = parser.parse_args()

    # Validate config file exists
    config_path = Path(args.config_file)
    if not config_path.exists():
        print(f"Error: Configuration file not found: {config_path}", file=sys.stderr)
        return 1

    try:
        config = ConfigLoader.load_from_file(config_path)
        run_id = str(uuid.uuid4())
        logger = create_logger(config, args.verbose).bind(run_id=run_id)

        logger.info(f"Loaded configuration from {config_path}")

        roles = resolve_roles(args.source, config)

        if args.validate_only:
            for role in roles:
                ConfigLoader.load_load_job_template(config.source(role).sling_cfg_path)
            logger.info("Configuration validation completed successfully")
            return 0

        manager = create_manager(config, logger, run_id)

        if args.dry_run:
            return run_dry_run(manager, roles)

        summary = manager.run_replication_operations(roles)
        logger.info(
            f"All replication operations completed successfully "
            f"({summary.successful_operations} operations)"
        )
        return 0

    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1
    except ReplicationError as e:
        print(f"Replication failed: {e}", file=sys.stderr)
        return 1
    except Exception as e:
        print(f"Operation failed: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
