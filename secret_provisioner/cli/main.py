"""CLI entrypoint for secret-provisioner."""
import sys
import argparse
import logging

from .validators import validate_not_blank, validate_required

VERSION = "0.1.0"

logger = logging.getLogger(__name__)


def _configure_logging(args):
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.WARNING
    else:
        level = logging.INFO
    # Log to stderr so stdout only carries the final result
    logging.basicConfig(
        level=level,
        format="%(levelname)s %(message)s",
        stream=sys.stderr,
        force=True
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="secret-provisioner",
        description="Provision secrets from a name,value CSV file into GCP Secret Manager",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Each secret is created if it doesn't exist yet (with the selected replication)
and a new version holding the value from the file is added. Re-running the
same file is safe.

Exit codes:
  0 - Success
  1 - Runtime error (malformed file, authentication, network, backend rejection, etc.)
  2 - Usage error (missing arguments, conflicting replication options, etc.)

Environment variables:
  GCP_PROJECT               - GCP project ID (used when --project-id is not given)
  SECRET_PROVISIONER_CONFIG - Path to config file (used when --config is not given)

Configuration:
  Default location: ~/.config/secret-provisioner/config.yml
        """
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"secret-provisioner {VERSION}"
    )
    parser.add_argument(
        "--project-id",
        help="GCP project ID (defaults to GCP_PROJECT env var or gcp.project_id in config)"
    )
    parser.add_argument(
        "--secrets-file",
        help="Path to the CSV file containing secrets (header: name,value)"
    )
    parser.add_argument(
        "--secrets-location",
        help="Comma-separated list of locations for user-managed replication, e.g. us-east1,europe-west1"
    )
    parser.add_argument(
        "--global",
        dest="global_replication",
        action="store_true",
        help="Use automatic replication (global secret)"
    )
    parser.add_argument(
        "--config",
        help="Path to YAML config file (authentication and default project)"
    )
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging"
    )
    verbosity.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log warnings and errors"
    )
    return parser


def cmd_upload(args) -> int:
    """Validate arguments, resolve configuration, and upload secrets."""
    from secret_provisioner.provisioning.domains.config_loader import (
        get_service_account_path,
        load_config,
        resolve_project_id,
    )
    from secret_provisioner.provisioning.domains.errors import ConfigError
    from secret_provisioner.provisioning.domains.replication import resolve_replication
    from secret_provisioner.provisioning.workflows.upload_secrets import upload_secrets

    validate_required("--secrets-file", args.secrets_file)
    validate_not_blank("--project-id", args.project_id)
    validate_not_blank("--secrets-location", args.secrets_location)

    # Replication is resolved before anything is read
    try:
        policy = resolve_replication(args.global_replication, args.secrets_location)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    config = load_config(args.config)

    project_id = resolve_project_id(args.project_id, config)
    validate_required(
        "--project-id",
        project_id,
        hint="Pass --project-id, set GCP_PROJECT, or set gcp.project_id in the config file."
    )

    count = upload_secrets(
        project_id,
        args.secrets_file,
        policy,
        credentials_path=get_service_account_path(config),
    )
    print(f"Success: provisioned {count} secret(s) in project {project_id}")
    return count


def main(argv=None):
    """Main CLI entrypoint.

    Exit codes:
        0 - Success
        1 - Runtime errors (malformed file, authentication, network, backend errors, etc.)
        2 - Usage errors (missing or conflicting arguments)
    """
    from secret_provisioner.provisioning.domains.errors import ProvisionerError, ProvisioningError

    parser = build_parser()
    args = parser.parse_args(argv)
    _configure_logging(args)

    try:
        cmd_upload(args)
    except ProvisioningError as e:
        logger.debug(f"Provisioning aborted at secret '{e.secret_name}' during {e.step.value}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except ProvisionerError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.debug("Unexpected error", exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    sys.exit(0)


if __name__ == "__main__":
    main()
