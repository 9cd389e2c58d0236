"""jarresolve - resolve Maven dependencies from local repositories.

    Returns:
        int: Exit code
"""
import json
import logging
import sys

from constants import ExitCodes
from common.logging_utils import configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import build_settings, load_config
from resolution.errors import ConfigurationError, ResolutionError
from resolution.support import register
from versioning.parser import tokenize_coordinate

logger = logging.getLogger(__name__)


def _resolved_rows(resolved):
    """Flatten a resolved set for printing."""
    rows = []
    for vkey in sorted(resolved):
        dep = resolved[vkey]
        rows.append({
            "dependency": vkey,
            "requested": dep.version,
            "resolved_version": dep.best_version,
            "repository": dep.repo_path,
        })
    return rows


def _interactive_confirmer(old, new):
    """Ask on the terminal before an older copy is replaced."""
    answer = input(f"Replace {old.artifact}-{old.best_version} with {new.best_version}? [y/N] ")
    return answer.strip().lower() in ("y", "yes")


def _declining_confirmer(old, new):
    logger.warning(
        "%s-%s is already present; rerun with --yes to replace it with %s",
        old.artifact, old.best_version, new.best_version,
    )
    return False


def run(args, settings):
    """Execute the selected action. Returns the exit code."""
    client = register(settings.client, settings.sdk_path,
                      extra_repositories=settings.repositories,
                      settings_dir=settings.settings_dir)

    if args.action == "add":
        group, artifact, version = tokenize_coordinate(args.COORDINATE)
        dep = client.depend_on(group, artifact, version,
                               package_ids=args.PACKAGE_IDS,
                               repositories=args.DEP_REPOSITORIES)
        logging.info("Added %s for client %s", dep.key, settings.client)
    elif args.action == "clear":
        client.clear_dependencies()
        logging.info("Cleared dependencies of client %s", settings.client)
    elif args.action == "list":
        for key in client.client_dependencies:
            print(key)
    elif args.action == "resolve":
        resolved = client.resolve_dependencies(settings.use_latest)
        rows = _resolved_rows(resolved)
        if args.JSON:
            print(json.dumps(rows, indent=2))
        else:
            for row in rows:
                print(f"{row['dependency']}:{row['resolved_version']}  ({row['requested']})")
    elif args.action == "copy":
        resolved = client.resolve_dependencies(settings.use_latest)
        if args.ASSUME_YES:
            confirmer = None
        elif sys.stdin.isatty():
            confirmer = _interactive_confirmer
        else:
            confirmer = _declining_confirmer
        written = client.copy_dependencies(resolved, args.DEST, confirmer)
        logging.info("%d of %d artifacts copied to %s", len(written), len(resolved), args.DEST)
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL, args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action=args.action)
        )

    try:
        settings = build_settings(args, load_config(args.CONFIG))
    except (OSError, ValueError) as e:
        logging.error("Configuration error: %s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)

    try:
        code = run(args, settings)
    except ConfigurationError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.CONFIGURATION_ERROR.value)
    except ResolutionError as e:
        logging.error("Resolution failed: %s", e)
        sys.exit(ExitCodes.RESOLUTION_ERROR.value)
    except ValueError as e:
        logging.error("%s", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    except OSError as e:
        logging.error("IO error: %s, aborting", e)
        sys.exit(ExitCodes.FILE_ERROR.value)
    sys.exit(code)


if __name__ == "__main__":
    main()
