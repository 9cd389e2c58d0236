"""Argument parsing functionality for jarresolve."""

import argparse
from constants import Constants


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    parser = argparse.ArgumentParser(
        prog="jarresolve",
        description=(
            "jarresolve - resolve Maven dependencies from local repositories "
            "and deploy them into a project"
        ),
        add_help=True,
    )

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--sdk",
                        dest="SDK_PATH",
                        help=f"Android SDK path (default: ${Constants.ENV_SDK_PATH})",
                        action="store",
                        type=str)
    parser.add_argument("-s", "--settings",
                        dest="SETTINGS_DIR",
                        help=f"Directory holding the per-client dependency files "
                             f"(default: {Constants.DEFAULT_SETTINGS_DIR})",
                        action="store",
                        type=str)
    parser.add_argument("--client",
                        dest="CLIENT",
                        help=f"Client name the dependencies belong to (default: {Constants.DEFAULT_CLIENT})",
                        action="store",
                        type=str)
    parser.add_argument("-r", "--repository",
                        dest="REPOSITORIES",
                        help="Additional local Maven repository (can be used multiple times)",
                        action="append",
                        type=str,
                        default=[])
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
                        default='INFO')
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    actions = parser.add_subparsers(dest="action", required=True)

    add_parser = actions.add_parser("add", help="Declare a dependency for the client")
    add_parser.add_argument("COORDINATE",
                            help="group:artifact:version, version may end with + or be LATEST",
                            type=str)
    add_parser.add_argument("--package-id",
                            dest="PACKAGE_IDS",
                            help="Android SDK package providing the artifact (can be used multiple times)",
                            action="append",
                            type=str)
    add_parser.add_argument("--repository",
                            dest="DEP_REPOSITORIES",
                            help="Repository searched for this artifact only (can be used multiple times)",
                            action="append",
                            type=str)

    actions.add_parser("clear", help="Remove every dependency declared by the client")
    actions.add_parser("list", help="List the dependencies declared by the client")

    for name, help_text in (("resolve", "Resolve the dependencies of every client"),
                            ("copy", "Resolve and copy the dependencies into a directory")):
        sub = actions.add_parser(name, help=help_text)
        if name == "copy":
            sub.add_argument("DEST", help="Destination directory", type=str)
            sub.add_argument("-y", "--yes",
                             dest="ASSUME_YES",
                             help="Replace older copies without asking",
                             action="store_true")
        else:
            sub.add_argument("--json",
                             dest="JSON",
                             help="Print the resolved set as JSON",
                             action="store_true")
        sub.add_argument("--use-latest",
                         dest="USE_LATEST",
                         help="Use the newest version when constraints conflict instead of failing",
                         action="store_true",
                         default=None)

    return parser.parse_args(argv)
