"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    RESOLUTION_ERROR = 2
    CONFIGURATION_ERROR = 3


class Packaging(Enum):
    """Packaging extensions an artifact may be published with.

    Args:
        Enum (string): File extension including the leading dot.
    """

    AAR = ".aar"
    JAR = ".jar"
    # Lets a project keep an AAR that its build ignores while the resolver
    # still deploys it as a regular .aar.
    SRCAAR = ".srcaar"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    SDK_PLACEHOLDER = "$SDK"
    ENV_SDK_PATH = "ANDROID_HOME"
    ENV_LOG_LEVEL = "JARRESOLVE_LOG_LEVEL"
    DEFAULT_REPOSITORIES = [
        "$SDK/extras/android/m2repository",
        "$SDK/extras/google/m2repository",
    ]
    PACKAGING = [p.value for p in Packaging]
    DEPLOYED_EXTENSIONS = {Packaging.SRCAAR.value: Packaging.AAR.value}
    METADATA_FILE = "maven-metadata.xml"
    POM_EXTENSION = ".pom"
    LATEST = "LATEST"
    DEPENDENCY_FILE_PREFIX = "JarDependencies"
    DEPENDENCY_FILE_EXTENSION = ".xml"
    SIDECAR_EXTENSIONS = [".meta"]
    DEFAULT_SETTINGS_DIR = "ProjectSettings"
    DEFAULT_CLIENT = "default"
    MAX_RESOLUTION_PASSES = 1000
    LOG_FORMAT = "[%(levelname)s] %(message)s"
    SDK_CONFIGURATION_ERROR = (
        "Android SDK path not set.  "
        "Pass --sdk on the command line, set 'sdk' in the configuration file "
        "or set the ANDROID_HOME environment variable."
    )
