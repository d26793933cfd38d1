"""Hosting environment detection and storage path settings.

A local checkout keeps its data files in a persistent directory next to the
project. Hosting platforms give an ephemeral (and sometimes read-only)
filesystem, so files go to a scratch directory and the Excel workbook is
not attempted at all.
"""

import logging
import os
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from utils.constants import CSV_FILE_NAME, EXCEL_FILE_NAME, JSON_FILE_NAME

logger = logging.getLogger(__name__)

PROJECT_ROOT = Path(__file__).resolve().parents[3]
PROJECT_MARKER_FILE = "pyproject.toml"
PROJECT_ROOT_VARIABLE = "FEEDBACK_PROJECT_ROOT"

# Environment variable -> platform name, checked in order
HOSTING_MARKERS: list[tuple[str, str]] = [
    ("AWS_LAMBDA_FUNCTION_NAME", "aws-lambda"),
    ("VERCEL", "vercel"),
    ("RENDER", "render"),
    ("DYNO", "heroku"),
    ("RAILWAY_ENVIRONMENT", "railway"),
    ("NETLIFY", "netlify"),
    ("K_SERVICE", "cloud-run"),
    ("FLY_APP_NAME", "fly"),
]


@dataclass(frozen=True)
class EnvironmentInfo:
    """Result of classifying the process environment."""

    hosting: bool
    platform: str
    environment: str

    @property
    def is_production(self) -> bool:
        return self.environment == "production"


def resolve_project_root(env: Mapping[str, str] | None = None) -> Path:
    """Locate the project checkout.

    ``FEEDBACK_PROJECT_ROOT`` wins. Otherwise the source tree this module was
    loaded from is used when it holds the marker file, and the working
    directory when it does not (a non-editable install).
    """
    env = os.environ if env is None else env
    if env.get(PROJECT_ROOT_VARIABLE):
        return Path(env[PROJECT_ROOT_VARIABLE])
    if (PROJECT_ROOT / PROJECT_MARKER_FILE).exists():
        return PROJECT_ROOT
    return Path.cwd()


def get_environment_name(env: Mapping[str, str] | None = None) -> str:
    """Return the deployment environment name (``development`` by default)."""
    env = os.environ if env is None else env
    return (env.get("ENVIRONMENT") or env.get("NODE_ENV") or "development").lower()


def classify(
    env: Mapping[str, str] | None = None,
    project_root: Path | None = None,
) -> EnvironmentInfo:
    """Decide whether the filesystem should be treated as hosted.

    Hosting when any of these hold:
    - a known hosting platform variable is set
    - the environment name is ``production``
    - the project marker file is missing from the project root

    Args:
        env: Environment variables to inspect (defaults to ``os.environ``)
        project_root: Directory expected to contain the marker file

    Returns:
        EnvironmentInfo with the hosting flag and detected platform
    """
    env = os.environ if env is None else env
    if project_root is None:
        project_root = resolve_project_root(env)
    environment = get_environment_name(env)

    for variable, platform in HOSTING_MARKERS:
        if env.get(variable):
            return EnvironmentInfo(True, platform, environment)

    if environment == "production":
        return EnvironmentInfo(True, "production", environment)

    if not (project_root / PROJECT_MARKER_FILE).exists():
        return EnvironmentInfo(True, "unknown-host", environment)

    return EnvironmentInfo(False, "local", environment)


@dataclass(frozen=True)
class StorageSettings:
    """Where each backend keeps its file and which environment we run in."""

    data_dir: Path
    hosting: bool = False
    platform: str = "local"
    environment: str = "development"

    @property
    def excel_path(self) -> Path:
        return self.data_dir / EXCEL_FILE_NAME

    @property
    def json_path(self) -> Path:
        return self.data_dir / JSON_FILE_NAME

    @property
    def csv_path(self) -> Path:
        return self.data_dir / CSV_FILE_NAME

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_environment(
        cls,
        env: Mapping[str, str] | None = None,
        project_root: Path | None = None,
    ) -> "StorageSettings":
        """Build settings from the process environment.

        Local runs use ``FEEDBACK_DATA_DIR`` (default ``<project>/data``);
        hosted runs use ``FEEDBACK_TMP_DIR`` (default a folder in the
        system temp directory).
        """
        env = os.environ if env is None else env
        if project_root is None:
            project_root = resolve_project_root(env)
        info = classify(env, project_root)

        if info.hosting:
            data_dir = Path(
                env.get("FEEDBACK_TMP_DIR")
                or Path(tempfile.gettempdir()) / "feedback-collector"
            )
        else:
            data_dir = Path(env.get("FEEDBACK_DATA_DIR") or project_root / "data")

        logger.info(
            f"Storage settings: hosting={info.hosting} platform={info.platform} "
            f"data_dir={data_dir}"
        )
        return cls(
            data_dir=data_dir,
            hosting=info.hosting,
            platform=info.platform,
            environment=info.environment,
        )
