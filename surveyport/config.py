"""
Configuration file support for surveyport.

Supports per-deployment configuration via:
- .surveyportrc.json (hidden file)
- surveyport.config.json (visible file)

Environment variables override file values:
    SURVEYPORT_STORE_PATH, SURVEYPORT_UPLOAD_DIR, SURVEYPORT_LOG_LEVEL,
    SURVEYPORT_MAX_CONTENT_LENGTH, SURVEYPORT_VERIFY_SOURCE_QUESTIONS

Example .surveyportrc.json:
{
    "storePath": "data/store.json",
    "uploadDir": "uploads",
    "maxContentLength": 16777216,
    "logLevel": "INFO",
    "verifySourceQuestions": false
}
"""

import os
import json
from dataclasses import dataclass
from typing import Dict, Optional, Any, Mapping


CONFIG_FILENAMES = [".surveyportrc.json", "surveyport.config.json"]

DEFAULT_STORE_PATH = os.path.join("data", "store.json")
DEFAULT_UPLOAD_DIR = "uploads"
DEFAULT_MAX_CONTENT_LENGTH = 16 * 1024 * 1024

_TRUE_VALUES = {"1", "true", "yes", "on"}


@dataclass
class SurveyportConfig:
    """Configuration for surveyport"""

    # Persisted store document
    store_path: str = DEFAULT_STORE_PATH

    # Scratch directory for uploads, one file per import request
    upload_dir: str = DEFAULT_UPLOAD_DIR

    # Upload size limit in bytes (HTTP layer only)
    max_content_length: int = DEFAULT_MAX_CONTENT_LENGTH

    log_level: str = "INFO"

    # Require a child's sourceQuestion to exist in the same survey
    verify_source_questions: bool = False

    # Config file location (set after loading)
    _config_path: Optional[str] = None


def find_config_file(base_dir: str) -> Optional[str]:
    """
    Find configuration file in a directory.

    Args:
        base_dir: Directory to search

    Returns:
        Path to config file if found, None otherwise
    """
    for filename in CONFIG_FILENAMES:
        config_path = os.path.join(base_dir, filename)
        if os.path.exists(config_path):
            return config_path
    return None


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE_VALUES


def load_config(
    base_dir: str = ".", environ: Optional[Mapping[str, str]] = None
) -> SurveyportConfig:
    """
    Load configuration from a directory, then apply environment overrides.

    Relative store and upload paths are resolved against ``base_dir``.

    Args:
        base_dir: Directory holding the config file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        SurveyportConfig instance (defaults if no config file found)

    Raises:
        ValueError: If the config file is not valid JSON
    """
    env = os.environ if environ is None else environ
    config_path = find_config_file(base_dir)

    data: Dict[str, Any] = {}
    if config_path is not None:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid config file {config_path}: {e}") from e

    config = SurveyportConfig(
        store_path=data.get("storePath", DEFAULT_STORE_PATH),
        upload_dir=data.get("uploadDir", DEFAULT_UPLOAD_DIR),
        max_content_length=int(data.get("maxContentLength", DEFAULT_MAX_CONTENT_LENGTH)),
        log_level=str(data.get("logLevel", "INFO")).upper(),
        verify_source_questions=_as_bool(data.get("verifySourceQuestions", False)),
    )
    config._config_path = config_path

    if env.get("SURVEYPORT_STORE_PATH"):
        config.store_path = env["SURVEYPORT_STORE_PATH"]
    if env.get("SURVEYPORT_UPLOAD_DIR"):
        config.upload_dir = env["SURVEYPORT_UPLOAD_DIR"]
    if env.get("SURVEYPORT_LOG_LEVEL"):
        config.log_level = env["SURVEYPORT_LOG_LEVEL"].upper()
    if env.get("SURVEYPORT_MAX_CONTENT_LENGTH"):
        config.max_content_length = int(env["SURVEYPORT_MAX_CONTENT_LENGTH"])
    if env.get("SURVEYPORT_VERIFY_SOURCE_QUESTIONS"):
        config.verify_source_questions = _as_bool(env["SURVEYPORT_VERIFY_SOURCE_QUESTIONS"])

    if not os.path.isabs(config.store_path):
        config.store_path = os.path.join(base_dir, config.store_path)
    if not os.path.isabs(config.upload_dir):
        config.upload_dir = os.path.join(base_dir, config.upload_dir)

    return config


def save_config(
    config: SurveyportConfig, base_dir: str, filename: str = ".surveyportrc.json"
) -> str:
    """
    Save configuration to a directory.

    Args:
        config: SurveyportConfig instance to save
        base_dir: Target directory
        filename: Config filename (default: .surveyportrc.json)

    Returns:
        Path to saved config file
    """
    config_path = os.path.join(base_dir, filename)

    data = {
        "storePath": config.store_path,
        "uploadDir": config.upload_dir,
        "maxContentLength": config.max_content_length,
        "logLevel": config.log_level,
        "verifySourceQuestions": config.verify_source_questions,
    }

    with open(config_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    return config_path


def merge_cli_args(config: SurveyportConfig, args: Any) -> SurveyportConfig:
    """
    Merge CLI arguments with config file settings.
    CLI arguments take precedence over config file.

    Args:
        config: SurveyportConfig loaded from file
        args: argparse namespace with CLI arguments

    Returns:
        Updated SurveyportConfig
    """
    if getattr(args, "store", None):
        config.store_path = args.store

    if getattr(args, "upload_dir", None):
        config.upload_dir = args.upload_dir

    if getattr(args, "log_level", None):
        config.log_level = args.log_level.upper()

    if getattr(args, "verify_source_questions", False):
        config.verify_source_questions = True

    return config
