import configparser
import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional
from app_logging import app_logger

CONFIG_DIR = os.environ.get(
    'CONFIG_DIR',
    os.path.join(os.path.expanduser("~"), ".config", "xkcd_downloader")
)
CONFIG_FILE = os.path.join(CONFIG_DIR, "config.ini")

DEFAULT_DB_NAME = ".xkcd_downloader.db"
DEFAULT_IMAGE_SUBDIR = os.path.join("Pictures", "xkcd")
DEFAULT_API_BASE_URL = "https://xkcd.com"

# Use RawConfigParser to allow special characters like % in values (no interpolation)
config = configparser.RawConfigParser()
config.optionxform = str  # Preserve case sensitivity

default_settings = {
    "DB_PATH": "",
    "IMAGE_DIR": "",
    "API_BASE_URL": DEFAULT_API_BASE_URL,
    "REQUEST_TIMEOUT": "",
    "SKIP_IDS": "404",
    "ENABLE_DEBUG_LOGGING": "False",
}


class ConfigError(Exception):
    """Raised when paths or settings cannot be resolved."""


@dataclass
class DownloaderConfig:
    """Resolved settings for one downloader run."""
    db_path: str
    image_dir: str
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: Optional[float] = None
    skip_ids: FrozenSet[int] = field(default_factory=lambda: frozenset({404}))


def write_config():
    """Writes the current in-memory config object to config.ini."""
    config.optionxform = str  # Preserve case sensitivity
    os.makedirs(os.path.dirname(CONFIG_FILE), exist_ok=True)
    with open(CONFIG_FILE, "w") as configfile:
        config.write(configfile)


def load_config():
    """
    Loads or (if missing) creates the config file, ensuring
    that the [SETTINGS] section exists.
    """
    app_logger.debug(f"Config file location: {CONFIG_FILE}")

    if not os.path.exists(CONFIG_FILE):
        # Create a default config.ini if none exists
        config["SETTINGS"] = default_settings
        write_config()
        return

    config.read(CONFIG_FILE)

    if "SETTINGS" not in config:
        config["SETTINGS"] = {}

    # Add any missing keys with defaults (preserves existing values)
    missing_keys = []
    for key, default_value in default_settings.items():
        if key not in config["SETTINGS"]:
            config["SETTINGS"][key] = default_value
            missing_keys.append(key)

    if missing_keys:
        app_logger.info(f"Migrated {len(missing_keys)} new config keys: {', '.join(missing_keys)}")
        write_config()
    else:
        app_logger.debug("Config file loaded successfully (no migration needed)")


def get_home_dir() -> str:
    """Return the current user's home directory or raise ConfigError."""
    home = os.path.expanduser("~")
    if not home or home == "~":
        raise ConfigError("Unable to determine the current user's home directory")
    return home


def debug_logging_enabled() -> bool:
    """Read ENABLE_DEBUG_LOGGING, raising ConfigError for non-boolean values."""
    try:
        return config.getboolean("SETTINGS", "ENABLE_DEBUG_LOGGING", fallback=False)
    except ValueError as e:
        raise ConfigError(f"Invalid ENABLE_DEBUG_LOGGING value: {e}") from e


def _parse_timeout(raw: str) -> Optional[float]:
    raw = raw.strip()
    if not raw:
        return None
    try:
        return float(raw)
    except ValueError as e:
        raise ConfigError(f"Invalid REQUEST_TIMEOUT value: {raw!r}") from e


def _parse_skip_ids(raw: str) -> FrozenSet[int]:
    try:
        return frozenset(int(part) for part in raw.split(",") if part.strip())
    except ValueError as e:
        raise ConfigError(f"Invalid SKIP_IDS value: {raw!r}") from e


def resolve_config(db_path: Optional[str] = None, image_dir: Optional[str] = None) -> DownloaderConfig:
    """
    Build the DownloaderConfig for a run and make sure the image directory exists.

    Precedence is: explicit arguments, then config.ini, then defaults under
    the user's home directory.

    Args:
        db_path: Override for the SQLite database file
        image_dir: Override for the directory images are saved to

    Returns:
        DownloaderConfig

    Raises:
        ConfigError: if the home directory is unknown, a setting is invalid,
            or the image directory cannot be created
    """
    settings = config["SETTINGS"] if "SETTINGS" in config else {}

    db_path = db_path or settings.get("DB_PATH", "").strip()
    if not db_path:
        db_path = os.path.join(get_home_dir(), DEFAULT_DB_NAME)

    image_dir = image_dir or settings.get("IMAGE_DIR", "").strip()
    if not image_dir:
        image_dir = os.path.join(get_home_dir(), DEFAULT_IMAGE_SUBDIR)

    db_path = os.path.expanduser(db_path)
    image_dir = os.path.expanduser(image_dir)

    try:
        os.makedirs(image_dir, mode=0o777, exist_ok=True)
    except OSError as e:
        raise ConfigError(f"Unable to create directory {image_dir}: {e}") from e

    return DownloaderConfig(
        db_path=db_path,
        image_dir=image_dir,
        api_base_url=settings.get("API_BASE_URL", "").strip() or DEFAULT_API_BASE_URL,
        request_timeout=_parse_timeout(settings.get("REQUEST_TIMEOUT", "")),
        skip_ids=_parse_skip_ids(settings.get("SKIP_IDS", "404")),
    )
