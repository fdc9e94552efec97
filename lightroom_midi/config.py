"""Configuration loader for lightroom-midi."""

from __future__ import annotations

from configparser import ConfigParser
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from . import constants


@dataclass(slots=True)
class LightroomConfig:
    host: str = constants.DEFAULT_LIGHTROOM_HOST
    port: int = constants.DEFAULT_LIGHTROOM_PORT
    app_name: str = constants.DEFAULT_CLIENT_NAME
    app_version: str = constants.DEFAULT_CLIENT_VERSION
    request_timeout_seconds: float = constants.DEFAULT_REQUEST_TIMEOUT_SECONDS
    reconnect_delay_seconds: float = constants.DEFAULT_RECONNECT_DELAY_SECONDS

    @property
    def url(self) -> str:
        return f"ws://{self.host}:{self.port}"


@dataclass(slots=True)
class MidiConfig:
    device: Optional[str] = None
    preferred_match: str = constants.DEFAULT_PREFERRED_DEVICE


@dataclass(slots=True)
class ProfilesConfig:
    directory: Path = constants.DEFAULT_PROFILES_PATH
    default: Optional[str] = None


@dataclass(slots=True)
class IdentityConfig:
    path: Path = constants.DEFAULT_IDENTITY_PATH


@dataclass(slots=True)
class LoggingConfig:
    level: str = "INFO"
    path: Optional[Path] = None
    log_network: bool = False


@dataclass(slots=True)
class ControllerConfig:
    lightroom: LightroomConfig
    midi: MidiConfig
    profiles: ProfilesConfig
    identity: IdentityConfig
    logging: LoggingConfig
    raw: ConfigParser
    path: Path


def _optional(parser: ConfigParser, section: str, option: str) -> Optional[str]:
    value = parser.get(section, option, fallback="").strip()
    return value or None


def _get_float(parser: ConfigParser, section: str, option: str, default: float) -> float:
    try:
        return parser.getfloat(section, option, fallback=default)
    except ValueError:
        return default


def _get_int(parser: ConfigParser, section: str, option: str, default: int) -> int:
    try:
        return parser.getint(section, option, fallback=default)
    except ValueError:
        return default


def load_config(path: Optional[Path] = None) -> ControllerConfig:
    """Load configuration from disk, applying defaults where necessary."""

    config_path = path or constants.DEFAULT_CONFIG_PATH
    parser = ConfigParser()
    parser.read_dict(
        {
            "lightroom": {
                "host": constants.DEFAULT_LIGHTROOM_HOST,
                "port": str(constants.DEFAULT_LIGHTROOM_PORT),
                "app_name": constants.DEFAULT_CLIENT_NAME,
                "app_version": constants.DEFAULT_CLIENT_VERSION,
                "request_timeout_seconds": str(
                    constants.DEFAULT_REQUEST_TIMEOUT_SECONDS
                ),
                "reconnect_delay_seconds": str(
                    constants.DEFAULT_RECONNECT_DELAY_SECONDS
                ),
            },
            "midi": {
                "device": "",
                "preferred_match": constants.DEFAULT_PREFERRED_DEVICE,
            },
            "profiles": {
                "directory": str(constants.DEFAULT_PROFILES_PATH),
                "default": "",
            },
            "identity": {
                "path": str(constants.DEFAULT_IDENTITY_PATH),
            },
            "logging": {
                "level": "INFO",
                "path": "",
                "log_network": "false",
            },
        }
    )

    if config_path.exists():
        parser.read(config_path)

    lightroom = LightroomConfig(
        host=parser.get("lightroom", "host"),
        port=_get_int(
            parser, "lightroom", "port", constants.DEFAULT_LIGHTROOM_PORT
        ),
        app_name=parser.get("lightroom", "app_name"),
        app_version=parser.get("lightroom", "app_version"),
        request_timeout_seconds=max(
            0.1,
            _get_float(
                parser,
                "lightroom",
                "request_timeout_seconds",
                constants.DEFAULT_REQUEST_TIMEOUT_SECONDS,
            ),
        ),
        reconnect_delay_seconds=max(
            0.0,
            _get_float(
                parser,
                "lightroom",
                "reconnect_delay_seconds",
                constants.DEFAULT_RECONNECT_DELAY_SECONDS,
            ),
        ),
    )

    midi = MidiConfig(
        device=_optional(parser, "midi", "device"),
        preferred_match=parser.get(
            "midi", "preferred_match", fallback=constants.DEFAULT_PREFERRED_DEVICE
        ),
    )

    profiles = ProfilesConfig(
        directory=Path(parser.get("profiles", "directory")).expanduser(),
        default=_optional(parser, "profiles", "default"),
    )

    identity = IdentityConfig(
        path=Path(parser.get("identity", "path")).expanduser(),
    )

    log_path = _optional(parser, "logging", "path")
    logging_config = LoggingConfig(
        level=parser.get("logging", "level", fallback="INFO"),
        path=Path(log_path).expanduser() if log_path else None,
        log_network=parser.getboolean("logging", "log_network", fallback=False),
    )

    return ControllerConfig(
        lightroom=lightroom,
        midi=midi,
        profiles=profiles,
        identity=identity,
        logging=logging_config,
        raw=parser,
        path=config_path,
    )


def save_config(config: ControllerConfig) -> None:
    """Persist the current configuration to disk."""

    config_path = config.path
    config_path.parent.mkdir(parents=True, exist_ok=True)
    with config_path.open("w", encoding="utf-8") as stream:
        config.raw.write(stream)
