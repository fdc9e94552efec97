"""Constants used across the lightroom-midi package."""

from __future__ import annotations

from pathlib import Path

APP_NAME = "lightroom-midi"
DEFAULT_CONFIG_FILENAME = f"{APP_NAME}.cfg"
DEFAULT_CONFIG_PATH = Path(DEFAULT_CONFIG_FILENAME)
DEFAULT_PROFILES_PATH = Path("config") / "profiles"
DEFAULT_IDENTITY_PATH = Path(".lr-controller-client-id")

DEFAULT_LIGHTROOM_HOST = "127.0.0.1"
DEFAULT_LIGHTROOM_PORT = 7682

DEFAULT_CLIENT_NAME = "LR MIDI Controller"
DEFAULT_CLIENT_VERSION = "0.1.0"

DEFAULT_REQUEST_TIMEOUT_SECONDS = 10.0
DEFAULT_RECONNECT_DELAY_SECONDS = 5.0

DEFAULT_PREFERRED_DEVICE = "DDJ-FLX2"
