# src/warpbox/config/const.py
from __future__ import annotations

# Default values; override via warpbox.yaml or WARPBOX_* environment variables
API_BASE: str = "https://api.cloudflareclient.com/v0a1922"
CLIENT_VERSION: str = "a-6.3-1922"
USER_AGENT: str = "okhttp/3.12.1"
HTTP_TIMEOUT: float = 15.0

PLATFORM_LABEL: str = "PC"

PROFILE_DNS: str = "1.1.1.1"
PROFILE_MTU: int = 1280

BASE_DIR: str = "~/.warpbox"
CONFIG_FILENAME: str = "warpbox.yaml"

ACCOUNT_FILENAME: str = "wgcf-account.json"
WARP_CONFIG_FILENAME: str = "wgcf-config.json"
PROFILE_FILENAME: str = "wgcf-profile.conf"
