"""warpbox: WARP account provisioning and WireGuard profile generation."""

__version__ = "0.1.0"
