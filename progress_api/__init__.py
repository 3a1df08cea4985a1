"""Phase progress backend: tracks a user through the detail, concise and creative phases."""

__version__ = "0.1.0"
