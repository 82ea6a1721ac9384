"""
Configuration module for Phone Companion.

Handles the filesystem locations shared with the phone-sync daemon and the
fixed limits used by the message and notification layers.

Paths:
    - contacts_dir: Root of the per-device vCard directories written by the
      daemon (read-only for us). Device ``abc`` lives in
      ``<contacts_dir>/kdeconnect-abc``.
    - runtime_dir: Where the notification dedup files live. Ideally an
      in-memory filesystem such as $XDG_RUNTIME_DIR.

Environment Variables:
    PHONE_COMPANION_CONTACTS_DIR: Override contacts_dir.
    PHONE_COMPANION_RUNTIME_DIR: Override runtime_dir.
"""

import os
import tempfile
from pathlib import Path
from typing import Optional


class Config:
    """Configuration class for Phone Companion."""

    # Per-device contact directories are named <prefix><device_id>
    CONTACTS_DEVICE_PREFIX = "kdeconnect-"
    CONTACTS_SUBDIR = "kpeoplevcard"

    FILE_DEDUP_NAME = "phone-companion-file-dedup"
    SMS_DEDUP_NAME = "phone-companion-sms-dedup"

    # Two alerts for the same key closer together than this are duplicates
    DEDUP_WINDOW_MS = 2000

    # Conversation list length
    MAX_CONVERSATIONS = 25

    def __init__(
        self,
        contacts_dir: Optional[str] = None,
        runtime_dir: Optional[str] = None,
    ):
        """
        Initialize configuration.

        Args:
            contacts_dir: Optional root of the per-device vCard directories.
                    Falls back to PHONE_COMPANION_CONTACTS_DIR, then to
                    $XDG_DATA_HOME/kpeoplevcard (~/.local/share/kpeoplevcard).
            runtime_dir: Optional directory for dedup files. Falls back to
                    PHONE_COMPANION_RUNTIME_DIR, then $XDG_RUNTIME_DIR, then
                    the system temp directory.
        """
        self._contacts_dir = Path(contacts_dir) if contacts_dir else self._default_contacts_dir()
        self._runtime_dir = Path(runtime_dir) if runtime_dir else self._default_runtime_dir()

    @classmethod
    def _default_contacts_dir(cls) -> Path:
        override = os.getenv("PHONE_COMPANION_CONTACTS_DIR")
        if override:
            return Path(override)

        data_home = os.getenv("XDG_DATA_HOME")
        base = Path(data_home) if data_home else Path.home() / ".local" / "share"
        return base / cls.CONTACTS_SUBDIR

    @staticmethod
    def _default_runtime_dir() -> Path:
        for var in ("PHONE_COMPANION_RUNTIME_DIR", "XDG_RUNTIME_DIR"):
            value = os.getenv(var)
            if value:
                return Path(value)
        return Path(tempfile.gettempdir())

    @property
    def contacts_dir(self) -> Path:
        """Get the root directory of the synced contact cards."""
        return self._contacts_dir

    @property
    def runtime_dir(self) -> Path:
        """Get the directory holding the dedup files."""
        return self._runtime_dir

    @property
    def file_dedup_path(self) -> Path:
        """Dedup file for file-transfer notifications."""
        return self._runtime_dir / self.FILE_DEDUP_NAME

    @property
    def sms_dedup_path(self) -> Path:
        """Dedup file for SMS notifications."""
        return self._runtime_dir / self.SMS_DEDUP_NAME

    @property
    def dedup_window_ms(self) -> int:
        return self.DEDUP_WINDOW_MS

    @property
    def max_conversations(self) -> int:
        return self.MAX_CONVERSATIONS

    def contacts_dir_for_device(self, device_id: str) -> Path:
        """
        Get the vCard directory for one paired device.

        Args:
            device_id: Device identifier as reported by the daemon.

        Returns:
            Path to the device's contact directory (may not exist).
        """
        return self._contacts_dir / f"{self.CONTACTS_DEVICE_PREFIX}{device_id}"

    def validate_contacts_dir(self, device_id: str) -> bool:
        """
        Validate that the device's contact directory exists and is readable.

        Returns:
            True if the directory exists and is readable, False otherwise.
        """
        path = self.contacts_dir_for_device(device_id)
        return path.is_dir() and os.access(path, os.R_OK)


# Global configuration instance
_config: Optional[Config] = None


def get_config() -> Config:
    """
    Get or create the global configuration instance.

    Returns:
        Config instance.
    """
    global _config
    if _config is None:
        _config = Config()
    return _config


def set_config(config: Optional[Config]) -> None:
    """
    Set the global configuration instance.

    Args:
        config: Config instance to use, or None to reset to defaults.
    """
    global _config
    _config = config
