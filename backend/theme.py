"""
Persisted light/dark theme preference.
"""

import json
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)

THEME_FILE = os.getenv("THEME_FILE", "theme.json")


class ThemePreferenceStore:
    """A single boolean, stored as {"theme": "dark"|"light"} on disk."""

    def __init__(self, path: str = THEME_FILE):
        self.path = Path(path)
        self.dark = self._load()

    def _load(self) -> bool:
        if not self.path.exists():
            return False
        try:
            with open(self.path) as f:
                return json.load(f).get("theme") == "dark"
        except (OSError, ValueError, AttributeError) as e:
            logger.warning(f"Ignoring unreadable theme file {self.path}: {e}")
            return False

    def _save(self, dark: bool):
        with open(self.path, "w") as f:
            json.dump({"theme": "dark" if dark else "light"}, f)

    def toggle(self) -> bool:
        """Flip the preference; it only changes once the file is written."""
        try:
            self._save(not self.dark)
        except OSError as e:
            logger.error(f"Failed to save theme to {self.path}: {e}")
            return self.dark
        self.dark = not self.dark
        return self.dark
