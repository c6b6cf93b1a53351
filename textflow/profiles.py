"""Named layout profiles.

A profile is a LayoutSettings saved under a name picked by the host, such as
"compact" or "print", so a layout can be switched between configurations
with ``TextLayout.load_profile``. All profiles live in one JSON document in
the user's config directory:

    {"version": 1, "profiles": {"print": {"wrapping_width": 65, ...}}}
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

from .settings import LayoutSettings

logger = logging.getLogger(__name__)

PROFILES_FILENAME = "layout_profiles.json"
FORMAT_VERSION = 1


def default_profile_dir() -> Path:
    return Path(platformdirs.user_config_dir("textflow", "textflow"))


class ProfileStore:
    """Reads and writes the profiles document in ``directory``.

    The document is read once and kept in memory; ``reload`` drops the
    in-memory copy. Unreadable documents and malformed entries are logged
    and treated as missing, so a damaged file never stops a layout from
    being built.
    """

    def __init__(self, directory: Optional[Path] = None):
        self.directory = Path(directory) if directory is not None else default_profile_dir()
        self._profiles: Optional[Dict[str, Dict[str, Any]]] = None

    @property
    def path(self) -> Path:
        return self.directory / PROFILES_FILENAME

    def names(self) -> list[str]:
        return sorted(self._read())

    def get(self, name: str) -> Optional[LayoutSettings]:
        """Settings saved under ``name``, or None if there are none."""
        values = self._read().get(name)
        if values is None:
            return None
        return LayoutSettings.from_dict(values)

    def put(self, name: str, settings: LayoutSettings) -> bool:
        """Save ``settings`` under ``name``, replacing any earlier profile.

        Returns False if the document could not be written.

        Raises:
            ValueError: If ``name`` is empty.
        """
        if not name:
            raise ValueError("Profile name must not be empty")
        profiles = {**self._read(), name: settings.to_dict()}
        return self._write(profiles)

    def remove(self, name: str) -> bool:
        """Delete profile ``name``. Returns False if it did not exist or could not be written."""
        profiles = dict(self._read())
        if profiles.pop(name, None) is None:
            return False
        return self._write(profiles)

    def reload(self) -> None:
        self._profiles = None

    def _read(self) -> Dict[str, Dict[str, Any]]:
        if self._profiles is None:
            self._profiles = self._parse()
        return self._profiles

    def _parse(self) -> Dict[str, Dict[str, Any]]:
        try:
            document = json.loads(self.path.read_text(encoding='utf-8'))
        except FileNotFoundError:
            return {}
        except (json.JSONDecodeError, OSError) as e:
            logger.warning(f"Could not read layout profiles from {self.path}: {e}")
            return {}

        table = document.get("profiles") if isinstance(document, dict) else None
        if not isinstance(table, dict):
            logger.warning(f"{self.path} has no profiles table, ignoring it")
            return {}
        if document.get("version") != FORMAT_VERSION:
            logger.warning(f"{self.path} has format version {document.get('version')!r}, "
                           f"reading it as version {FORMAT_VERSION}")

        profiles = {}
        for name, values in table.items():
            if isinstance(values, dict):
                profiles[name] = values
            else:
                logger.warning(f"Skipping malformed layout profile {name!r}")
        return profiles

    def _write(self, profiles: Dict[str, Dict[str, Any]]) -> bool:
        document = {"version": FORMAT_VERSION, "profiles": profiles}
        temp_path: Optional[str] = None
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            # Replace the document in one step so readers never see half of it
            with tempfile.NamedTemporaryFile('w', encoding='utf-8', dir=self.directory,
                                             suffix='.tmp', delete=False) as f:
                temp_path = f.name
                json.dump(document, f, indent=2, sort_keys=True)
            os.replace(temp_path, self.path)
        except OSError as e:
            logger.warning(f"Could not save layout profiles to {self.path}: {e}")
            if temp_path is not None:
                Path(temp_path).unlink(missing_ok=True)
            return False

        self._profiles = profiles
        return True


_store: Optional[ProfileStore] = None


def get_profile_store() -> ProfileStore:
    """Process-wide store in the default config directory."""
    global _store
    if _store is None:
        _store = ProfileStore()
    return _store
