"""Denylists of non-facility or junk names to deactivate."""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path

from courtmatch.config import data_dir
from courtmatch.normalize import normalize


def should_deactivate(name: str, denylist: Iterable[str]) -> bool:
    """True iff some denylist entry normalizes exactly to the same string."""
    norm = normalize(name)
    return any(normalize(entry) == norm for entry in denylist)


class Denylist:
    """Exact normalized-name denylist. No prefix or substring matching."""

    def __init__(self, names: Iterable[str] = ()) -> None:
        self.names = list(names)
        self._normalized = {normalize(n) for n in self.names}

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize(name) in self._normalized

    def __len__(self) -> int:
        return len(self.names)

    def __bool__(self) -> bool:
        return bool(self.names)

    def should_deactivate(self, name: str) -> bool:
        return name in self

    @classmethod
    def load(cls, path: str | Path) -> Denylist:
        """Load a denylist from a JSON list of names.

        Raises:
            FileNotFoundError: path does not exist.
            ValueError: the file is not a JSON list of strings.
        """
        path = Path(path)
        data = json.loads(path.read_text(encoding="utf-8"))
        if not isinstance(data, list) or not all(isinstance(n, str) for n in data):
            raise ValueError(f"{path}: expected a JSON list of names")
        return cls(data)


def default_junk_path() -> Path:
    return data_dir() / "denylists" / "junk.json"
