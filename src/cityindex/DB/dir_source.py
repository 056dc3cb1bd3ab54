# cityindex/DB/dir_source.py
from __future__ import annotations
import json
import os
from typing import Any

from .api import ArtifactFetchError, ArtifactNotFound


class DirectorySource:
    """Artifacts read straight from a build output directory (tests, local runs)."""
    def __init__(self, root: str) -> None:
        self.root = os.path.abspath(root)

    def path_for(self, name: str) -> str:
        target = os.path.abspath(os.path.join(self.root, name))
        # stay inside root (no absolute names / .. traversal)
        if target != self.root and not target.startswith(self.root + os.sep):
            raise ArtifactFetchError(name, "outside artifact root")
        return target

    def fetch(self, name: str) -> Any:
        path = self.path_for(name)
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            raise ArtifactNotFound(name, "not found")
        except (OSError, ValueError) as exc:
            raise ArtifactFetchError(name, str(exc)) from exc

    def close(self) -> None:
        pass
