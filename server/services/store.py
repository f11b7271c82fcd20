"""In-memory project list, the source of truth for filtering."""

from typing import List

from models.records import ProjectRecord
from services.text import normalize_text


class ProjectStore:
    """Holds the projects of the latest load cycle."""

    def __init__(self):
        self._projects: List[ProjectRecord] = []
        self.loaded = False

    def replace(self, projects: List[ProjectRecord]) -> None:
        """Swap in a new list. Never merges with the previous one."""
        self._projects = list(projects)
        self.loaded = True

    def filter(self, term: str) -> List[ProjectRecord]:
        """Order-preserving subsequence whose full text contains the term."""
        if not (term or "").strip():
            return list(self._projects)
        needle = normalize_text(term)
        return [project for project in self._projects if needle in project.full_text]

    def clear(self) -> None:
        self._projects = []
        self.loaded = False

    def __len__(self) -> int:
        return len(self._projects)
