"""Centralized constants for grid states and user-facing messages.

This module provides a single source of truth for the texts shown in the
projects grid, so the "no data" and "no search results" presentations
stay distinct everywhere they are rendered.
"""

from enum import Enum
from typing import Dict


class GridState(str, Enum):
    """What the projects grid is currently showing."""
    IDLE = "idle"              # sections not built yet
    LOADING = "loading"
    EMPTY = "empty"            # dataset loaded with zero records
    ERROR = "error"            # acquisition failed
    RESULTS = "results"
    NO_RESULTS = "no_results"  # search matched nothing


GRID_MESSAGES: Dict[GridState, str] = {
    GridState.IDLE: "",
    GridState.LOADING: "⏳ Loading projects...",
    GridState.EMPTY: "No projects to show yet.",
    GridState.ERROR: "An error occurred while loading the projects.",
    GridState.NO_RESULTS: "🔍 No projects found for that term.",
}

# CSS classes of the grid messages
GRID_MESSAGE_CLASSES: Dict[GridState, str] = {
    GridState.LOADING: "loading",
    GridState.EMPTY: "empty-message",
    GridState.ERROR: "empty-message",
    GridState.NO_RESULTS: "empty-message",
}

# =============================================================================
# SECTION / ELEMENT IDS
# =============================================================================

INTRO_SECTION_ID = "home"
PROJECTS_SECTION_ID = "projects"
SEARCH_SLOT_ID = "search-slot"
SEARCH_INPUT_ID = "project-search"
RESULTS_COUNTER_ID = "results-counter"
PROJECTS_GRID_ID = "projects-grid"

DEFAULT_INTRO_TITLE = "Home"
DEFAULT_COLLECTION_TITLE = "Collection"


def results_label(count: int) -> str:
    """'1 result' / 'N results'."""
    return f"{count} {'result' if count == 1 else 'results'}"
