"""Debounced project search.

Each input cancels the pending timer and arms a new one (trailing edge), so
only the last keystroke of a typing burst runs the filter and the render
callback. Everything happens on the event loop thread; no locks needed.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Optional, Set

from constants import GridState
from core.logging import get_logger
from models.records import ProjectRecord
from services.store import ProjectStore

logger = get_logger(__name__)

DEFAULT_DEBOUNCE_SECONDS = 0.3


@dataclass
class SearchResult:
    term: str
    projects: List[ProjectRecord] = field(default_factory=list)
    state: GridState = GridState.RESULTS

    @property
    def count(self) -> int:
        return len(self.projects)


RenderCallback = Callable[[SearchResult], Awaitable[None]]


def search_projects(store: ProjectStore, term: str) -> SearchResult:
    """Filter the store and classify the outcome."""
    if not len(store):
        return SearchResult(term=term, projects=[], state=GridState.EMPTY)
    projects = store.filter(term)
    state = GridState.RESULTS if projects else GridState.NO_RESULTS
    return SearchResult(term=term, projects=projects, state=state)


class SearchController:
    """Idle/Pending state machine over a ProjectStore."""

    def __init__(self, store: ProjectStore, on_results: RenderCallback,
                 delay: float = DEFAULT_DEBOUNCE_SECONDS):
        self.store = store
        self.on_results = on_results
        self.delay = delay
        self.term = ""
        self._handle: Optional[asyncio.TimerHandle] = None
        self._render_tasks: Set[asyncio.Task] = set()

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def filter(self, term: str) -> SearchResult:
        """Immediate, non-debounced filter."""
        return search_projects(self.store, term)

    def on_input(self, term: str) -> None:
        """Schedule a filter for `term`, replacing any pending one."""
        self.cancel()
        self.term = term
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._run, term)

    def cancel(self) -> None:
        """Drop the pending filter, back to Idle."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _run(self, term: str) -> None:
        self._handle = None
        result = self.filter(term)
        logger.debug("Search", term=term, results=result.count)
        task = asyncio.get_running_loop().create_task(self.on_results(result))
        self._render_tasks.add(task)
        task.add_done_callback(self._render_done)

    def _render_done(self, task: asyncio.Task) -> None:
        self._render_tasks.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.error("Search render failed", error=str(task.exception()))

    async def close(self) -> None:
        """Cancel the pending timer and any in-flight render."""
        self.cancel()
        for task in list(self._render_tasks):
            task.cancel()
        if self._render_tasks:
            await asyncio.gather(*self._render_tasks, return_exceptions=True)
