"""Site session: startup sequence, guarded project loading and periodic reload.

All mutable page state (site data, grid, memoized fields, store) lives on a
SiteSession instance owned by the container, so tests can build and dispose
their own.

Ordering within a cycle:
    site data -> sections -> head metadata -> projects -> search box
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler

from constants import (
    GridState,
    INTRO_SECTION_ID,
    PROJECTS_SECTION_ID,
    SEARCH_SLOT_ID,
)
from core.config import Settings
from core.logging import get_logger, log_execution_time
from models.records import ProjectRecord, TableField
from models.site import SiteData
from services import scheduler as reload_scheduler
from services.acquisition import ProjectSource
from services.baserow import BaserowClient
from services.components import (
    build_grid,
    build_grid_message,
    build_project_card,
    build_search_box,
    build_section,
)
from services.fields import field_text, resolve_attachment_url
from services.metadata import build_head, default_site_data, load_site_data
from services.search import SearchResult
from services.store import ProjectStore

logger = get_logger(__name__)

RELOAD_JOB_ID = "reload_projects"


class SiteSession:
    """Render/lifecycle driver for the single-page site."""

    def __init__(
        self,
        settings: Settings,
        baserow: BaserowClient,
        source: ProjectSource,
        store: Optional[ProjectStore] = None,
        scheduler: Optional[AsyncIOScheduler] = None,
    ):
        self.settings = settings
        self.baserow = baserow
        self.source = source
        self.store = store or ProjectStore()
        self.scheduler = scheduler

        self.site: Optional[SiteData] = None
        self.head_html = ""
        self.intro_html = ""
        self.sections_built = False
        self.grid_state = GridState.IDLE
        self.grid_html = ""
        self.search_attached = False
        self.table_fields: Optional[List[TableField]] = None
        self.load_cycles = 0

        self._init_task: Optional[asyncio.Task] = None
        self._loading = False
        self._reload_job: Optional[str] = None

    @property
    def initialized(self) -> bool:
        return self._init_task is not None and self._init_task.done()

    @property
    def loading(self) -> bool:
        return self._loading

    # =========================================================================
    # STARTUP
    # =========================================================================

    async def initialize(self) -> None:
        """Run the startup sequence once; every caller awaits the same run."""
        if self._init_task is None:
            self._init_task = asyncio.get_running_loop().create_task(self._startup())
        await asyncio.shield(self._init_task)

    async def _startup(self) -> None:
        start_time = time.time()
        logger.info("Starting site", title=self.settings.site_title)

        self.site = await self._load_site_data()
        self._build_sections(self.site)
        self.head_html = build_head(self.site)

        await self.load_projects()

        if self.settings.reload_interval > 0:
            self._reload_job = reload_scheduler.register_interval_job(
                RELOAD_JOB_ID,
                self.settings.reload_interval,
                self.load_projects,
                scheduler=self.scheduler,
            )

        log_execution_time(logger, "site_startup", start_time, time.time())

    async def _load_site_data(self) -> SiteData:
        try:
            return await load_site_data(self.settings, self.baserow)
        except Exception as e:
            logger.error("Failed to load site data, using defaults", error=str(e))
            return default_site_data(self.settings)

    def _build_sections(self, site: SiteData) -> None:
        self.intro_html = build_section(
            id=INTRO_SECTION_ID,
            title=site.intro_title,
            content=site.intro_text,
            css_class="section-home",
        )
        self.sections_built = True
        logger.debug("Sections built", sections=[INTRO_SECTION_ID, PROJECTS_SECTION_ID])

    # =========================================================================
    # PROJECTS
    # =========================================================================

    async def load_projects(self) -> bool:
        """Fetch, store and render projects.

        Returns False without doing anything when a load is already in flight
        or the sections are not built yet. The flag is checked and set with
        no await in between.
        """
        if self._loading or not self.sections_built:
            return False
        self._loading = True
        self.load_cycles += 1
        self._set_grid(GridState.LOADING)

        try:
            projects = await self.source.load()
            self.table_fields = await self.source.table_fields()

            self.store.replace(projects)

            if not projects:
                logger.warning("No projects found")
                self._set_grid(GridState.EMPTY)
                return True

            self.search_attached = True
            self.grid_state = GridState.RESULTS
            self.grid_html = self.render_result_html(
                SearchResult(term="", projects=projects, state=GridState.RESULTS)
            )
            logger.debug("Projects loaded", count=len(projects))

        except Exception as e:
            logger.error("Failed to load projects", error=str(e), exc_info=True)
            self._set_grid(GridState.ERROR)
        finally:
            self._loading = False

        return True

    def _set_grid(self, state: GridState) -> None:
        self.grid_state = state
        self.grid_html = build_grid(build_grid_message(state))

    # =========================================================================
    # RENDERING
    # =========================================================================

    def card_data(self, record: ProjectRecord) -> Dict[str, Any]:
        """Resolved, primitive card fields of a record."""
        fields = self.settings.project_fields
        return {
            "title": field_text(record, fields.title),
            "description": field_text(record, fields.description),
            "image_url": resolve_attachment_url(record.values.get(fields.image)),
            "link": field_text(record, fields.link),
        }

    def render_card(self, record: ProjectRecord) -> str:
        return build_project_card(
            record=record,
            field_defs=self.table_fields,
            base_field_ids=self.settings.project_fields.base_field_ids(),
            **self.card_data(record),
        )

    def render_result_html(self, result: SearchResult) -> str:
        """Grid HTML for a search result (or the full list)."""
        if result.state != GridState.RESULTS:
            return build_grid(build_grid_message(result.state))
        return build_grid("".join(self.render_card(record) for record in result.projects))

    def render_projects_section(self) -> str:
        """Projects section with search slot and the current grid."""
        site = self.site or default_site_data(self.settings)
        search_box = build_search_box(len(self.store)) if self.search_attached else ""
        wrapper = (
            '<div class="projects-wrapper">'
            f'<div id="{SEARCH_SLOT_ID}">{search_box}</div>'
            f"{self.grid_html}"
            "</div>"
        )
        return build_section(
            id=PROJECTS_SECTION_ID,
            title=site.collection_title,
            content=site.collection_text,
            css_class="section-projects",
            body=wrapper,
        )

    # =========================================================================
    # TEARDOWN
    # =========================================================================

    async def dispose(self) -> None:
        """Stop reloading and drop all page state."""
        if self._reload_job:
            reload_scheduler.remove_job(self._reload_job, scheduler=self.scheduler)
            self._reload_job = None
        if self._init_task is not None and not self._init_task.done():
            self._init_task.cancel()
            try:
                await self._init_task
            except asyncio.CancelledError:
                pass
        self._init_task = None
        self.store.clear()
        self.source.reset()
        self.site = None
        self.head_html = ""
        self.intro_html = ""
        self.sections_built = False
        self.search_attached = False
        self.table_fields = None
        self._set_grid(GridState.IDLE)
        self._loading = False
        logger.info("Site session disposed")
