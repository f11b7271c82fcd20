"""Site page and project REST routes."""

from html import escape

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from constants import PROJECTS_GRID_ID, RESULTS_COUNTER_ID, SEARCH_INPUT_ID, results_label
from core.container import container
from core.logging import get_logger
from services.metadata import default_site_data
from services.search import search_projects
from services.site import SiteSession

logger = get_logger(__name__)
router = APIRouter(tags=["site"])


def get_session() -> SiteSession:
    return container.site_session()


# The search box streams keystrokes to /ws/search; debouncing happens server side.
PAGE_SCRIPT = f"""
(function () {{
  var input = document.getElementById('{SEARCH_INPUT_ID}');
  if (!input) return;
  var proto = location.protocol === 'https:' ? 'wss://' : 'ws://';
  var ws = new WebSocket(proto + location.host + '/ws/search');
  ws.onmessage = function (event) {{
    var msg = JSON.parse(event.data);
    if (msg.type !== 'search_results') return;
    var grid = document.getElementById('{PROJECTS_GRID_ID}');
    if (grid) grid.outerHTML = msg.html;
    var counter = document.getElementById('{RESULTS_COUNTER_ID}');
    if (counter) counter.textContent = msg.counter;
  }};
  input.addEventListener('input', function () {{
    if (ws.readyState === 1) ws.send(JSON.stringify({{type: 'search', term: input.value}}));
  }});
}})();
"""

PAGE_STYLE = """
body{font-family:system-ui,sans-serif;margin:0;color:#222}
.navbar{padding:1rem 2rem;background:#111;color:#fff}
main{max-width:1100px;margin:0 auto;padding:1rem 2rem}
.projects-grid{display:grid;grid-template-columns:repeat(auto-fill,minmax(260px,1fr));gap:1rem}
.project-card{border:1px solid #ddd;border-radius:8px;overflow:hidden}
.project-image{width:100%;display:block}
.project-body{padding:1rem}
.search-container{display:flex;gap:1rem;align-items:center;margin:1rem 0}
.search-input{flex:1;padding:.5rem}
"""


def render_page(session: SiteSession) -> str:
    site = session.site or default_site_data(session.settings)
    return (
        "<!DOCTYPE html>"
        '<html lang="en"><head><meta charset="utf-8">'
        '<meta name="viewport" content="width=device-width, initial-scale=1">'
        f"{session.head_html}"
        f"<style>{PAGE_STYLE}</style>"
        "</head><body>"
        f'<nav class="navbar"><span class="navbar-title">{escape(site.title)}</span></nav>'
        f"<main>{session.intro_html}{session.render_projects_section()}</main>"
        f"<script>{PAGE_SCRIPT}</script>"
        "</body></html>"
    )


@router.get("/", response_class=HTMLResponse)
async def index(session: SiteSession = Depends(get_session)):
    """Full page with the current project grid."""
    await session.initialize()
    return HTMLResponse(render_page(session))


@router.get("/api/site")
async def get_site(session: SiteSession = Depends(get_session)):
    """Site texts and metadata."""
    await session.initialize()
    site = session.site or default_site_data(session.settings)
    return {"success": True, "site": site.model_dump()}


@router.get("/api/projects")
async def list_projects(
    q: str = Query(default="", max_length=200),
    session: SiteSession = Depends(get_session),
):
    """Immediate (non-debounced) search over the loaded projects."""
    await session.initialize()
    result = search_projects(session.store, q)
    return {
        "success": True,
        "term": q,
        "state": result.state.value,
        "grid_state": session.grid_state.value,
        "count": result.count,
        "counter": results_label(result.count),
        "projects": [
            {**session.card_data(record), "record": record.raw}
            for record in result.projects
        ],
    }


@router.post("/api/projects/reload")
async def reload_projects(session: SiteSession = Depends(get_session)):
    """Trigger a project load; dropped if one is already running."""
    await session.initialize()
    started = await session.load_projects()
    if not started:
        logger.info("Reload skipped, a load is already in flight")
    return {
        "success": True,
        "started": started,
        "state": session.grid_state.value,
        "count": len(session.store),
    }
