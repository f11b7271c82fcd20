"""HTML fragment builders for sections, project cards and the search box.

Builders only receive resolved primitive values; they never inspect raw
Baserow payloads except to list the extra (non-base) fields of a card.
"""

from html import escape
from typing import Dict, List, Optional, Sequence

from constants import (
    GRID_MESSAGE_CLASSES,
    GRID_MESSAGES,
    GridState,
    PROJECTS_GRID_ID,
    RESULTS_COUNTER_ID,
    SEARCH_INPUT_ID,
    results_label,
)
from models.records import ProjectRecord, TableField
from services.fields import field_text


def build_section(id: str, title: str, content: str, css_class: str, body: str = "") -> str:
    """A titled page section. `body` is trusted, already-built HTML."""
    paragraphs = "".join(
        f"<p>{escape(line)}</p>" for line in (content or "").split("\n") if line.strip()
    )
    return (
        f'<section id="{escape(id)}" class="cms-section {escape(css_class)}">'
        f'<h2 class="section-title">{escape(title or "")}</h2>'
        f'<div class="section-content">{paragraphs}</div>'
        f"{body}"
        f"</section>"
    )


def _extra_fields(record: ProjectRecord, field_defs: Optional[Sequence[TableField]],
                  base_field_ids: Sequence[str]) -> List[Dict[str, str]]:
    if not field_defs:
        return []
    extras = []
    for field in field_defs:
        if field.name in base_field_ids:
            continue
        text = field_text(record, field.name)
        if text:
            extras.append({"name": field.name, "value": text})
    return extras


def build_project_card(
    title: str,
    description: str,
    image_url: Optional[str],
    link: str,
    record: ProjectRecord,
    field_defs: Optional[Sequence[TableField]],
    base_field_ids: Sequence[str],
) -> str:
    """One project card. Missing values render as empty, never fail."""
    parts = ['<article class="project-card">']
    if image_url:
        parts.append(
            f'<img class="project-image" src="{escape(image_url)}" '
            f'alt="{escape(title or "")}" loading="lazy">'
        )
    parts.append('<div class="project-body">')
    parts.append(f'<h3 class="project-title">{escape(title or "")}</h3>')
    parts.append(f'<p class="project-description">{escape(description or "")}</p>')

    extras = _extra_fields(record, field_defs, base_field_ids)
    if extras:
        parts.append('<dl class="project-fields">')
        for extra in extras:
            parts.append(f"<dt>{escape(extra['name'])}</dt><dd>{escape(extra['value'])}</dd>")
        parts.append("</dl>")

    if link:
        parts.append(
            f'<a class="project-link" href="{escape(link)}" target="_blank" '
            f'rel="noopener">View project</a>'
        )
    parts.append("</div></article>")
    return "".join(parts)


def build_grid_message(state: GridState) -> str:
    """Placeholder paragraph for non-result grid states."""
    message = GRID_MESSAGES.get(state, "")
    if not message:
        return ""
    css_class = GRID_MESSAGE_CLASSES.get(state, "empty-message")
    return f'<p class="{css_class}">{escape(message)}</p>'


def build_grid(cards_html: str) -> str:
    return f'<div id="{PROJECTS_GRID_ID}" class="projects-grid">{cards_html}</div>'


def build_search_box(count: int) -> str:
    """Search input plus results counter."""
    return (
        '<div class="search-container">'
        f'<input type="search" id="{SEARCH_INPUT_ID}" class="search-input" '
        'placeholder="🔍 Search projects..." aria-label="Search projects">'
        f'<span id="{RESULTS_COUNTER_ID}" class="results-counter">{results_label(count)}</span>'
        "</div>"
    )
