"""Markdown digest renderer using Jinja2 templates."""

import time
from datetime import UTC

import structlog
from jinja2 import Environment, PackageLoader, select_autoescape

from src.collectors.constants import HN_ITEM_URL, V2EX_NODE_URL
from src.renderer.metrics import RendererMetrics
from src.renderer.models import RenderData, RenderItem
from src.store.models import Source


logger = structlog.get_logger()

TEMPLATE_NAME = "digest.md.j2"
FRONT_MATTER_SUMMARY_CHARS = 100


def yaml_escape(value: str) -> str:
    """Escape a value for a double-quoted YAML scalar on one line."""
    escaped = value.replace("\\", "\\\\").replace('"', '\\"')
    return escaped.replace("\r\n", " ").replace("\n", " ")


def front_matter_summary(summary: str) -> str:
    """First line of the first 100 characters of the summary."""
    return summary[:FRONT_MATTER_SUMMARY_CHARS].split("\n")[0]


def meta_line(entry: RenderItem) -> str:
    """Italic meta line with engagement, discussion link, time and author."""
    item = entry.item
    posted = item.created_at.astimezone(UTC).strftime("%Y-%m-%d %H:%M")
    if item.source == Source.HACKERNEWS:
        discussion = HN_ITEM_URL.format(id=item.id)
        return (
            f"*{item.points} 分 · {item.replies} 评论 · [HN 讨论]({discussion})"
            f" · {posted} · by {item.author}*"
        )
    node_url = V2EX_NODE_URL.format(node=item.category)
    return (
        f"*{item.replies} 回复 · [@{item.category}]({node_url})"
        f" · {posted} · by {item.author}*"
    )


def _build_environment() -> Environment:
    env = Environment(
        loader=PackageLoader("src.renderer", "templates"),
        autoescape=select_autoescape(["html", "xml"]),
        trim_blocks=True,
        lstrip_blocks=True,
    )
    env.filters["yaml_escape"] = yaml_escape
    env.filters["front_matter_summary"] = front_matter_summary
    env.filters["meta_line"] = meta_line
    return env


class MarkdownRenderer:
    """Renders a digest document for either output profile."""

    def __init__(self, metrics: RendererMetrics | None = None) -> None:
        self._env = _build_environment()
        self._metrics = metrics or RendererMetrics.get_instance()
        self._log = logger.bind(component="renderer")

    def render(self, data: RenderData) -> str:
        """Render ``data`` to markdown.

        Args:
            data: Title, date, overall summary, items and profile.

        Returns:
            Markdown text with YAML front matter.
        """
        start = time.perf_counter()
        template = self._env.get_template(TEMPLATE_NAME)
        content = template.render(
            title=data.title,
            date=data.date,
            summary=data.summary,
            items=data.items,
            profile=data.profile.value,
        )
        duration_ms = (time.perf_counter() - start) * 1000
        self._metrics.record_document(len(data.items), duration_ms)
        self._log.debug(
            "markdown_rendered",
            profile=data.profile.value,
            items=len(data.items),
            duration_ms=round(duration_ms, 2),
        )
        return content


def render_markdown(data: RenderData) -> str:
    """Render a digest document with a fresh renderer."""
    return MarkdownRenderer().render(data)
