"""Renderer metrics collection."""

from dataclasses import dataclass
from typing import ClassVar


@dataclass
class RendererMetrics:
    """Metrics for digest rendering.

    Attributes:
        documents_rendered: Markdown and JSON documents produced.
        items_rendered: Items across all documents.
        render_duration_ms: Cumulative template rendering time.
    """

    documents_rendered: int = 0
    items_rendered: int = 0
    render_duration_ms: float = 0.0

    _instance: ClassVar["RendererMetrics | None"] = None

    @classmethod
    def get_instance(cls) -> "RendererMetrics":
        """Get or create the singleton instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset(cls) -> None:
        """Reset the singleton instance for testing."""
        cls._instance = None

    def record_document(self, items: int, duration_ms: float) -> None:
        """Record one rendered document."""
        self.documents_rendered += 1
        self.items_rendered += items
        self.render_duration_ms += duration_ms

    def to_dict(self) -> dict[str, int | float]:
        """Export metrics as dictionary."""
        return {
            "documents_rendered": self.documents_rendered,
            "items_rendered": self.items_rendered,
            "render_duration_ms": self.render_duration_ms,
        }
