"""Digest renderers: markdown profiles and OpenClaw JSON."""

from src.renderer.io import AtomicWriter
from src.renderer.markdown import MarkdownRenderer, meta_line, render_markdown
from src.renderer.metrics import RendererMetrics
from src.renderer.models import GeneratedFile, RenderData, RenderItem, RenderProfile
from src.renderer.openclaw import build_openclaw_payload, render_openclaw_json
from src.renderer.snippet import clean_markdown, generate_snippet


__all__ = [
    "AtomicWriter",
    "GeneratedFile",
    "MarkdownRenderer",
    "RenderData",
    "RenderItem",
    "RenderProfile",
    "RendererMetrics",
    "build_openclaw_payload",
    "clean_markdown",
    "generate_snippet",
    "meta_line",
    "render_markdown",
    "render_openclaw_json",
]
