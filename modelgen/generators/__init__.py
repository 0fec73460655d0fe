"""Template rendering for the generated layers."""

from .renderer import TEMPLATE_DIR, TemplateRenderer, base_path, get_renderer

__all__ = ["TemplateRenderer", "get_renderer", "base_path", "TEMPLATE_DIR"]
