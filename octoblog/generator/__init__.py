"""Load, render and emit a blog site from its source tree."""

from .images import ImageAltExtension
from .models import BuildReport, Page, Paginator, Post
from .renderer import MarkdownConverter
from .site import Site, SiteState

__all__ = [
    "BuildReport",
    "ImageAltExtension",
    "MarkdownConverter",
    "Page",
    "Paginator",
    "Post",
    "Site",
    "SiteState",
]
