"""
NexusForge Kernel

Configuration trees for bots and storefronts, and the documents derived
from them:

  paths      — copy-on-write path updates
  codegen    — bot config → discord.py program
  renderer   — website config + preview state → HTML document
  preview    — inbound document messages → preview transitions
  storage    — JSON persistence of the app collections
  workspace  — application state and intent-named mutations
  deployment — simulated hosting lifecycle
"""

from forge.kernel.codegen import generate_bot_code
from forge.kernel.paths import InvalidPathError, apply_update, get_at_path
from forge.kernel.preview import PreviewHost, PreviewOutcome, parse_message
from forge.kernel.renderer import checkout_totals, render_site
from forge.kernel.types import (
    CheckoutPreview,
    OrderSuccessPreview,
    PagePreview,
    ProductPreview,
    Project,
)
from forge.kernel.workspace import ProjectNotFound, ValidationError, Workspace

__all__ = [
    "CheckoutPreview",
    "InvalidPathError",
    "OrderSuccessPreview",
    "PagePreview",
    "PreviewHost",
    "PreviewOutcome",
    "ProductPreview",
    "Project",
    "ProjectNotFound",
    "ValidationError",
    "Workspace",
    "apply_update",
    "checkout_totals",
    "generate_bot_code",
    "get_at_path",
    "parse_message",
    "render_site",
]
