from __future__ import annotations

from pathlib import Path


class SiteError(Exception):
    pass


class ConfigurationError(SiteError):
    """The site cannot be built as configured. Aborts the whole build."""


class TemplateNotFound(SiteError):
    def __init__(self, path: Path):
        super().__init__(f"Template not found: {path}")
        self.path = path
