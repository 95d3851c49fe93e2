from __future__ import annotations

from .errors import ConfigurationError, SiteError, TemplateNotFound

__version__ = "0.1.0"

__all__ = ["ConfigurationError", "SiteError", "TemplateNotFound", "__version__"]
