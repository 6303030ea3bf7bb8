"""Projects module - projects and their tasks."""

from zena.modules.projects import models, policies


__all__ = ["models", "policies"]
