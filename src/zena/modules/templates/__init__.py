"""Templates module - reusable project templates."""

from zena.modules.templates import models, policies


__all__ = ["models", "policies"]
