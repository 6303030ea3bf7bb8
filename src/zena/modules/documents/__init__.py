"""Documents module - project document metadata."""

from zena.modules.documents import models, policies


__all__ = ["models", "policies"]
