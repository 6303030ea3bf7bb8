"""Contracts module - client contracts."""

from zena.modules.contracts import models, policies


__all__ = ["models", "policies"]
