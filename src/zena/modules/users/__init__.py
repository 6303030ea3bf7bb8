"""Users module - authenticated subjects."""
