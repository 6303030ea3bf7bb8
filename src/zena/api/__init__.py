"""HTTP API: shared dependencies and the versioned router."""
