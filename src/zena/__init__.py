"""Zena: tenant isolation and authorization core."""
