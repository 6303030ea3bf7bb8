"""Tenants module - organizations that own all scoped data."""
