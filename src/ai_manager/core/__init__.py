"""Reconciliation engine, state store and project operations."""
