"""Command-line interface for ai-manager."""
