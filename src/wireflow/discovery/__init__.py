"""Workflow discovery and display helpers for the CLI."""
