"""Scaffolding for new projects and workflows."""
