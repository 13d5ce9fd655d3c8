"""Shared helpers used across the CLI and the nuget package."""
