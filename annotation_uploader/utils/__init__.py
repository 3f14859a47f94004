"""Shared utilities: palette color matching and field validators."""
