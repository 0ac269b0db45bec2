"""Mumble Migrator configuration."""
