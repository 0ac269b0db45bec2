"""Database adapters for the migration source and destination."""
