"""Product usage registry: Supabase-backed with a local SQLite fallback."""

__version__ = "1.0.0"
