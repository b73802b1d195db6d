"""File transforms used by the build tasks (no config or logging here)."""
