"""Core module: settings and logging."""
