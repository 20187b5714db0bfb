"""CLI command modules. Each exposes register(app)."""
