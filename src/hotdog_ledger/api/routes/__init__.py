"""HTTP route modules. Each exposes a ``router(...)`` factory."""
