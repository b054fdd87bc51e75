"""CLI entry point for configuration introspection.

Usage:
    python -m kgflow.config
    python -m kgflow.config --check
    python -m kgflow.config --json
"""

from .introspection import main

if __name__ == "__main__":
    main()
