"""Entry point for running aicgen as a module.

Usage:
    python -m aicgen [command] [options]

Example:
    python -m aicgen analyze path/to/project
    python -m aicgen cache stats
"""

from aicgen.cli import app

if __name__ == "__main__":
    app()
