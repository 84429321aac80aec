"""CLI entry point.

Allows running the CLI as a module: python -m docextract.cli
"""

from docextract.cli import app

if __name__ == "__main__":
    app()
