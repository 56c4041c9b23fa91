"""
Convenience entry point for running meetscheduler directly.

Usage: python -m meetscheduler [command] [options]
"""

from .cli.app import app

if __name__ == "__main__":
    app()
