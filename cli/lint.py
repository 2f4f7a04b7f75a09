import sys

from cli._runner import run


def main() -> None:
    """Run linting."""
    sys.exit(run([sys.executable, "-m", "ruff", "check", "."]))


def format() -> None:
    """Run code formatting."""
    sys.exit(run([sys.executable, "-m", "ruff", "format", "."]))
