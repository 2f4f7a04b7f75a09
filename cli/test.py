import sys

from cli._runner import run


def main() -> None:
    """Run unit tests."""
    sys.exit(run([sys.executable, "-m", "pytest"]))


def test_v() -> None:
    """Run tests with verbose output."""
    sys.exit(run([sys.executable, "-m", "pytest", "-v"]))


def test_integration() -> None:
    """Run database integration tests only (needs DATABASE_URL_APP)."""
    sys.exit(run([sys.executable, "-m", "pytest", "-m", "integration"]))
