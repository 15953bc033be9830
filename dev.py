"""Development script to run checks (formatting, linting, tests)."""

import argparse
import subprocess
import sys


def run_check(command: list[str], label: str) -> None:
    """Run one topicsdk check and stop at the first failure."""
    print(f"\n--- topicsdk: {label} ---")
    result = subprocess.run(command, check=False)
    if result.returncode != 0:
        print(f"\n❌ {label} failed with exit code {result.returncode}")
        sys.exit(result.returncode)


def main() -> None:
    """Format and lint the code, then run the tests."""
    parser = argparse.ArgumentParser(description="Run development checks.")
    parser.add_argument(
        "--ci",
        action="store_true",
        help="Check formatting and lint without rewriting any file",
    )
    args = parser.parse_args()

    if args.ci:
        run_check(["ruff", "format", "--check"], "Ruff Format Check")
        run_check(["ruff", "check"], "Ruff Linting")
    else:
        run_check(["ruff", "format"], "Ruff Formatting")
        run_check(["ruff", "check", "--fix"], "Ruff Linting & Fixes")

    run_check([sys.executable, "-m", "pytest", "-q"], "Tests")

    print("\n✅ All development checks passed successfully.")


if __name__ == "__main__":
    main()
