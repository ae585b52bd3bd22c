"""
Main entry point for the cortex CLI.
"""

from cortex.cli import cli


def main() -> None:
    """Main function for the cortex CLI."""
    cli()


if __name__ == "__main__":
    main()
