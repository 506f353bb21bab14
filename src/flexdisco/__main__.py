"""Main entry point for flexdisco commands."""

from flexdisco.cli.main import main


if __name__ == "__main__":
    main()
