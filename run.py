"""Entry point for the résumé retrieval CLI."""

from resume_rag.cli import cli


def main() -> None:
    """Run the command-line interface."""
    cli(obj={})


if __name__ == "__main__":
    main()
