"""CLI entry point for MedTrans."""

from cli.commands.main import cli

if __name__ == "__main__":
    cli()
