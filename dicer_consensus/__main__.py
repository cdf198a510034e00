"""Allow ``python -m dicer_consensus``."""

from .cli.main import cli

if __name__ == "__main__":
    cli()
