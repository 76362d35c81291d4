"""Entry point for ``python -m rpcwire``."""

from rpcwire.cli.commands import app

if __name__ == "__main__":
    app()
