"""CLI entry point for python -m animlogo"""
from animlogo.cli.commands import app

if __name__ == "__main__":
    app()
