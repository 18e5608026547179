"""
Entry point for running Brand Visibility as a module.

Enables execution via:
    python -m brand_visibility [command] [options]

This is equivalent to running the installed CLI:
    brand-visibility [command] [options]

Examples:
    python -m brand_visibility --help
    python -m brand_visibility analyze --config examples/brands.config.yaml --responses examples/responses.json
    python -m brand_visibility dedupe --prompts examples/prompts.txt
"""

from brand_visibility.cli import app

if __name__ == "__main__":
    app()
