"""Entry point for running poolhalt as a module.

This allows running the CLI with:
    python -m poolhalt
"""

from poolhalt.cli.main import main

if __name__ == "__main__":
    main()
