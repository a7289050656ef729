"""
Package entry point.

Allows running the application via:

    python -m estagios

This simply forwards execution to estagios.cli.main().
"""

from estagios.cli import main

if __name__ == "__main__":
    main()
