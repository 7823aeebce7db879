"""
Package entry point.

Allows running the application via:

    python -m campusassist

This simply forwards execution to campusassist.cli.main().
"""

from campusassist.cli import main

if __name__ == "__main__":
    main()
