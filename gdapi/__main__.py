"""Main entry point when executing gdapi as a package.

This allows running the package using python -m gdapi.
"""

from gdapi.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
