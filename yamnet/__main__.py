"""Main entry point when executing yamnet as a package.

This allows running the package using python -m yamnet.
"""

from yamnet.main import cli_entry_point

if __name__ == "__main__":
    cli_entry_point()
