"""Entry point for running the CLI as a module.

Usage: python -m omo_config resolve oracle
"""

from omo_config.cli import main_entry

if __name__ == "__main__":
    main_entry()
