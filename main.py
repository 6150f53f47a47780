"""
Revezamento — Entry Point.

Single entry point: `python main.py <command>` runs the operator CLI.
"""

from src.cli import main

if __name__ == "__main__":
    main()
