"""Main entry point for the terminal todo list.

Run with `python src/main.py` or the installed `todo` script.
"""
from cli import main

if __name__ == "__main__":
    main()
