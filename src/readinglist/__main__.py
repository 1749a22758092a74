"""Main entry point for the readinglist package."""

from readinglist.cli import main

if __name__ == "__main__":
    main()
