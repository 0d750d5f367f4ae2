"""
Package entry point.

Allows running the application via:

    python -m coursecal
"""

from coursecal.cli import main

if __name__ == "__main__":
    main()
