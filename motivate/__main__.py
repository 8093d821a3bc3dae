"""
__main__.py

This file adds support for running motivate as a python module (python -m motivate) instead of
invoking the "motivate" command line entrypoint.
"""

from motivate.cli import main


if __name__ == "__main__":
    main()
