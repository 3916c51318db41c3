#!/usr/bin/env python3
"""
tidyup - Command Line Interface
Group the files of a directory into category folders by extension.
"""

from tidyup.cli import main

if __name__ == "__main__":
    main()
