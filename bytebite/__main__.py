"""Main module for the bytebite MCP server.

This module allows the server to be run as a Python module using:
python -m bytebite

It delegates to the server application's main function.
"""

from bytebite.server.app import main

if __name__ == "__main__":
    main()
