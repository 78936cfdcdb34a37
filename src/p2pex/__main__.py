# src/p2pex/__main__.py
"""Module entry point: python -m p2pex"""

from p2pex.app import main

if __name__ == "__main__":
    main()
