"""
Run with: python -m forkchain
"""
import sys

from forkchain.main import main

if __name__ == "__main__":
    sys.exit(main())
