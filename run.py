#!/usr/bin/env python
"""
Development convenience script to run the ctags language server.
"""
import sys
import os

# Add src directory to path
src_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'src')
sys.path.insert(0, src_path)

try:
    from ctags_ls.server import main

    if __name__ == "__main__":
        main()
except Exception:
    # Exit silently on failure; stdout belongs to the protocol
    raise SystemExit(1)
