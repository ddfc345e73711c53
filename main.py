#!/usr/bin/env python3
"""
Main Entry Point

refgraph - reading-list analytics over a citation network
"""

import sys

from dotenv import load_dotenv

from refgraph.main import main

if __name__ == "__main__":
    load_dotenv()
    sys.exit(main())
