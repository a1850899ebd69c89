#!/usr/bin/env python3
"""Convenience runner for the Running Route Painter.

Usage:
    python run.py --text 2026 --analog --lat 25.0330 --lng 121.5654 --distance 10000
"""
import logging
from route_painter.main import main

if __name__ == "__main__":
    if not logging.getLogger().hasHandlers():
        logging.basicConfig(level=logging.INFO, format="[%(asctime)s] %(levelname)s %(name)s: %(message)s")
    main()
