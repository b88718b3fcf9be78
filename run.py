#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Timeline Editors - Launcher

This script launches the editors from a source checkout.
"""

import sys
import os

# Add the project directory to the Python path
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

# Import and run the application
from timeline_editors.main import main

if __name__ == "__main__":
    sys.exit(main())
