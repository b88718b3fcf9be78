#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Timeline Editors - item and character relationship editor windows.
"""

__version__ = "0.1.0"
