#!/usr/bin/env python3
# -*- coding: utf-8 -*-

"""
Local host package for the Timeline Editors application.

This package contains the database models and the channel handlers that let
the editor windows run without an external host.
"""

from timeline_editors.host.database import Database
from timeline_editors.host.local_host import LocalHost

__all__ = ['Database', 'LocalHost']
