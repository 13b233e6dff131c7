#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Dev Helper Engine v1.0
Priority scoring, priority suggestions and gamified progression for task tracking

Version: 1.0.0
Date: 2026-10-19
"""

__version__ = "1.0.0"
