# -*- coding: utf-8 -*-
"""Utility helpers that work across layers."""
