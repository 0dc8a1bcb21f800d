# -*- coding: utf-8 -*-
"""Grimoire command-line interface."""
