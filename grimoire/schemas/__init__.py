# -*- coding: utf-8 -*-
"""Data model, value decoding and output records."""
