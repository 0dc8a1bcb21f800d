# -*- coding: utf-8 -*-
"""Grimoire front-ends (HTTP API and CLI)."""
