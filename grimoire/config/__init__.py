# -*- coding: utf-8 -*-
from grimoire.config.loader import ConfigLoader, grimoire_config

__all__ = ["ConfigLoader", "grimoire_config"]
