"""Achievement & progress engine for health tracking"""

__version__ = "0.1.0"
