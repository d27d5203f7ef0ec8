"""Order Record Store"""

__version__ = "1.0.0"
