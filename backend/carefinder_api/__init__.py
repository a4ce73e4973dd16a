"""CareFinder backend - medical facility search API"""

__version__ = "0.1.0"
