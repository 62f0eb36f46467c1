"""
The Daily Dog - news publishing site
"""

__version__ = "1.0.0"
