"""
Analog watch face engine with power-aware refresh scheduling
"""

__version__ = '1.0.0'
