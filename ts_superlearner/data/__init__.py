"""
Synthetic demo data.
"""

from .dataset import load_demo_series, load_demo_task

__all__ = ['load_demo_series', 'load_demo_task']
