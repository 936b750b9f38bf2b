"""
connect4ai.data - Persistence of training jobs and model records
"""

from connect4ai.data.data_manager import JobRegistry

__all__ = ['JobRegistry']
