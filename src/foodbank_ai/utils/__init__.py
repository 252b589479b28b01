"""
Utils Package
=============
Utility functions shared by the FoodBank AI engine.

Modules:
- logger: Centralized logging configuration and text-generation call logs
"""

from .logger import get_logger, LogContext, log_llm_call, Timer

__all__ = [
    'get_logger',
    'LogContext',
    'log_llm_call',
    'Timer'
]
