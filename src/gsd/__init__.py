"""
GSD Agents - autonomous task execution against interchangeable LLM backends.
"""

__version__ = "0.1.0"
