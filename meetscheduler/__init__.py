"""
Meeting scheduler: free-slot generation, booking and AI suggestions.
"""

__version__ = "0.1.0"
