"""
TrainerHub - authentication and session core for the personal-trainer platform.
"""

__version__ = "0.1.0"
