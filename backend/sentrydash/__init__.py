"""
sentrydash: live room occupancy tracking with relocation suggestions.
"""

__version__ = "0.1.0"
