"""
slotbooker - offer and reserve demo appointment slots on an external calendar.
"""

__version__ = "0.3.0"
