"""
Document block builders.

Auto-imports all block modules to trigger registration.
"""

# Import all blocks (triggers auto-registration)
from . import header
from . import student_table
from . import observation_table
from . import signature

__all__ = [
    'header',
    'student_table',
    'observation_table',
    'signature',
]
