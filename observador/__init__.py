"""
Student Observation Record engine.

Builds the institutional "Observador del Estudiante" for one student and
renders it as an editable DOCX or a fixed-page PDF.
"""

__version__ = '1.0.0'
