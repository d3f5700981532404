"""
Core modules: layout constants, records, document model, block registry,
configuration and errors.
"""
