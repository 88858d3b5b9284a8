"""
commonmk - shared build, container and database operations targets.
"""
__version__ = "1.0.0"
