"""
BioLink: link-in-bio profiles and AI-generated pages served through a
layered read-path cache.
"""

__version__ = "1.0.0"
