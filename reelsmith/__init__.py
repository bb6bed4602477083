"""
reelsmith: still images to finished, optionally narrated video.
"""

__version__ = "0.1.0"
