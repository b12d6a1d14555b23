"""
Music Diary backend: emotion diary with AI conversation and generated music.
"""

__version__ = "1.0.0"
