"""
musicdb - an in-memory music track database.

Songs are kept in an ordered collection with search, sort, split and merge
operations, and are saved to and loaded from tab-delimited text files.
"""

__version__ = "0.1.0"
__author__ = "musicdb Contributors"
__license__ = "GPL-2.0"

from musicdb.core.database import MusicDatabase
from musicdb.core.secondary import Comparator, SearchField
from musicdb.core.song import Song

__all__ = ["Comparator", "MusicDatabase", "SearchField", "Song", "__version__"]
