"""bytebite - a personal RSS feed reader.

Keeps a catalog of subscribed feeds and an archive of their articles in JSON
documents, and refreshes feeds with conditional requests.
"""

__version__ = "0.1.0"
