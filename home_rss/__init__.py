"""Feed panels for a home surface.

Subscribing to a page's feed creates a panel backed by a dataset of feed
items; the ids of every panel and dataset are kept in a preference-backed
registry so that uninstall can remove them again.
"""

__version__ = "1.0.0"
