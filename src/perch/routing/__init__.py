"""Routing — per-router route tables with trie matching.

The default ``Grammar`` resolves URLs into instruction trees and
generates URLs from named routes.  Each router node's table is compiled
into a trie keyed by the router's name.
"""
