"""
RssDigest Ingestion Module
==========================

Feed collaborators used by the processing pipeline.

This module handles:
- Opening feed locations (HTTP(S) and local files)
- Normalizing RSS/Atom documents with feedparser
- Converting feed text and HTML to ConTeXt
"""
