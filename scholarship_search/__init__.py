"""
Scholarship Search - Scholarship listing importer.

This package provides functionality to:
- Fetch scholarship listing pages from configured sources
- Extract structured records from their HTML
- Remove duplicate listings within and across runs
- Normalize posted and deadline dates
- Store new listings tagged with their source category
"""

__version__ = "1.1.0"
__author__ = "Scholarship Search Team"
