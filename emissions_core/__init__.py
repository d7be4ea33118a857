"""
Emissions core REST API

A small REST API serving emission reports and daily emission records
to demonstrate conditional requests (entity tags with ``If-Match``)
to prevent lost updates as well as offset-based result pagination.
"""

from .version import __version__
