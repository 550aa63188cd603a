"""LookML Transfer Tool

Moves LookML projects from one Looker instance to another, re-links them
to GitHub with a fresh deploy key and deploys them to production.
"""

__version__ = '0.1.0'
