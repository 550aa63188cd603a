"""Remote API access for Looker and GitHub."""
