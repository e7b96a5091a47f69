"""
AI Docs Analytics.

Classifies documentation-site visitors (coding agents, browsing agents,
bots, humans), records each page view as a raw event plus a derived visit
event, and serves domain-scoped reports over the recorded data.
"""

__version__ = "0.1.0"
