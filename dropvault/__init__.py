"""
DropVault

File-sharing backend: anonymous and authenticated uploads with tier-based
size, expiry and download-count limits, plus a periodic expiry reaper.
"""

__version__ = "1.0.0"
