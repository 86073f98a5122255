"""
topsync: a small Discord bot that syncs its slash commands and republishes
them to Top.gg.
"""

__version__ = "0.1.0"
