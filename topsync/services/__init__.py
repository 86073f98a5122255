"""
Outbound integrations (Top.gg).
"""
