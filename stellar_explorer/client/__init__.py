"""
Terminal presentation client: gateway client, saved preferences and CLI.
"""
