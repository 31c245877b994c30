"""
Core package: domain exceptions, identifier rules and provider fallback.

Shared by the gateway routes, the upstream clients and the terminal client.
"""
