"""
MCP JSON-RPC route for SerpNexus.
"""
