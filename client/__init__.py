"""
Terminal front end for termchat.

Draws channel views with blessed and runs the key-driven session loop.

Usage:
    termchat path/to/config.json
"""
