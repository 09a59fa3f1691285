"""
adapters - Entry points that drive the application (terminal CLI).
"""
