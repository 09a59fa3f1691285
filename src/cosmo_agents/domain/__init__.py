"""
domain - Value objects, ports and exceptions.

Pure Python. Never imports from agent/, application/ or infrastructure/.
"""
