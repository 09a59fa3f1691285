"""
agent.tools - Tool catalog (what the model sees) and executor (what runs).
"""
