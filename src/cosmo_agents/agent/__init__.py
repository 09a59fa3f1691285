"""
agent - Conversational agent layer.

Contains the tool catalog and executor, prompts, the bounded tool-use loop
and the multi-agent orchestrator. Depends on domain/ and application/.
Never imports from infrastructure/.
"""
