"""
agent.tools.handlers - One async handler per catalog tool.

Handler signature: ``async def handler(client, params) -> dict``, where
params is an instance of the tool's catalog input model and the returned
dict is serialized to JSON by the executor. Handlers raise freely; the
executor turns every failure into an {"error": ...} payload.
"""
