"""
infrastructure - Concrete implementations of domain ports.

Contains all vendor-specific code: LangChain chat models, the COSMO HTTP
client, environment configuration. Depends on domain/ only.
"""
