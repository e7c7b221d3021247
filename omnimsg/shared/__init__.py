"""
Shared Components

Protocol codec, configuration, logging and data models used by the client.
"""
