"""
The `integrations` module provides the connectors drun uses to reach the
container daemon, through either the docker command line client or the
Docker SDK for Python.
"""
