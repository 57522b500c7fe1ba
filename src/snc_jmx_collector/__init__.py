"""SNC JMX collector package.

This package polls remote JVMs through their management interface on a fixed
schedule and emits one event per metric to a downstream pipeline.
"""

# Intentionally do not re-export symbols from submodules so that importing the
# package does not load the settings from the environment. Consumers import
# individual modules (e.g., ``main``) directly.

__all__: list[str] = []
