"""Client package for the JMX collector.

Provides the management-protocol capability the collector consumes:
- ``protocol``: Interfaces for management clients and their sessions
- ``jolokia``: Implementation over the Jolokia HTTP/JSON JMX bridge
"""
