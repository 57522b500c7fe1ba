"""Collection engine for the JMX collector.

Contains the logic that turns config documents into metric events:
- ``validation``: Shape checks and loading of config documents
- ``alias``: ``${key}`` placeholder resolution in object aliases
- ``metrics``: Metric path construction and value classification
- ``worker``: Collector workers and the worker pool
- ``scheduler``: The discover, drain and pace run loop
"""
