# Pulse Launcher Package
"""
Query-time core of the Pulse quick-launcher.

Modules:
  - search: Providers, fuzzy matching, ranking and the orchestrator
  - services: Usage statistics, change signals and the execution sink
  - app: Wires everything together from settings
"""

__version__ = "0.1.0.dev0"
