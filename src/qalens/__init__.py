"""
qalens - QA resource and tool gateway.

Resolves ``qa://`` locators into confined paths under fixed test-report and
site-configuration roots, performs bounded reads, and runs text analyzers
over test reports and configuration. Served over MCP stdio by ``qalens serve``.
"""

__version__ = "0.1.0"
