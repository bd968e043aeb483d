"""
Utility modules for the asset publisher.

- logging: Structured logging with entry/exit decorators
- config: Configuration resolution from defaults, environment and overrides
- config_loader: YAML override files
- retry: Bounded async retry
- metrics: Prometheus counters
- project: Project name discovery
"""

from asset_publisher.utils.logging import get_logger, log_function_call

__all__ = ["get_logger", "log_function_call"]
