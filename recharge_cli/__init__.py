"""
Recharge CLI - Three-layer client for the Recharge Payments API.

Layers:
- core: Config, HTTP dispatch, error taxonomy, pagination and sort validation
- sdk: High-level RechargeClient with typed resource accessors
- cli: Opinionated command-line interface
"""

from recharge_cli.sdk import RechargeClient

__version__ = "0.1.0"
__all__ = ["RechargeClient"]
