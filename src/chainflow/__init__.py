"""iptables-chainflow - chain-relationship graph engine for iptables rule sets."""

__version__ = "0.3.0"

from .core.exceptions import ChainFlowError

__all__ = ["ChainFlowError", "__version__"]
