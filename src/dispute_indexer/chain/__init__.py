from .name_oracle import JsonRpcNameOracle

__all__ = ["JsonRpcNameOracle"]
