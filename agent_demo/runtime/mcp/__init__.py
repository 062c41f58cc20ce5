from .client_manager import MCPClientManager, MCPError, translate_call_result
from .config import MCPServerConfig, interpolate, interpolate_object, load_env_file, load_server_configs

__all__ = [
    "MCPClientManager",
    "MCPError",
    "MCPServerConfig",
    "interpolate",
    "interpolate_object",
    "load_env_file",
    "load_server_configs",
    "translate_call_result",
]
