from .local_provider import LocalProvider
from .skills_provider import SkillsProvider
from .mcp_provider import MCPProvider

__all__ = ["LocalProvider", "SkillsProvider", "MCPProvider"]
