from .claude_service import ClaudeService, build_search_prompt, get_claude_service

__all__ = ["ClaudeService", "build_search_prompt", "get_claude_service"]
