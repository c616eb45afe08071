"""Template system for prompt generation."""

from .prompt_templates import PromptConfig, PromptTemplateEngine, get_template_engine

__all__ = ['PromptConfig', 'PromptTemplateEngine', 'get_template_engine']
