"""
Prompt Template Engine for model prompts.
Loads YAML prompt configurations and renders them with Jinja2.
"""
import yaml
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, TemplateError

from video_pipeline.core.exceptions import ConfigurationError
from video_pipeline.utils.logging import CorrelatedLogger


@dataclass
class PromptConfig:
    """Configuration for one prompt template."""
    name: str
    system_role: str
    template: str


class PromptTemplateEngine:
    """
    Template engine for managing and rendering prompts.

    Each prompt lives in ``<prompts_dir>/<name>.yaml`` with a ``template``
    (Jinja2 source) and an optional ``system_role``.
    """

    def __init__(self, prompts_dir: Optional[str] = None):
        """
        Initialize the template engine.

        Args:
            prompts_dir: Directory holding the YAML prompt files. Defaults to video_pipeline/config/prompts/
        """
        self.logger = CorrelatedLogger(__name__)

        if prompts_dir is None:
            prompts_dir = Path(__file__).parent.parent / "prompts"
        self.prompts_dir = Path(prompts_dir)

        self.jinja_env = Environment(
            trim_blocks=True,
            lstrip_blocks=True,
            autoescape=False
        )

        # Cache for loaded configurations
        self._config_cache: Dict[str, PromptConfig] = {}

    def load_prompt_config(self, name: str) -> PromptConfig:
        """
        Load prompt configuration by name.

        Raises:
            ConfigurationError: If configuration cannot be loaded
        """
        if name in self._config_cache:
            return self._config_cache[name]

        config_path = self.prompts_dir / f"{name}.yaml"
        if not config_path.exists():
            raise ConfigurationError(
                f"prompt '{name}'",
                f"not found at {config_path}; available: {self.get_available_prompts()}"
            )

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"prompt '{name}'", str(e))

        if not str(config_data.get('template', '')).strip():
            raise ConfigurationError(f"prompt '{name}'", "template cannot be empty")

        config = PromptConfig(
            name=name,
            system_role=(config_data.get('system_role') or '').strip(),
            template=config_data['template'],
        )
        self._config_cache[name] = config
        self.logger.info(f"Loaded prompt configuration: {name}")
        return config

    def render_prompt(self, name: str, **template_vars) -> str:
        """Render a prompt template with the given variables."""
        config = self.load_prompt_config(name)
        try:
            prompt = self.jinja_env.from_string(config.template).render(**template_vars)
        except TemplateError as e:
            self.logger.error(f"Failed to render prompt {name}: {str(e)}")
            raise ConfigurationError(f"prompt '{name}'", f"rendering failed: {str(e)}")

        self.logger.debug(f"Rendered prompt {name} ({len(prompt)} chars)")
        return prompt.strip()

    def get_system_role(self, name: str) -> Optional[str]:
        """System instruction for a prompt, or None when it has none."""
        return self.load_prompt_config(name).system_role or None

    def get_available_prompts(self) -> List[str]:
        """List prompt names found in the prompts directory."""
        if not self.prompts_dir.exists():
            return []
        return sorted(p.stem for p in self.prompts_dir.glob("*.yaml"))


# Global template engine instance
_template_engine = None


def get_template_engine() -> PromptTemplateEngine:
    """Get global template engine instance (singleton pattern)."""
    global _template_engine
    if _template_engine is None:
        _template_engine = PromptTemplateEngine()
    return _template_engine
