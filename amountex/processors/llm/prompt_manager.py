"""
Prompt loading for the LLM strategies

Each prompt lives in ``amountex/prompts/<name>.yaml`` with a plain
``system_prompt`` and a jinja2 ``user_prompt_template``.
"""

import logging
from pathlib import Path
from typing import Dict, Optional, Tuple

import yaml
from jinja2 import Environment, StrictUndefined, TemplateError

from amountex.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PROMPTS_DIR = Path(__file__).resolve().parent.parent.parent / "prompts"

REQUIRED_KEYS = ('system_prompt', 'user_prompt_template')


class PromptManager:
    """
    Renders the system and user prompt pair for a named prompt.

    Templates render with ``StrictUndefined``, so a variable the caller
    did not pass is an error instead of an empty string.
    """

    def __init__(self, prompts_dir: Optional[str] = None):
        self.prompts_dir = Path(prompts_dir) if prompts_dir else DEFAULT_PROMPTS_DIR
        self._environment = Environment(undefined=StrictUndefined, autoescape=False)
        self._prompts: Dict[str, Dict[str, str]] = {}

    def load_prompt(self, prompt_name: str) -> Dict[str, str]:
        """
        Read and cache ``<prompt_name>.yaml``.

        Raises:
            ConfigurationError: If the file is missing, unreadable or lacks
                one of the two prompt keys
        """
        if prompt_name in self._prompts:
            return self._prompts[prompt_name]

        prompt_file = self.prompts_dir / f"{prompt_name}.yaml"
        if not prompt_file.is_file():
            raise ConfigurationError(f"Prompt file not found: {prompt_file}")

        try:
            with open(prompt_file, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Failed to load prompt {prompt_name}: {e}") from e

        missing = [key for key in REQUIRED_KEYS if not isinstance(data.get(key), str)]
        if missing:
            raise ConfigurationError(f"Prompt {prompt_name} is missing {', '.join(missing)}")

        logger.debug(f"📝 Loaded prompt {prompt_name} from {prompt_file}")
        self._prompts[prompt_name] = data
        return data

    def render(self, prompt_name: str, **variables) -> Tuple[str, str]:
        """
        Render a prompt.

        Returns:
            (system_prompt, user_prompt)
        """
        data = self.load_prompt(prompt_name)
        try:
            user_prompt = self._environment.from_string(data['user_prompt_template']).render(**variables)
        except TemplateError as e:
            raise ConfigurationError(f"Cannot render prompt {prompt_name}: {e}") from e
        return data['system_prompt'].strip(), user_prompt


_default_prompt_manager: Optional[PromptManager] = None


def get_prompt_manager() -> PromptManager:
    """Shared manager for the packaged prompts"""
    global _default_prompt_manager
    if _default_prompt_manager is None:
        _default_prompt_manager = PromptManager()
    return _default_prompt_manager
