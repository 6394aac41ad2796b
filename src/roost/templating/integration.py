"""Kida environment setup and app binding.

Creates a kida Environment from roost's AppConfig and binds
user-registered filters. The environment is created
once during App._freeze() and passed through the request pipeline.
"""

from collections.abc import Callable
from typing import Any

from kida import ChoiceLoader, Environment, FileSystemLoader

from roost.config import AppConfig
from roost.templating.returns import InlineTemplate, Template


def create_environment(
    config: AppConfig,
    filters: dict[str, Callable[..., Any]],
    *,
    extra_dirs: tuple[str, ...] = (),
) -> Environment:
    """Create a kida Environment from app configuration.

    ``config.template_dir`` is searched first, then *extra_dirs* in order.
    """
    loaders = [FileSystemLoader(str(config.template_dir))]
    loaders.extend(FileSystemLoader(str(d)) for d in extra_dirs)

    env = Environment(
        loader=ChoiceLoader(loaders),
        autoescape=config.autoescape,
        auto_reload=config.debug,
        trim_blocks=config.trim_blocks,
        lstrip_blocks=config.lstrip_blocks,
    )

    if filters:
        env.update_filters(filters)

    return env


def render_template(env: Environment, tpl: Template) -> str:
    """Render a full template to string."""
    template = env.get_template(tpl.name)
    return template.render(tpl.context)


def render_inline(env: Environment, tpl: InlineTemplate) -> str:
    """Compile and render a string template."""
    template = env.from_string(tpl.source)
    return template.render(tpl.context)
