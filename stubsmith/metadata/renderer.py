"""Renders fragments and id constants into source text for the extension build."""

from __future__ import annotations

from pathlib import Path

from jinja2 import Environment, FileSystemLoader, TemplateNotFound

_DEFAULT_TEMPLATES = Path(__file__).with_name("templates")


class TemplateError(RuntimeError):
    """Raised when a template pack lacks a required template."""


class FragmentRenderer:
    """Looks up templates in a user directory first, then in the selected pack."""

    FRAGMENT_TEMPLATE = "fragment.j2"
    ID_CONSTANT_TEMPLATE = "id_constant.j2"
    MODULE_SCOPE_TEMPLATE = "module_scope.j2"

    def __init__(
        self,
        templates_dir: Path | None = None,
        *,
        template_pack: str = "rust",
    ) -> None:
        self.templates_dir = templates_dir
        self.template_pack = template_pack
        self._env = self._create_env(templates_dir, template_pack)

    def render_fragment(self, *, static_name: str, expression: str) -> str:
        return self._render(
            self.FRAGMENT_TEMPLATE, static_name=static_name, expression=expression
        )

    def render_id_constant(
        self, *, element_type: str, ident: str, id_constant: str, value: str
    ) -> str:
        """Render the id constant where references to ``ident`` look it up.

        Classes get it as an associated constant, functions inside a module
        named after the function, and modules at the top of their own scope.
        """
        return self._render(
            self.ID_CONSTANT_TEMPLATE,
            element_type=element_type,
            ident=ident,
            id_constant=id_constant,
            value=value,
        )

    def render_module_scope(self, *, ident: str, body: str) -> str:
        return self._render(self.MODULE_SCOPE_TEMPLATE, ident=ident, body=body.rstrip("\n"))

    def _render(self, template_name: str, **context: object) -> str:
        try:
            template = self._env.get_template(template_name)
        except TemplateNotFound as exc:
            raise TemplateError(
                f"Template {template_name!r} not found in pack {self.template_pack!r}"
            ) from exc
        return template.render(**context).rstrip() + "\n"

    @staticmethod
    def _create_env(templates_dir: Path | None, template_pack: str) -> Environment:
        search_path = [str(_DEFAULT_TEMPLATES / template_pack)]
        if templates_dir:
            search_path.insert(0, str(templates_dir))
        loader = FileSystemLoader(search_path)
        return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


__all__ = ["FragmentRenderer", "TemplateError"]
