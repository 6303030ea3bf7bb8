"""Authorization policies for project templates."""

from zena.core.policies import Principal, policies
from zena.modules.templates.models import Template


@policies.register("template", "view_any", "view")
def view_template(principal: Principal, template: Template | None) -> bool:
    return principal.has("template.read")


@policies.register("template", "create", "update")
def write_template(principal: Principal, template: Template | None) -> bool:
    return principal.has("template.write")


@policies.register("template", "apply")
def apply_template(principal: Principal, template: Template) -> bool:
    return principal.has("template.apply")


@policies.register("template", "delete")
def delete_template(principal: Principal, template: Template) -> bool:
    return principal.has("template.delete") or principal.owns(template)
