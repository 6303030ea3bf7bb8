"""Authorization policies for projects and tasks."""

from zena.core.policies import Principal, policies
from zena.modules.projects.models import Project, Task


@policies.register("project", "view_any", "view")
def view_project(principal: Principal, project: Project | None) -> bool:
    return principal.has("project.read")


@policies.register("project", "create")
def create_project(principal: Principal, project: Project | None) -> bool:
    return principal.has("project.write")


@policies.register("project", "update")
def update_project(principal: Principal, project: Project) -> bool:
    """Writers may edit any project; creators may edit their own."""
    return principal.has("project.write") or principal.owns(project)


@policies.register("project", "delete")
def delete_project(principal: Principal, project: Project) -> bool:
    return principal.has("project.delete")


@policies.register("task", "view_any")
def view_tasks(principal: Principal, task: Task | None) -> bool:
    return principal.has("task.read")


@policies.register("task", "view")
def view_task(principal: Principal, task: Task) -> bool:
    return principal.has("task.read") or task.assignee_id == principal.user_id


@policies.register("task", "create")
def create_task(principal: Principal, task: Task | None) -> bool:
    return principal.has("task.write")


@policies.register("task", "update")
def update_task(principal: Principal, task: Task) -> bool:
    """Writers, the creator and the assignee may edit a task."""
    return (
        principal.has("task.write")
        or principal.owns(task)
        or task.assignee_id == principal.user_id
    )


@policies.register("task", "assign")
def assign_task(principal: Principal, task: Task) -> bool:
    return principal.has("task.assign")


@policies.register("task", "delete")
def delete_task(principal: Principal, task: Task) -> bool:
    return principal.has("task.delete")
