"""Authorization policies for documents."""

from zena.core.policies import Principal, policies
from zena.modules.documents.models import Document


@policies.register("document", "view_any", "view")
def view_document(principal: Principal, document: Document | None) -> bool:
    return principal.has("document.read")


@policies.register("document", "create")
def create_document(principal: Principal, document: Document | None) -> bool:
    return principal.has("document.write")


@policies.register("document", "update")
def update_document(principal: Principal, document: Document) -> bool:
    return principal.has("document.write") or principal.owns(document)


@policies.register("document", "approve")
def approve_document(principal: Principal, document: Document) -> bool:
    """Approval needs the permission and a second pair of eyes."""
    return principal.has("document.approve") and not principal.owns(document)


@policies.register("document", "delete")
def delete_document(principal: Principal, document: Document) -> bool:
    return principal.has("document.delete")
