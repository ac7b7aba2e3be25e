"""Owner, node, field and item resolution for Projects v2."""

from .catalog import ProjectCatalogReader
from .field_options import FieldOptionResolver
from .mutations import ItemMutationCoordinator
from .node_identity import NodeIdentityResolver
from .owner_scope import OwnerScopeResolver

__all__ = [
    "FieldOptionResolver",
    "ItemMutationCoordinator",
    "NodeIdentityResolver",
    "OwnerScopeResolver",
    "ProjectCatalogReader",
]
