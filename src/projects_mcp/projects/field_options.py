"""Field/option name resolution for single-select project fields."""

import logging
from typing import Tuple

from ..connectors.exceptions import FieldNotFoundError, OptionNotFoundError
from ..connectors.pagination import PaginationOptions
from ..connectors.rest import ProjectsRestClient, as_list
from .models import ProjectField, ProjectScope

logger = logging.getLogger(__name__)

DEFAULT_FIELD_PAGE_SIZE = 100


class FieldOptionResolver:
    """Translate a field name and option name into ``(option_id, field_id)``.

    Results are never memoized; every call lists the project's fields again.
    """

    def __init__(self, rest: ProjectsRestClient, page_size: int = DEFAULT_FIELD_PAGE_SIZE):
        self._rest = rest
        self.page_size = page_size

    async def resolve(
        self, scope: ProjectScope, field_name: str, option_name: str
    ) -> Tuple[str, int]:
        response = await self._rest.list_project_fields(
            scope.kind,
            scope.owner,
            scope.project_number,
            PaginationOptions(per_page=self.page_size),
        )
        response.expect(200, "failed to list project fields")

        for raw in as_list(response.data):
            field = ProjectField.from_api(raw)
            if field.name != field_name or field.id is None:
                continue

            option = field.find_option(option_name)
            if option is None:
                raise OptionNotFoundError(field_name, option_name)

            logger.debug(
                "Resolved %s=%s to field %d option %s", field_name, option_name, field.id, option.id
            )
            return option.id, field.id

        raise FieldNotFoundError(field_name)
