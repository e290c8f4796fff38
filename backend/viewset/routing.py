"""
ViewSet: Route Table
=====================

What:  The (action, sub-path, method, handler) bindings a ViewSet mounts.
How:   `build_routes` adds the five standard actions in a fixed order, skips
       any whose name is in the exclusion list, then appends custom routes
       verbatim. Update is registered twice (PUT and PATCH) with the same
       handler; there is no separate partial-update behavior.

Route layout (paths relative to the ViewSet base path):

    list      GET     /
    retrieve  GET     <detail>
    create    POST    /
    update    PUT     <detail>
    update    PATCH   <detail>
    delete    DELETE  <detail>
    <custom>  ...     ...          (never filtered by the exclusion list)
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable, Iterable, List, Mapping, Tuple

from starlette.requests import Request
from starlette.responses import Response

if TYPE_CHECKING:
    from viewset.viewset import ViewSet

LIST_ACTION = "list"
RETRIEVE_ACTION = "retrieve"
CREATE_ACTION = "create"
UPDATE_ACTION = "update"
DELETE_ACTION = "delete"

# Signature shared by the standard action procedures and custom handlers
ActionHandler = Callable[[str, "ViewSet", Request], Awaitable[Response]]


@dataclass(frozen=True)
class Route:
    action: str
    sub_path: str
    method: str
    handler: ActionHandler


def build_routes(
    detail_path: str,
    exclude_actions: Iterable[str],
    extra_routes: Iterable[Route],
    handlers: Mapping[str, ActionHandler],
) -> Tuple[Route, ...]:
    """
    Build the ordered route table.

    Args:
        detail_path:     Sub-path for detail routes, e.g. "/{pk}"
        exclude_actions: Standard action names to leave out (exact match)
        extra_routes:    Custom routes, appended after the standard ones
        handlers:        Action name → procedure for list/retrieve/create/
                         update/delete
    """
    excluded = set(exclude_actions)
    standard = (
        (LIST_ACTION, "/", ("GET",)),
        (RETRIEVE_ACTION, detail_path, ("GET",)),
        (CREATE_ACTION, "/", ("POST",)),
        (UPDATE_ACTION, detail_path, ("PUT", "PATCH")),
        (DELETE_ACTION, detail_path, ("DELETE",)),
    )

    routes: List[Route] = []
    for action, sub_path, methods in standard:
        if action in excluded:
            continue
        for method in methods:
            routes.append(Route(action, sub_path, method, handlers[action]))

    routes.extend(extra_routes)
    return tuple(routes)
