"""Declarative catalog of the Directus resource operations.

Every resource method on DirectusClient (``get_items``, ``create_bulk``,
``get_api``...) is an ``Operation`` record in ``CATALOG``. One dispatcher binds
the caller's arguments, validates them before any network I/O, fills in the path
template and hands the request to the matching verb primitive on the client.
``install_catalog`` attaches a sync method and an ``_async`` twin for every entry.
"""

from __future__ import annotations

import inspect
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from directusclient.exceptions import MissingParameterError, TypeMismatchError

GET = "GET"
POST = "POST"
PUT = "PUT"
DELETE = "DELETE"


@dataclass(frozen=True)
class Operation:
    """A single catalog entry.

    Attributes:
        name (str): Method name installed on DirectusClient.
        verb (str): HTTP verb, one of GET, POST, PUT, DELETE.
        path (str): Endpoint template; ``{placeholders}`` name required parameters.
        summary (str): One-line description used as the method docstring.
        required (Tuple[str, ...]): Positional parameters that must not be omitted.
        payload (str | None): Name of the trailing params/data argument, if any.
        payload_required (bool): Whether omitting the payload is an error.
        body_fields (Tuple[str, ...]): Required parameters sent as JSON body keys
            instead of (or as well as) path segments.
        bulk (bool): Payload must be a list of rows; it is sent as ``{"rows": [...]}``.
        api (bool): Target the unversioned API root instead of the versioned one.
    """

    name: str
    verb: str
    path: str
    summary: str
    required: Tuple[str, ...] = ()
    payload: Optional[str] = None
    payload_required: bool = False
    body_fields: Tuple[str, ...] = ()
    bulk: bool = False
    api: bool = False

    @property
    def parameters(self) -> Tuple[str, ...]:
        if self.payload:
            return (*self.required, self.payload)
        return self.required

    @property
    def signature(self) -> inspect.Signature:
        params = [inspect.Parameter("self", inspect.Parameter.POSITIONAL_OR_KEYWORD)]
        params.extend(
            inspect.Parameter(name, inspect.Parameter.POSITIONAL_OR_KEYWORD, default=None)
            for name in self.parameters
        )
        return inspect.Signature(params)

    @property
    def docstring(self) -> str:
        target = "API root" if self.api else "versioned root"
        return f"{self.summary}\n\n{self.verb} ``{self.path}`` on the {target}."


CATALOG: Tuple[Operation, ...] = (
    # Items
    Operation("create_item", POST, "tables/{table}/rows", "Create a row in a table.",
              ("table",), "data"),
    Operation("get_items", GET, "tables/{table}/rows", "List the rows of a table.",
              ("table",), "params"),
    Operation("get_item", GET, "tables/{table}/rows/{id}", "Fetch a single row.",
              ("table", "id"), "params"),
    Operation("update_item", PUT, "tables/{table}/rows/{id}", "Update a single row.",
              ("table", "id"), "data", payload_required=True),
    Operation("delete_item", DELETE, "tables/{table}/rows/{id}", "Delete a single row.",
              ("table", "id")),
    Operation("create_bulk", POST, "tables/{table}/rows/bulk", "Create several rows at once.",
              ("table",), "data", payload_required=True, bulk=True),
    Operation("update_bulk", PUT, "tables/{table}/rows/bulk", "Update several rows at once.",
              ("table",), "data", payload_required=True, bulk=True),
    Operation("delete_bulk", DELETE, "tables/{table}/rows/bulk", "Delete several rows at once.",
              ("table",), "data", payload_required=True, bulk=True),
    # Files
    Operation("create_file", POST, "files", "Upload a file record.", (), "data"),
    Operation("get_files", GET, "files", "List files.", (), "params"),
    Operation("get_file", GET, "files/{id}", "Fetch a single file.", ("id",)),
    Operation("update_file", PUT, "files/{id}", "Update a file record.",
              ("id",), "data", payload_required=True),
    Operation("delete_file", DELETE, "files/{id}", "Delete a file.", ("id",)),
    # Tables
    Operation("create_table", POST, "tables", "Create a table.",
              ("name",), body_fields=("name",)),
    Operation("get_tables", GET, "tables", "List tables.", (), "params"),
    Operation("get_table", GET, "tables/{table}", "Fetch a table definition.",
              ("table",), "params"),
    # Columns
    Operation("create_column", POST, "tables/{table}/columns", "Add a column to a table.",
              ("table",), "data"),
    Operation("get_columns", GET, "tables/{table}/columns", "List the columns of a table.",
              ("table",), "params"),
    Operation("get_column", GET, "tables/{table}/columns/{column}", "Fetch a column.",
              ("table", "column")),
    Operation("update_column", PUT, "tables/{table}/columns/{column}", "Update a column.",
              ("table", "column"), "data"),
    Operation("delete_column", DELETE, "tables/{table}/columns/{column}", "Drop a column.",
              ("table", "column")),
    # Groups
    Operation("create_group", POST, "groups", "Create a user group.",
              ("name",), body_fields=("name",)),
    Operation("get_groups", GET, "groups", "List user groups."),
    Operation("get_group", GET, "groups/{id}", "Fetch a user group.", ("id",)),
    # Privileges
    Operation("create_privileges", POST, "privileges/{id}", "Create privileges for a group.",
              ("id",), "data"),
    Operation("get_privileges", GET, "privileges/{id}", "List the privileges of a group.",
              ("id",)),
    Operation("get_table_privileges", GET, "privileges/{id}/{table}",
              "Fetch a group's privileges on one table.", ("id", "table")),
    # Stays a GET for wire compatibility with existing clients; see DESIGN.md
    Operation("update_privileges", GET, "privileges/{id}/{table}",
              "Fetch a group's privileges on one table.", ("id", "table")),
    # Preferences
    Operation("get_preferences", GET, "tables/{table}/preferences",
              "Fetch the current user's preferences for a table.", ("table",)),
    Operation("update_preference", PUT, "tables/{table}/preferences",
              "Update the current user's preferences for a table.", ("table",), "data"),
    # Messages
    Operation("get_messages", GET, "messages/rows", "List messages.", (), "params"),
    Operation("get_message", GET, "messages/rows/{id}", "Fetch a message.", ("id",)),
    # Activity
    Operation("get_activity", GET, "activity", "List activity entries.", (), "params"),
    # Bookmarks
    Operation("get_bookmarks", GET, "bookmarks", "List all bookmarks."),
    Operation("get_user_bookmarks", GET, "bookmarks/self", "List the current user's bookmarks."),
    Operation("get_bookmark", GET, "bookmarks/{id}", "Fetch a bookmark.", ("id",)),
    Operation("create_bookmark", POST, "bookmarks", "Create a bookmark.",
              (), "data", payload_required=True),
    Operation("delete_bookmark", DELETE, "bookmarks/{id}", "Delete a bookmark.", ("id",)),
    # Settings
    Operation("get_settings", GET, "settings", "Fetch all settings."),
    Operation("get_settings_by_collection", GET, "settings/{name}",
              "Fetch the settings of one collection.", ("name",)),
    Operation("update_settings", PUT, "settings/{name}", "Update the settings of one collection.",
              ("name",), "data"),
    # Users
    Operation("get_users", GET, "users", "List users.", (), "params"),
    Operation("get_user", GET, "users/{id}", "Fetch a user.", ("id",)),
    Operation("get_me", GET, "users/me", "Fetch the authenticated user."),
    Operation("create_user", POST, "users", "Create a user.", (), "user", payload_required=True),
    Operation("update_user", PUT, "users/{id}", "Update a user.",
              ("id",), "data", payload_required=True),
    Operation("update_me", PUT, "users/me", "Update the authenticated user.",
              (), "data", payload_required=True),
    # Directus applies no strength or length rules to the new password
    Operation("update_password", PUT, "users/me", "Change the authenticated user's password.",
              ("password",), body_fields=("password",)),
    # Generic passthrough to the unversioned API root
    Operation("get_api", GET, "{api_endpoint}", "GET an arbitrary API endpoint.",
              ("api_endpoint",), "params", api=True),
    Operation("post_api", POST, "{api_endpoint}", "POST to an arbitrary API endpoint.",
              ("api_endpoint",), "data", payload_required=True, api=True),
    Operation("put_api", PUT, "{api_endpoint}", "PUT to an arbitrary API endpoint.",
              ("api_endpoint",), "data", payload_required=True, api=True),
    Operation("delete_api", DELETE, "{api_endpoint}", "DELETE an arbitrary API endpoint.",
              ("api_endpoint",), "data", payload_required=True, api=True),
    # Utilities
    Operation("get_hash", POST, "hash", "Hash a string with the server's hasher.",
              ("string",), "data", body_fields=("string",)),
    Operation("get_random", POST, "random", "Generate a random string.", (), "params"),
)


def bind_arguments(
    operation: Operation, args: Tuple[Any, ...], kwargs: Dict[str, Any]
) -> Tuple[str, Any]:
    """Validate a call against its catalog entry and build the request.

    Args:
        operation (Operation): The catalog entry being called.
        args (tuple): Positional arguments, in ``operation.parameters`` order.
        kwargs (dict): Keyword arguments.

    Returns:
        Tuple[str, Any]: The resolved endpoint path and the params/body to send.

    Raises:
        MissingParameterError: A required parameter or payload is missing or None.
        TypeMismatchError: A bulk payload is not a list or tuple.
        TypeError: Too many positional arguments or an unknown keyword.
    """
    names = operation.parameters
    if len(args) > len(names):
        raise TypeError(
            f"{operation.name}() takes at most {len(names)} arguments ({len(args)} given)"
        )
    bound: Dict[str, Any] = dict(zip(names, args))
    for key, value in kwargs.items():
        if key not in names:
            raise TypeError(f"{operation.name}() got an unexpected keyword argument '{key}'")
        if key in bound:
            raise TypeError(f"{operation.name}() got multiple values for argument '{key}'")
        bound[key] = value

    for name in operation.required:
        if bound.get(name) is None:
            raise MissingParameterError(name)

    payload = bound.get(operation.payload) if operation.payload else None
    if operation.payload and payload is None and operation.payload_required:
        raise MissingParameterError(operation.payload)
    if operation.bulk:
        if not isinstance(payload, (list, tuple)):
            raise TypeMismatchError(operation.payload, payload)
        payload = {"rows": list(payload)}
    if operation.body_fields:
        payload = {**(payload or {}), **{name: bound[name] for name in operation.body_fields}}

    endpoint = operation.path.format(**{name: bound[name] for name in operation.required})
    return endpoint, payload


def make_operation(operation: Operation):
    """Build the synchronous DirectusClient method for a catalog entry."""

    def call(self, *args, **kwargs):
        endpoint, payload = bind_arguments(operation, args, kwargs)
        primitive = getattr(self, operation.verb.lower())
        return primitive(endpoint, payload, api=operation.api)

    _describe(call, operation, operation.name)
    return call


def make_async_operation(operation: Operation):
    """Build the asynchronous DirectusClient method for a catalog entry."""

    async def call(self, *args, **kwargs):
        endpoint, payload = bind_arguments(operation, args, kwargs)
        primitive = getattr(self, f"{operation.verb.lower()}_async")
        return await primitive(endpoint, payload, api=operation.api)

    _describe(call, operation, f"{operation.name}_async")
    return call


def _describe(func, operation: Operation, name: str) -> None:
    func.__name__ = name
    func.__qualname__ = f"DirectusClient.{name}"
    func.__doc__ = operation.docstring
    func.__signature__ = operation.signature


def install_catalog(cls: type) -> type:
    """Attach every catalog operation to ``cls`` as ``name`` and ``name_async``."""
    for operation in CATALOG:
        setattr(cls, operation.name, make_operation(operation))
        setattr(cls, f"{operation.name}_async", make_async_operation(operation))
    return cls
