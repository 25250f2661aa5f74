"""Endpoint binding for dualschema.

An EndpointBinder associates controller actions with compiled schemas and
produces one EndpointDescriptor per action, the input of the
documentation renderer. Inline request declarations are compiled into the
registry under a name derived from the binder's namespace, so binding must
happen before the registry is frozen.

Example:
    >>> users = EndpointBinder(
    ...     registry,
    ...     namespace="Users",
    ...     path="/users",
    ...     tags=["Users"],
    ...     default_response_schema="UserResponse",
    ... )
    >>> users.create("create_user", [required("first_name", "string")],
    ...              summary="Creates a user")
    >>> users.index(summary="Lists all users", response_schema="UserIndexResponse")
    >>> registry.freeze()
    >>> users.validation_descriptor("create_user").field_names()
    ['first_name']
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

import structlog

from dualschema.errors import ConfigurationError
from dualschema.schemas.compiled_schema import CompiledSchema
from dualschema.schemas.endpoint import EndpointDescriptor
from dualschema.schemas.schema_node import SchemaNode
from dualschema.schemas.validation import ValidationDescriptor

if TYPE_CHECKING:
    from dualschema.loader import ControllerSpec, EndpointSpec
    from dualschema.registry import SchemaRegistry

logger = structlog.get_logger(__name__)

# Status every response schema is documented under unless overridden
DEFAULT_RESPONSE_STATUS = 201

# (method, path relative to the controller) per standard action
DEFAULT_ROUTES: dict[str, tuple[str, str]] = {
    "create": ("post", ""),
    "index": ("get", ""),
    "show": ("get", "/{id}"),
    "update": ("put", "/{id}"),
    "delete": ("delete", "/{id}"),
}

SchemaRef = str | CompiledSchema
CallbackRef = SchemaRef | tuple[str, SchemaRef]


def camelize(name: str) -> str:
    """``create_user`` -> ``CreateUser``."""
    return "".join(part[:1].upper() + part[1:] for part in name.split("_") if part)


class EndpointBinder:
    """Bind controller actions to compiled schemas.

    Args:
        registry: Registry to read schemas from and compile request
            schemas into.
        namespace: Prefix of generated request schema names.
        path: Base route of the controller.
        tags: Tags applied to every operation.
        default_response_schema: Response schema for actions naming none.
        default_callback_schema: Callback schema for actions naming none.
    """

    def __init__(
        self,
        registry: SchemaRegistry,
        *,
        namespace: str = "",
        path: str = "",
        tags: Iterable[str] = (),
        default_response_schema: SchemaRef | None = None,
        default_callback_schema: CallbackRef | None = None,
    ) -> None:
        self.registry = registry
        self.namespace = namespace
        self.path = path.rstrip("/")
        self.tags = tuple(tags)
        self.default_response_schema = default_response_schema
        self.default_callback_schema = default_callback_schema
        self._endpoints: list[EndpointDescriptor] = []

    @property
    def endpoints(self) -> list[EndpointDescriptor]:
        """Descriptors bound so far, in binding order."""
        return list(self._endpoints)

    def request_schema_name(self, name: str) -> str:
        """Registry name of the inline request schema ``name``."""
        schema_name = camelize(name)
        if self.namespace:
            return f"{self.namespace}.{schema_name}"
        return schema_name

    def create(self, name: str, declarations: Any, **options: Any) -> EndpointDescriptor:
        """Bind the create action with an inline request schema."""
        return self.custom("create", name, declarations, **options)

    def update(self, name: str, declarations: Any, **options: Any) -> EndpointDescriptor:
        """Bind the update action with an inline request schema."""
        return self.custom("update", name, declarations, **options)

    def index(
        self,
        *,
        summary: str = "",
        response_schema: SchemaRef | None = None,
        response_status: int = DEFAULT_RESPONSE_STATUS,
        open_api_opts: Mapping[str, Any] | None = None,
    ) -> EndpointDescriptor:
        """Bind the index action. Index endpoints carry no callbacks."""
        return self._bind(
            "index",
            summary=summary,
            response_schema=response_schema,
            response_status=response_status,
            callback_schemas=None,
            with_callbacks=False,
            open_api_opts=open_api_opts,
        )

    def show(
        self,
        *,
        summary: str = "",
        response_schema: SchemaRef | None = None,
        response_status: int = DEFAULT_RESPONSE_STATUS,
        open_api_opts: Mapping[str, Any] | None = None,
    ) -> EndpointDescriptor:
        """Bind the show action. Show endpoints carry no callbacks."""
        return self._bind(
            "show",
            summary=summary,
            response_schema=response_schema,
            response_status=response_status,
            callback_schemas=None,
            with_callbacks=False,
            open_api_opts=open_api_opts,
        )

    def delete(
        self,
        *,
        summary: str = "",
        response_schema: SchemaRef | None = None,
        response_status: int = DEFAULT_RESPONSE_STATUS,
        callback_schemas: Iterable[CallbackRef] | Mapping[str, SchemaRef] | None = None,
        open_api_opts: Mapping[str, Any] | None = None,
    ) -> EndpointDescriptor:
        """Bind the delete action."""
        return self.custom(
            "delete",
            summary=summary,
            response_schema=response_schema,
            response_status=response_status,
            callback_schemas=callback_schemas,
            open_api_opts=open_api_opts,
        )

    def custom(
        self,
        action: str,
        name: str | None = None,
        declarations: Any = None,
        *,
        summary: str = "",
        response_schema: SchemaRef | None = None,
        response_status: int = DEFAULT_RESPONSE_STATUS,
        callback_schemas: Iterable[CallbackRef] | Mapping[str, SchemaRef] | None = None,
        open_api_opts: Mapping[str, Any] | None = None,
        method: str | None = None,
        path: str | None = None,
    ) -> EndpointDescriptor:
        """Bind any action, optionally with an inline request schema.

        Args:
            action: Action name.
            name: Request schema name. Defaults to the action name.
            declarations: Inline request body declarations.
            summary: Operation summary.
            response_schema: Response schema, defaulting to the binder's.
            response_status: Status the response is documented under.
            callback_schemas: Callback schemas, defaulting to the binder's.
            open_api_opts: Extra operation keys, merged last.
            method: HTTP method. Defaults to the standard route, else post.
            path: Route relative to the controller path.

        Raises:
            CompilationError: If the request declarations cannot be compiled.
            SchemaNotFoundError: If a named response or callback schema is
                not compiled.
        """
        validation_schema: str | None = None
        if declarations is not None:
            validation_schema = self.request_schema_name(name or action)
            self.registry.compile(validation_schema, declarations)

        return self._bind(
            action,
            summary=summary,
            response_schema=response_schema,
            response_status=response_status,
            callback_schemas=callback_schemas,
            with_callbacks=True,
            open_api_opts=open_api_opts,
            validation_schema=validation_schema,
            method=method,
            path=path,
        )

    def validation_descriptor(self, name: str) -> ValidationDescriptor:
        """Validation descriptor of the request schema ``name``.

        This is the descriptor handed to the validation engine together
        with the incoming parameters.
        """
        return self.registry.validation_descriptor_of(self.request_schema_name(name))

    def _bind(
        self,
        action: str,
        *,
        summary: str,
        response_schema: SchemaRef | None,
        response_status: int,
        callback_schemas: Iterable[CallbackRef] | Mapping[str, SchemaRef] | None,
        with_callbacks: bool,
        open_api_opts: Mapping[str, Any] | None,
        validation_schema: str | None = None,
        method: str | None = None,
        path: str | None = None,
    ) -> EndpointDescriptor:
        default_method, default_path = DEFAULT_ROUTES.get(action, ("post", f"/{action}"))

        responses: dict[int, SchemaNode] = {}
        response_ref = (
            self.default_response_schema if response_schema is None else response_schema
        )
        if response_ref is not None:
            responses[response_status] = self.registry.documentation_of(response_ref)

        callbacks: dict[str, SchemaNode] = {}
        if with_callbacks:
            if callback_schemas is None:
                callback_schemas = self.default_callback_schema
            callbacks = self._callbacks(callback_schemas)

        descriptor = EndpointDescriptor(
            action=action,
            method=(method or default_method).lower(),
            path=f"{self.path}{default_path if path is None else path}" or "/",
            summary=summary,
            tags=self.tags,
            request_body_schema=(
                self.registry.documentation_of(validation_schema)
                if validation_schema is not None
                else None
            ),
            validation_schema=validation_schema,
            response_schemas=responses,
            callback_schemas=callbacks,
            open_api_opts=dict(open_api_opts or {}),
        )
        self._endpoints.append(descriptor)
        logger.debug(
            "endpoint_bound",
            action=action,
            method=descriptor.method,
            path=descriptor.path,
        )
        return descriptor

    def _callbacks(
        self,
        refs: CallbackRef | Iterable[CallbackRef] | Mapping[str, SchemaRef] | None,
    ) -> dict[str, SchemaNode]:
        if refs is None:
            return {}
        if isinstance(refs, Mapping):
            pairs: list[tuple[str, SchemaRef]] = list(refs.items())
        else:
            if isinstance(refs, (str, CompiledSchema, tuple)):
                refs = [refs]
            pairs = [self._callback_pair(ref) for ref in refs]

        return {
            title: self.registry.documentation_of(schema) for title, schema in pairs
        }

    @staticmethod
    def _callback_pair(ref: CallbackRef) -> tuple[str, SchemaRef]:
        if isinstance(ref, tuple):
            if len(ref) != 2:
                raise ConfigurationError(f"Callback {ref!r} must be a (title, schema) pair")
            title, schema = ref
            return title, schema
        if isinstance(ref, CompiledSchema):
            return ref.name, ref
        return ref, ref


def bind_controller(registry: SchemaRegistry, spec: ControllerSpec) -> list[EndpointDescriptor]:
    """Bind every endpoint of a loaded controller section.

    Raises:
        ConfigurationError: If a create or update endpoint has no request
            declarations.
    """
    binder = EndpointBinder(
        registry,
        namespace=spec.name,
        path=spec.path,
        tags=spec.tags,
        default_response_schema=spec.default_response_schema,
        default_callback_schema=spec.default_callback_schema,
    )
    for endpoint in spec.endpoints:
        _bind_endpoint(binder, endpoint, spec.name)
    return binder.endpoints


def _bind_endpoint(binder: EndpointBinder, endpoint: EndpointSpec, controller: str) -> None:
    common: dict[str, Any] = {
        "summary": endpoint.summary,
        "response_schema": endpoint.response_schema,
        "response_status": endpoint.response_status,
        "open_api_opts": endpoint.open_api_opts,
    }

    if endpoint.action in ("index", "show"):
        getattr(binder, endpoint.action)(**common)
        return

    if endpoint.action in ("create", "update") and endpoint.request is None:
        raise ConfigurationError(
            f"Action '{endpoint.action}' requires request declarations",
            field_path=f"controllers.{controller}.{endpoint.action}",
        )

    binder.custom(
        endpoint.action,
        endpoint.name,
        endpoint.request,
        callback_schemas=endpoint.callback_schemas,
        method=endpoint.method,
        path=endpoint.path,
        **common,
    )
