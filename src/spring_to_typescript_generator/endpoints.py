"""Assemble endpoint records from annotated controller classes."""

from __future__ import annotations

from typing import Optional

from pydantic import ValidationError

from .context import ResolutionContext
from .metadata import ClassInfo, MethodInfo, ParameterInfo, normalize_class_name
from .model_types import Endpoint, Field, HttpMethod, PagedEndpoint
from .resolver import TypeResolver, mark_needs_validation, validations_for
from .signature import Intermediate, split_method_signature

IGNORED_ENDPOINT_PARAMS: frozenset[str] = frozenset(
    {
        "org.springframework.web.server.ServerWebExchange",
        "org.springframework.web.server.WebSession",
        "jakarta.servlet.http.HttpServletRequest",
        "jakarta.servlet.http.HttpServletResponse",
    }
)

MAPPING_ANNOTATIONS: dict[str, HttpMethod] = {
    "GetMapping": HttpMethod.GET,
    "PostMapping": HttpMethod.POST,
    "PutMapping": HttpMethod.PUT,
    "PatchMapping": HttpMethod.PATCH,
    "DeleteMapping": HttpMethod.DELETE,
}


class EndpointError(RuntimeError):
    """Raised when a controller method cannot be turned into an endpoint."""


class EndpointAssembler:
    """Build ``Endpoint`` records for every mapped method of a controller."""

    def __init__(self, context: ResolutionContext, resolver: Optional[TypeResolver] = None) -> None:
        self._context = context
        self._resolver = resolver if resolver is not None else TypeResolver(context)

    def parse_class(self, class_info: ClassInfo) -> list[Endpoint]:
        """Return the endpoints of a ``RestController`` class, or nothing for other classes."""
        if not class_info.has_annotation("RestController"):
            return []
        prefixes = [""]
        request_mapping = class_info.annotation("RequestMapping")
        if request_mapping is not None:
            declared = request_mapping.string_list("value") or request_mapping.string_list("path")
            prefixes = declared or [""]

        endpoints: list[Endpoint] = []
        for prefix in prefixes:
            for method in class_info.methods:
                endpoints.extend(self.parse_method(class_info, method, prefix))
        return endpoints

    def parse_method(
        self, class_info: ClassInfo, method: MethodInfo, prefix: str = ""
    ) -> list[Endpoint]:
        """Return one endpoint per mapping annotation and declared path of ``method``."""
        endpoints: list[Endpoint] = []
        for annotation in method.annotations:
            http_method = MAPPING_ANNOTATIONS.get(annotation.name)
            if http_method is None:
                continue
            paths = annotation.string_list("value") or annotation.string_list("path")
            for path in paths or [""]:
                endpoints.append(self._endpoint(class_info, method, http_method, prefix + path))
        return endpoints

    def _endpoint(
        self,
        class_info: ClassInfo,
        method: MethodInfo,
        http_method: HttpMethod,
        url: str,
    ) -> Endpoint:
        class_name = class_info.simple_name
        return_type = self._resolver.resolve_method(method)
        endpoint: Endpoint
        if method.has_annotation("PagedQuery") and http_method is HttpMethod.GET:
            endpoint = PagedEndpoint(class_name, method.name, url, http_method, return_type)
        else:
            if method.has_annotation("PagedQuery"):
                self._context.warn(f"Only GET methods may be paged in {class_name}.{method.name}")
            endpoint = Endpoint(class_name, method.name, url, http_method, return_type)

        self._parse_arguments(method, endpoint)
        if isinstance(endpoint, PagedEndpoint) and endpoint.page_variable is None:
            raise EndpointError(
                "Encountered paged endpoint without a page variable for endpoint "
                f"{endpoint.qualified_name}"
            )
        return endpoint

    def _parse_arguments(self, method: MethodInfo, endpoint: Endpoint) -> None:
        arguments, _ = split_method_signature(method.signature or method.descriptor)
        argument_types = self._resolver.parser.parse(arguments)
        if len(argument_types) != len(method.parameters):
            raise EndpointError(
                f"Method {endpoint.qualified_name} declares {len(method.parameters)} parameters "
                f"but its signature has {len(argument_types)} arguments"
            )
        for parameter, argument in zip(method.parameters, argument_types):
            self._parse_parameter(parameter, argument, endpoint)

    def _parse_parameter(
        self, parameter: ParameterInfo, argument: Intermediate, endpoint: Endpoint
    ) -> None:
        if not parameter.annotations:
            if normalize_class_name(parameter.type_name) not in IGNORED_ENDPOINT_PARAMS:
                endpoint.params.append(self._field(parameter, argument))
            return

        for annotation in parameter.annotations:
            if annotation.name == "RequestParam":
                try:
                    required = annotation.flag("required", True)
                except ValidationError as exc:
                    raise EndpointError(
                        f"Invalid 'required' value on parameter {parameter.name} "
                        f"of {endpoint.qualified_name}"
                    ) from exc
                member = self._field(parameter, argument, required=required)
                endpoint.params.append(member)
                if parameter.has_annotation("PageParam"):
                    self._set_page_variable(endpoint, member)
                if parameter.has_annotation("PageSizeParam"):
                    self._set_page_size_variable(endpoint, member)
            elif annotation.name == "PathVariable":
                endpoint.url_args.append(self._field(parameter, argument))
            elif annotation.name == "RequestBody":
                endpoint.body = self._resolver.resolve(argument)
                mark_needs_validation(endpoint.body)

    def _field(
        self, parameter: ParameterInfo, argument: Intermediate, *, required: bool = True
    ) -> Field:
        return Field(
            name=parameter.name,
            type=self._resolver.resolve(argument),
            required=required,
            validations=tuple(validations_for(parameter)),
        )

    def _set_page_variable(self, endpoint: Endpoint, member: Field) -> None:
        if not isinstance(endpoint, PagedEndpoint):
            self._context.warn(
                f"Unused @PageParam annotation encountered in {endpoint.qualified_name}"
            )
        elif endpoint.page_variable is not None:
            self._context.warn(
                f"Multiple page variables defined in endpoint {endpoint.qualified_name}"
            )
        else:
            endpoint.page_variable = member

    def _set_page_size_variable(self, endpoint: Endpoint, member: Field) -> None:
        if not isinstance(endpoint, PagedEndpoint):
            self._context.warn(
                f"Unused @PageSizeParam annotation encountered in {endpoint.qualified_name}"
            )
        elif endpoint.page_size_variable is not None:
            self._context.warn(
                f"Multiple page size variables defined in endpoint {endpoint.qualified_name}"
            )
        else:
            endpoint.page_size_variable = member

