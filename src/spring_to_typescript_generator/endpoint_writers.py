"""Writers that render HTTP client bindings, one file per controller class."""

from __future__ import annotations

import posixpath
from collections.abc import Iterable
from typing import Optional, Union

from .codegen_ts import print_type
from .context import ResolutionContext
from .imports import OutputFile, record_import
from .model_types import (
    ArrayType,
    Endpoint,
    Field,
    HttpMethod,
    ObjectType,
    PagedEndpoint,
    PrimitiveType,
    Type,
)
from .naming import (
    property_key,
    query_key,
    sanitize_identifier,
    service_class_name,
    service_file_name,
    url_expression,
)

ENDPOINTS_DIR = "endpoints"


def group_by_class(endpoints: Iterable[Endpoint]) -> dict[str, list[Endpoint]]:
    """Group endpoints by controller class, keeping first-seen order."""
    grouped: dict[str, list[Endpoint]] = {}
    for endpoint in endpoints:
        grouped.setdefault(endpoint.class_name, []).append(endpoint)
    return grouped


class _EndpointWriterBase:
    def __init__(self, context: ResolutionContext, base_path: str = "") -> None:
        self._context = context
        self._base_path = base_path

    def _print_type(self, t: Type) -> str:
        return print_type(t, use_string_as_date=self._context.options.use_string_as_date)

    def _fn_params(self, fields: Iterable[Field]) -> list[str]:
        params: list[str] = []
        for member in fields:
            optional = "" if member.required else "?"
            params.append(
                f"{sanitize_identifier(member.name)}{optional}: {self._print_type(member.type)}"
            )
        return params

    def _record_endpoint_imports(self, output: OutputFile, endpoint: Endpoint) -> None:
        if endpoint.body is not None:
            record_import(output, endpoint.body, self._context)
        for member in endpoint.params:
            record_import(output, member.type, self._context)
        for member in endpoint.url_args:
            record_import(output, member.type, self._context)
        record_import(output, endpoint.return_type, self._context)


class ReactQueryWriter(_EndpointWriterBase):
    """Emit a class of react-query hooks backed by axios per controller."""

    def print_all_endpoints(self, endpoints: Iterable[Endpoint]) -> list[OutputFile]:
        """Render one hooks file per controller class."""
        files: list[OutputFile] = []
        for class_name, class_endpoints in group_by_class(endpoints).items():
            output = OutputFile(location=posixpath.join(self._base_path, ENDPOINTS_DIR, class_name))
            output.add_import("axios", default="axios")
            hooks = _react_query_hooks(class_endpoints)
            if hooks:
                output.add_import("@tanstack/react-query", named=hooks)

            members = [self._print_endpoint(endpoint) for endpoint in class_endpoints]
            output.body = (
                f"export default class {class_name} {{\n" + "\n".join(members) + "}\n"
            )
            for endpoint in class_endpoints:
                self._record_endpoint_imports(output, endpoint)
            files.append(output)
        return files

    def _print_endpoint(self, endpoint: Endpoint) -> str:
        if endpoint.http_method is HttpMethod.GET:
            if isinstance(endpoint, PagedEndpoint):
                return self._print_infinite_query(endpoint)
            return self._print_query(endpoint)
        return self._print_mutation(endpoint)

    def _print_query(self, endpoint: Endpoint) -> str:
        key = query_key(endpoint)
        variables = endpoint.all_variables()
        result = self._print_type(endpoint.return_type)
        args = self._fn_params(variables)
        args.append(f"options?: Partial<Omit<UseQueryOptions<{result}>, 'queryKey' | 'queryFn'>>")
        request = self._axios_call(endpoint, params=endpoint.params)
        return (
            f"  static {endpoint.method_name} = {{\n"
            f"    queryKey: '{key}',\n"
            f"    useQuery: ({', '.join(args)}) =>\n"
            f"      useQuery<{result}>({{\n"
            f"        queryKey: {_query_key_expression(key, variables)},\n"
            f"        queryFn: async () => {{\n"
            f"          const response = await {request};\n"
            f"          return response.data;\n"
            f"        }},\n"
            f"        ...options,\n"
            f"      }}),\n"
            f"  }};\n"
        )

    def _print_infinite_query(self, endpoint: PagedEndpoint) -> str:
        page = endpoint.page_variable
        if page is None:
            raise ValueError(f"Paged endpoint {endpoint.qualified_name} has no page variable")
        key = query_key(endpoint)
        variables = [member for member in endpoint.all_variables() if member is not page]
        params = [member for member in endpoint.params if member is not page]
        result = self._print_type(endpoint.return_type)
        args = self._fn_params(variables)
        args.append(
            f"options?: Partial<Omit<UseInfiniteQueryOptions<{result}>, "
            "'queryKey' | 'queryFn' | 'initialPageParam' | 'getNextPageParam'>>"
        )
        request = self._axios_call(endpoint, params=params, page_param=page.name)
        if endpoint.page_size_variable is not None:
            page_size = sanitize_identifier(endpoint.page_size_variable.name)
            next_page = f"lastPage.length < {page_size} ? undefined : pages.length"
        else:
            next_page = "lastPage.length === 0 ? undefined : pages.length"
        return (
            f"  static {endpoint.method_name} = {{\n"
            f"    queryKey: '{key}',\n"
            f"    useInfiniteQuery: ({', '.join(args)}) =>\n"
            f"      useInfiniteQuery({{\n"
            f"        queryKey: {_query_key_expression(key, variables)},\n"
            f"        queryFn: async ({{ pageParam }}: {{ pageParam: number }}) => {{\n"
            f"          const response = await {request};\n"
            f"          return response.data;\n"
            f"        }},\n"
            f"        initialPageParam: 0,\n"
            f"        getNextPageParam: (lastPage: {result}, pages: {result}[]) => {next_page},\n"
            f"        ...options,\n"
            f"      }}),\n"
            f"  }};\n"
        )

    def _print_mutation(self, endpoint: Endpoint) -> str:
        result = self._print_type(endpoint.return_type)
        if endpoint.body is not None:
            generics = f"<{result}, unknown, {self._print_type(endpoint.body)}>"
            mutation_args = f"data: {self._print_type(endpoint.body)}"
        else:
            generics = f"<{result}>"
            mutation_args = ""
        args = self._fn_params(endpoint.all_variables())
        args.append(f"options?: Omit<UseMutationOptions{generics}, 'mutationFn'>")
        request = self._axios_call(endpoint, params=endpoint.params)
        return (
            f"  static {endpoint.method_name} = {{\n"
            f"    useMutation: ({', '.join(args)}) =>\n"
            f"      useMutation{generics}({{\n"
            f"        mutationFn: async ({mutation_args}) => {{\n"
            f"          const response = await {request};\n"
            f"          return response.data;\n"
            f"        }},\n"
            f"        ...options,\n"
            f"      }}),\n"
            f"  }};\n"
        )

    def _axios_call(
        self,
        endpoint: Endpoint,
        *,
        params: list[Field],
        page_param: Optional[str] = None,
    ) -> str:
        verb = endpoint.http_method.value.lower()
        result = self._print_type(endpoint.return_type)
        arguments = [url_expression(endpoint)]
        config: list[str] = []
        if endpoint.http_method in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH):
            arguments.append("data" if endpoint.body is not None else "null")
        elif endpoint.http_method is HttpMethod.DELETE and endpoint.body is not None:
            config.append("data")

        entries = _params_entries(params)
        if page_param is not None:
            entries.append(f"{property_key(page_param)}: pageParam")
        if entries:
            config.append("params: { " + ", ".join(entries) + " }")
        if config:
            arguments.append("{ " + ", ".join(config) + " }")
        return f"axios.{verb}<{result}>({', '.join(arguments)})"


class AngularWriter(_EndpointWriterBase):
    """Emit one injectable ``HttpClient`` service per controller."""

    def print_all_endpoints(self, endpoints: Iterable[Endpoint]) -> list[OutputFile]:
        """Render one service file per controller class."""
        files: list[OutputFile] = []
        for class_name, class_endpoints in group_by_class(endpoints).items():
            output = OutputFile(
                location=posixpath.join(
                    self._base_path, ENDPOINTS_DIR, service_file_name(class_name)
                )
            )
            output.add_import("@angular/core", named=("Injectable",))
            output.add_import("rxjs", named=("Observable",))
            output.add_import(self._context.options.angular_environment, named=("environment",))
            http_symbols = ["HttpClient"]
            if any(endpoint.params for endpoint in class_endpoints):
                http_symbols.append("HttpParams")
            output.add_import("@angular/common/http", named=http_symbols)

            body = [
                "const headers = { 'content-type': 'application/json' };\n",
                "@Injectable({\n  providedIn: 'root',\n})",
                f"export class {service_class_name(class_name)} {{",
                "  baseURL = environment.serverUrl;\n",
                "  constructor(private http: HttpClient) {}",
            ]
            body.extend(self._print_endpoint(endpoint) for endpoint in class_endpoints)
            body.append("}\n")
            output.body = "\n".join(body)
            for endpoint in class_endpoints:
                self._record_endpoint_imports(output, endpoint)
            files.append(output)
        return files

    def _print_endpoint(self, endpoint: Endpoint) -> str:
        result = self._print_type(endpoint.return_type)
        inputs: list[str] = []
        if endpoint.body is not None:
            inputs.append(f"body: {self._print_type(endpoint.body)}")
        inputs.extend(self._fn_params(endpoint.all_variables()))

        lines = [f"\n  {endpoint.method_name}({', '.join(inputs)}): Observable<{result}> {{"]
        if endpoint.params:
            lines.append("    let params = new HttpParams();")
            lines.extend(self._params_statements(endpoint.params, prefix="", seen=()))

        verb = endpoint.http_method.value.lower()
        arguments = [f"this.baseURL + {url_expression(endpoint)}"]
        if endpoint.http_method in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH):
            arguments.append("body" if endpoint.body is not None else "null")
        options = ["headers"]
        if endpoint.params:
            options.append("params")
        if endpoint.http_method is HttpMethod.DELETE and endpoint.body is not None:
            options.append("body")
        arguments.append("{ " + ", ".join(options) + " }")
        lines.append(f"    return this.http.{verb}<{result}>({', '.join(arguments)});")
        lines.append("  }")
        return "\n".join(lines)

    def _params_statements(
        self,
        params: Iterable[Field],
        *,
        prefix: str,
        seen: tuple[str, ...],
    ) -> list[str]:
        statements: list[str] = []
        for member in params:
            reference = prefix + (member.name if prefix else sanitize_identifier(member.name))
            query_name = member.name
            if isinstance(member.type, ObjectType):
                if member.type.name in seen:
                    continue
                nested = self._params_statements(
                    member.type.fields,
                    prefix=reference + ".",
                    seen=(*seen, member.type.name),
                )
                if member.required:
                    statements.extend(nested)
                elif nested:
                    statements.append(f"    if ({reference} != null) {{")
                    statements.extend("  " + line for line in nested)
                    statements.append("    }")
                continue

            value = "item" if isinstance(member.type, ArrayType) else reference
            if self._needs_to_string(member.type):
                value += ".toString()"
            if isinstance(member.type, ArrayType):
                statement = (
                    f"params = {reference}.reduce("
                    f"(p, item) => p.append('{query_name}', {value}), params);"
                )
            else:
                statement = f"params = params.append('{query_name}', {value});"

            if member.required:
                statements.append(f"    {statement}")
            else:
                statements.append(f"    if ({reference} != null) {{")
                statements.append(f"      {statement}")
                statements.append("    }")
        return statements

    def _needs_to_string(self, t: Type) -> bool:
        element = t.element if isinstance(t, ArrayType) else t
        if element is PrimitiveType.DATE:
            return not self._context.options.use_string_as_date
        return element in (PrimitiveType.INT, PrimitiveType.DOUBLE, PrimitiveType.BOOLEAN)


def create_endpoint_writer(
    context: ResolutionContext, base_path: str = ""
) -> Union[ReactQueryWriter, AngularWriter]:
    """Return the endpoint writer selected by the run options."""
    flavour = context.options.api
    if flavour == "react-query":
        return ReactQueryWriter(context, base_path)
    if flavour == "angular":
        return AngularWriter(context, base_path)
    raise ValueError(f"Unknown endpoint writer {flavour!r}")


def _react_query_hooks(endpoints: list[Endpoint]) -> list[str]:
    hooks: list[str] = []
    gets = [endpoint for endpoint in endpoints if endpoint.http_method is HttpMethod.GET]
    if any(not isinstance(endpoint, PagedEndpoint) for endpoint in gets):
        hooks.extend(("useQuery", "UseQueryOptions"))
    if any(isinstance(endpoint, PagedEndpoint) for endpoint in gets):
        hooks.extend(("useInfiniteQuery", "UseInfiniteQueryOptions"))
    if len(gets) != len(endpoints):
        hooks.extend(("useMutation", "UseMutationOptions"))
    return hooks


def _query_key_expression(key: str, variables: list[Field]) -> str:
    parts = [f"'{key}'", *(sanitize_identifier(member.name) for member in variables)]
    return "[" + ", ".join(parts) + "]"


def _params_entries(params: list[Field]) -> list[str]:
    entries: list[str] = []
    for member in params:
        variable = sanitize_identifier(member.name)
        if isinstance(member.type, ObjectType):
            entries.append(f"...{variable}")
        elif variable == member.name:
            entries.append(variable)
        else:
            entries.append(f"{property_key(member.name)}: {variable}")
    return entries
