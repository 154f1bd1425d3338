"""Custom pylint rules for project typing and type-dispatch policy."""

from __future__ import annotations

from collections.abc import Iterable

from astroid import nodes
from pylint.checkers import BaseChecker
from pylint.lint import PyLinter


_MESSAGE_PREFER_OPTIONAL = "prefer-optional"
_MESSAGE_PREFER_UNION = "prefer-union"
_MESSAGE_DISPATCH_WITHOUT_FALLBACK = "dispatch-without-fallback"


class ProjectRulesChecker(BaseChecker):
    """Project-specific AST checks."""

    name = "project-rules"

    msgs = {
        "C9501": (
            "Use Optional[T] instead of T | None in annotations",
            _MESSAGE_PREFER_OPTIONAL,
            "Project style requires Optional[T] for nullable annotations.",
        ),
        "C9502": (
            "Use Union[...] instead of | in type aliases",
            _MESSAGE_PREFER_UNION,
            "Project style spells type alias unions with typing.Union.",
        ),
        "E9503": (
            "Function %r dispatches on isinstance but does not end with a raise",
            _MESSAGE_DISPATCH_WITHOUT_FALLBACK,
            "Every dispatch over type variants must fail loudly on an unhandled variant.",
        ),
    }

    def visit_annassign(self, node: nodes.AnnAssign) -> None:
        """Validate annotation style for annotated assignments."""
        self._check_annotation(node.annotation)

    def visit_arguments(self, node: nodes.Arguments) -> None:
        """Validate annotation style for function arguments."""
        for annotation in self._iter_argument_annotations(node):
            self._check_annotation(annotation)

    def visit_typealias(self, node: nodes.TypeAlias) -> None:
        """Reject ``|`` unions on the right-hand side of ``type`` aliases."""
        for candidate in node.value.nodes_of_class(nodes.BinOp):
            if candidate.op == "|":
                self.add_message(_MESSAGE_PREFER_UNION, node=candidate)

    def visit_functiondef(self, node: nodes.FunctionDef) -> None:
        """Validate the return annotation and any isinstance dispatch chain."""
        if node.returns is not None:
            self._check_annotation(node.returns)
        self._check_dispatch(node)

    def visit_asyncfunctiondef(self, node: nodes.AsyncFunctionDef) -> None:
        """Validate annotation style for async function return type."""
        if node.returns is not None:
            self._check_annotation(node.returns)

    def _check_annotation(self, annotation: nodes.NodeNG) -> None:
        for optional_union in self._iter_optional_pipe_unions(annotation):
            self.add_message(_MESSAGE_PREFER_OPTIONAL, node=optional_union)

    def _check_dispatch(self, node: nodes.FunctionDef) -> None:
        dispatch_count = sum(1 for statement in node.body if _is_isinstance_branch(statement))
        if dispatch_count < 2:
            return
        if not isinstance(node.body[-1], nodes.Raise):
            self.add_message(_MESSAGE_DISPATCH_WITHOUT_FALLBACK, node=node, args=(node.name,))

    @staticmethod
    def _iter_argument_annotations(arguments: nodes.Arguments) -> Iterable[nodes.NodeNG]:
        for annotation in arguments.posonlyargs_annotations:
            if annotation is not None:
                yield annotation
        for annotation in arguments.annotations:
            if annotation is not None:
                yield annotation
        for annotation in arguments.kwonlyargs_annotations:
            if annotation is not None:
                yield annotation
        if arguments.varargannotation is not None:
            yield arguments.varargannotation
        if arguments.kwargannotation is not None:
            yield arguments.kwargannotation

    @staticmethod
    def _iter_optional_pipe_unions(annotation: nodes.NodeNG) -> Iterable[nodes.BinOp]:
        for candidate in annotation.nodes_of_class(nodes.BinOp):
            if candidate.op != "|":
                continue
            if _is_none_literal(candidate.left) or _is_none_literal(candidate.right):
                yield candidate


def _is_none_literal(node: nodes.NodeNG) -> bool:
    return isinstance(node, nodes.Const) and node.value is None


def _is_isinstance_branch(statement: nodes.NodeNG) -> bool:
    if not isinstance(statement, nodes.If):
        return False
    test = statement.test
    return (
        isinstance(test, nodes.Call)
        and isinstance(test.func, nodes.Name)
        and test.func.name == "isinstance"
    )


def register(linter: PyLinter) -> None:
    """Register checker."""
    linter.register_checker(ProjectRulesChecker(linter))
