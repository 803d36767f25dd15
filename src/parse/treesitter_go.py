"""Tree-sitter based symbol extraction for Go source files."""

from __future__ import annotations

from typing import TYPE_CHECKING

from tree_sitter import Language, Node, Parser
from tree_sitter_go import language as get_go_language

from codemap.models import Symbol
from parse.base import ExtractionError

if TYPE_CHECKING:
    from codemap.models import SymbolKind

_PARSER: Parser | None = None

_PARAMETER_NODES = ("parameter_declaration", "variadic_parameter_declaration")
# Older grammar releases call interface methods ``method_spec``.
_INTERFACE_METHOD_NODES = ("method_elem", "method_spec")


def _get_parser() -> Parser:
    """Initialize and return the Tree-sitter parser with Go language."""
    global _PARSER
    if _PARSER is None:
        lang = Language(get_go_language())
        _PARSER = Parser(lang)

    return _PARSER


def _decode_node_text(source_bytes: bytes, node: Node) -> str:
    return source_bytes[node.start_byte : node.end_byte].decode("utf8", errors="replace")


def _span(node: Node) -> tuple[int, int]:
    return node.start_point[0] + 1, node.end_point[0] + 1


def _declared_names(node: Node) -> list[Node]:
    # Newer grammars put the separating commas of a name list in the field too.
    return [
        child
        for child in node.children_by_field_name("name")
        if child.type == "identifier"
    ]


def _format_type(source_bytes: bytes, node: Node | None) -> str:
    """Render a type expression the compact way the outline shows it."""
    if node is None:
        return "any"

    node_type = node.type
    if node_type in ("type_identifier", "identifier", "package_identifier"):
        return _decode_node_text(source_bytes, node)
    if node_type == "pointer_type":
        inner = node.named_children[0] if node.named_children else None
        return "*" + _format_type(source_bytes, inner)
    if node_type in ("slice_type", "array_type", "implicit_length_array_type"):
        return "[]" + _format_type(source_bytes, node.child_by_field_name("element"))
    if node_type == "map_type":
        key = _format_type(source_bytes, node.child_by_field_name("key"))
        value = _format_type(source_bytes, node.child_by_field_name("value"))
        return f"map[{key}]{value}"
    if node_type == "qualified_type":
        package = _format_type(source_bytes, node.child_by_field_name("package"))
        name = _format_type(source_bytes, node.child_by_field_name("name"))
        return f"{package}.{name}"
    if node_type == "interface_type":
        return "interface{}"
    if node_type == "function_type":
        return "func(...)"
    if node_type == "channel_type":
        return "chan " + _format_type(source_bytes, node.child_by_field_name("value"))
    if node_type == "generic_type":
        return " ".join(_decode_node_text(source_bytes, node).split())
    if node_type == "parenthesized_type":
        inner = node.named_children[0] if node.named_children else None
        return _format_type(source_bytes, inner)
    return "any"


def _parameter_type(source_bytes: bytes, param: Node) -> str:
    rendered = _format_type(source_bytes, param.child_by_field_name("type"))
    if param.type == "variadic_parameter_declaration":
        return "..." + rendered
    return rendered


def _format_parameters(source_bytes: bytes, params: Node | None) -> list[str]:
    if params is None:
        return []

    rendered: list[str] = []
    for param in params.named_children:
        if param.type not in _PARAMETER_NODES:
            continue
        param_type = _parameter_type(source_bytes, param)
        names = _declared_names(param)
        if not names:
            rendered.append(param_type)
            continue
        for name in names:
            rendered.append(f"{_decode_node_text(source_bytes, name)} {param_type}")
    return rendered


def _format_results(source_bytes: bytes, result: Node | None) -> str:
    """Render results as `` T`` or `` (A, B)``; result names are dropped."""
    if result is None:
        return ""

    if result.type == "parameter_list":
        types = [
            _parameter_type(source_bytes, child)
            for child in result.named_children
            if child.type in _PARAMETER_NODES
        ]
    else:
        types = [_format_type(source_bytes, result)]

    if not types:
        return ""
    if len(types) == 1:
        return " " + types[0]
    return " (" + ", ".join(types) + ")"


def _function_symbol(source_bytes: bytes, node: Node) -> Symbol | None:
    name_node = node.child_by_field_name("name")
    if name_node is None:
        return None

    name = _decode_node_text(source_bytes, name_node)
    params = _format_parameters(source_bytes, node.child_by_field_name("parameters"))
    signature = f"{name}({', '.join(params)})" + _format_results(
        source_bytes, node.child_by_field_name("result")
    )

    kind: SymbolKind = "function"
    receiver = node.child_by_field_name("receiver")
    if receiver is not None:
        receiver_params = [
            child for child in receiver.named_children if child.type in _PARAMETER_NODES
        ]
        if receiver_params:
            kind = "method"
            receiver_type = _format_type(
                source_bytes, receiver_params[0].child_by_field_name("type")
            )
            signature = f"({receiver_type}) {signature}"

    start_line, end_line = _span(node)
    return Symbol(
        name=name,
        kind=kind,
        signature=signature,
        start_line=start_line,
        end_line=end_line,
    )


def _interface_methods(source_bytes: bytes, interface: Node) -> list[Symbol]:
    methods: list[Symbol] = []
    for child in interface.named_children:
        if child.type not in _INTERFACE_METHOD_NODES:
            continue
        name_node = child.child_by_field_name("name")
        if name_node is None:
            continue
        start_line, end_line = _span(child)
        methods.append(
            Symbol(
                name=_decode_node_text(source_bytes, name_node),
                kind="method",
                start_line=start_line,
                end_line=end_line,
            )
        )
    return methods


def _count_struct_fields(struct: Node) -> int:
    for child in struct.named_children:
        if child.type == "field_declaration_list":
            return sum(
                1 for field in child.named_children if field.type == "field_declaration"
            )
    return 0


def _type_symbols(source_bytes: bytes, declaration: Node) -> list[Symbol]:
    symbols: list[Symbol] = []
    for spec in declaration.named_children:
        if spec.type not in ("type_spec", "type_alias"):
            continue
        name_node = spec.child_by_field_name("name")
        if name_node is None:
            continue

        name = _decode_node_text(source_bytes, name_node)
        type_node = spec.child_by_field_name("type")
        start_line, end_line = _span(spec)
        shape = type_node.type if type_node is not None else ""

        if shape == "interface_type" and type_node is not None:
            symbols.append(
                Symbol(
                    name=name,
                    kind="interface",
                    signature=f"interface {name}",
                    start_line=start_line,
                    end_line=end_line,
                    children=_interface_methods(source_bytes, type_node),
                )
            )
        elif shape == "struct_type" and type_node is not None:
            field_count = _count_struct_fields(type_node)
            symbols.append(
                Symbol(
                    name=name,
                    kind="struct",
                    signature=f"struct {name} ({field_count} fields)",
                    start_line=start_line,
                    end_line=end_line,
                )
            )
        else:
            symbols.append(
                Symbol(
                    name=name,
                    kind="type",
                    signature=f"type {name}",
                    start_line=start_line,
                    end_line=end_line,
                )
            )
    return symbols


def _value_specs(declaration: Node, spec_type: str) -> list[Node]:
    specs: list[Node] = []
    for child in declaration.named_children:
        if child.type == spec_type:
            specs.append(child)
        elif child.type.endswith("_spec_list"):
            specs.extend(_value_specs(child, spec_type))
    return specs


def _value_symbols(source_bytes: bytes, declaration: Node) -> list[Symbol]:
    if declaration.type == "const_declaration":
        kind: SymbolKind = "const"
        spec_type = "const_spec"
    else:
        kind = "var"
        spec_type = "var_spec"

    symbols: list[Symbol] = []
    for spec in _value_specs(declaration, spec_type):
        type_node = spec.child_by_field_name("type")
        start_line, end_line = _span(spec)
        for name_node in _declared_names(spec):
            name = _decode_node_text(source_bytes, name_node)
            signature = f"{kind} {name}"
            if type_node is not None:
                signature += " " + _format_type(source_bytes, type_node)
            symbols.append(
                Symbol(
                    name=name,
                    kind=kind,
                    signature=signature,
                    start_line=start_line,
                    end_line=end_line,
                )
            )
    return symbols


class GoExtractor:
    """Top-level declarations of a Go file, with exact line spans."""

    def extract(self, content: str) -> list[Symbol]:
        source_bytes = content.encode("utf8")
        tree = _get_parser().parse(source_bytes)
        root_node = tree.root_node

        if root_node.has_error:
            msg = "Go source contains syntax errors"
            raise ExtractionError(msg)

        symbols: list[Symbol] = []
        for node in root_node.named_children:
            if node.type in ("function_declaration", "method_declaration"):
                symbol = _function_symbol(source_bytes, node)
                if symbol is not None:
                    symbols.append(symbol)
            elif node.type == "type_declaration":
                symbols.extend(_type_symbols(source_bytes, node))
            elif node.type in ("const_declaration", "var_declaration"):
                symbols.extend(_value_symbols(source_bytes, node))

        return symbols


__all__ = ["GoExtractor"]
