"""
Java source front end — tree-sitter parse trees → declaration model.

Responsibilities:
- Parse ``*.java`` files under one or more source roots.
- Record package, imports and every type declaration (nested included),
  with methods, constructors, fields and annotation type attributes.
- Resolve annotation names to qualified names the way javac would for
  the cases that matter here: qualified use, single-type import, same
  package, on-demand import.

The result is a ``JavaSourceModel`` implementing ``DeclarationSource``.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from pathlib import Path

import tree_sitter_java as tsjava
from tree_sitter import Language, Node, Parser

from subgen.core.frontend.base import walk_types
from subgen.core.models.declarations import (
    AnnotationAttribute,
    AnnotationMirror,
    AnnotationTypeElement,
    AnnotationValue,
    Element,
    ElementKind,
    ExecutableElement,
    SourcePosition,
    TypeElement,
    VariableElement,
)

logger = logging.getLogger(__name__)

JAVA_LANGUAGE = Language(tsjava.language())

# ── Node type tables ────────────────────────────────────────────

_TYPE_DECLARATIONS: dict[str, ElementKind] = {
    "class_declaration": ElementKind.CLASS,
    "interface_declaration": ElementKind.INTERFACE,
    "enum_declaration": ElementKind.ENUM,
    "record_declaration": ElementKind.RECORD,
    "annotation_type_declaration": ElementKind.ANNOTATION_TYPE,
}

_FIELD_DECLARATIONS = ("field_declaration", "constant_declaration")
_ANNOTATIONS = ("marker_annotation", "annotation")
_NAMES = ("scoped_identifier", "identifier")
_COMMENTS = ("comment", "line_comment", "block_comment")


@dataclass
class CompilationUnit:
    """One parsed ``.java`` file."""

    path: str
    package: str = ""
    single_imports: dict[str, str] = field(default_factory=dict)
    on_demand_imports: list[str] = field(default_factory=list)
    types: list[TypeElement] = field(default_factory=list)
    has_errors: bool = False


# ── Node helpers ────────────────────────────────────────────────


def _text(node: Node | None) -> str:
    if node is None or node.text is None:
        return ""
    return node.text.decode("utf-8", errors="replace")


def _normalize(text: str) -> str:
    """Collapse whitespace inside a type or expression."""
    return " ".join(text.split())


def _named(node: Node | None) -> list[Node]:
    """Named children minus comments."""
    if node is None:
        return []
    return [c for c in node.named_children if c.type not in _COMMENTS]


def _first_of(node: Node, types: Iterable[str]) -> Node | None:
    wanted = tuple(types)
    for child in _named(node):
        if child.type in wanted:
            return child
    return None


def _literal(node: Node | None) -> AnnotationValue:
    """Convert an element value node into a Python value."""
    if node is None:
        return ""
    if node.type == "true":
        return True
    if node.type == "false":
        return False
    text = _text(node)
    if node.type == "decimal_integer_literal":
        return int(text.rstrip("lL").replace("_", ""))
    if node.type == "string_literal" and len(text) >= 2:
        return text[1:-1]
    return _normalize(text)


# ── Annotation name resolution ──────────────────────────────────


class _Resolver:
    """Resolve a written annotation name to a qualified type name."""

    def __init__(self, unit: CompilationUnit, known: set[str]) -> None:
        self._unit = unit
        self._known = known

    def __call__(self, name: str) -> str:
        pkg = self._unit.package
        imports = self._unit.single_imports

        if "." in name:
            head, _, rest = name.partition(".")
            if head in imports:
                return f"{imports[head]}.{rest}"
            if pkg and f"{pkg}.{name}" in self._known:
                return f"{pkg}.{name}"
            return name

        if name in imports:
            return imports[name]

        own = f"{pkg}.{name}" if pkg else name
        if own in self._known:
            return own

        for imported_pkg in self._unit.on_demand_imports:
            candidate = f"{imported_pkg}.{name}"
            if candidate in self._known:
                return candidate

        return own


# ── Parsing ─────────────────────────────────────────────────────


def _parse_header(unit: CompilationUnit, root: Node) -> None:
    """Fill package and import information from the program node."""
    for child in _named(root):
        if child.type == "package_declaration":
            unit.package = _text(_first_of(child, _NAMES))
        elif child.type == "import_declaration":
            if any(c.type == "static" for c in child.children):
                continue
            name = _text(_first_of(child, _NAMES))
            if not name:
                continue
            if any(c.type == "asterisk" for c in child.children):
                unit.on_demand_imports.append(name)
            else:
                unit.single_imports[name.rsplit(".", 1)[-1]] = name


def _body_members(body: Node | None) -> list[Node]:
    members: list[Node] = []
    for child in _named(body):
        if child.type == "enum_body_declarations":
            members.extend(_named(child))
        else:
            members.append(child)
    return members


def _declared_names(node: Node, prefix: str) -> Iterable[str]:
    """Qualified names of every type declared under ``node``."""
    for child in _body_members(node) if node.type != "program" else _named(node):
        if child.type in _TYPE_DECLARATIONS:
            name = _text(child.child_by_field_name("name"))
            qualified = f"{prefix}.{name}" if prefix else name
            yield qualified
            yield from _declared_names(child.child_by_field_name("body") or child, qualified)


class _UnitBuilder:
    """Builds declaration elements for one compilation unit."""

    def __init__(self, unit: CompilationUnit, resolve: _Resolver) -> None:
        self.unit = unit
        self.resolve = resolve

    def position(self, node: Node) -> SourcePosition:
        return SourcePosition(path=self.unit.path, line=node.start_point[0] + 1)

    def annotations(self, node: Node) -> tuple[AnnotationMirror, ...]:
        modifiers = _first_of(node, ("modifiers",))
        if modifiers is None:
            return ()
        return tuple(self.mirror(a) for a in _named(modifiers) if a.type in _ANNOTATIONS)

    def mirror(self, node: Node) -> AnnotationMirror:
        name = _text(node.child_by_field_name("name"))
        values: dict[str, AnnotationValue] = {}
        for arg in _named(node.child_by_field_name("arguments")):
            if arg.type == "element_value_pair":
                key = _text(arg.child_by_field_name("key"))
                values[key] = _literal(arg.child_by_field_name("value"))
            else:
                values["value"] = _literal(arg)
        return AnnotationMirror(annotation_type=self.resolve(name), values=values)

    def type_element(self, node: Node, prefix: str) -> TypeElement:
        kind = _TYPE_DECLARATIONS[node.type]
        name = _text(node.child_by_field_name("name"))
        qualified = f"{prefix}.{name}" if prefix else name
        body = node.child_by_field_name("body")

        enclosed: list[Element] = []
        attributes: list[AnnotationAttribute] = []
        for member in _body_members(body):
            if member.type in _TYPE_DECLARATIONS:
                enclosed.append(self.type_element(member, qualified))
            elif member.type == "method_declaration":
                enclosed.append(self.method(member, ElementKind.METHOD))
            elif member.type == "constructor_declaration":
                enclosed.append(self.method(member, ElementKind.CONSTRUCTOR))
            elif member.type in _FIELD_DECLARATIONS:
                enclosed.extend(self.fields(member))
            elif member.type == "annotation_type_element_declaration":
                attributes.append(self.attribute(member))

        common = dict(
            kind=kind,
            simple_name=name,
            annotations=self.annotations(node),
            position=self.position(node),
            qualified_name=qualified,
            package=self.unit.package,
            enclosed=tuple(enclosed),
        )
        if kind == ElementKind.ANNOTATION_TYPE:
            return AnnotationTypeElement(attributes=tuple(attributes), **common)
        return TypeElement(**common)

    def method(self, node: Node, kind: ElementKind) -> ExecutableElement:
        if kind == ElementKind.METHOD:
            return_type = _normalize(_text(node.child_by_field_name("type")))
            return_type += _text(node.child_by_field_name("dimensions"))
        else:
            return_type = ""

        parameters = tuple(
            _parameter_type(p)
            for p in _named(node.child_by_field_name("parameters"))
            if p.type in ("formal_parameter", "spread_parameter")
        )
        type_parameters = tuple(
            _type_parameter_name(tp)
            for tp in _named(node.child_by_field_name("type_parameters"))
            if tp.type == "type_parameter"
        )
        return ExecutableElement(
            kind=kind,
            simple_name=_text(node.child_by_field_name("name")),
            annotations=self.annotations(node),
            position=self.position(node),
            return_type=return_type,
            parameter_types=parameters,
            type_parameters=type_parameters,
        )

    def fields(self, node: Node) -> list[VariableElement]:
        field_type = _normalize(_text(node.child_by_field_name("type")))
        annotations = self.annotations(node)
        return [
            VariableElement(
                kind=ElementKind.FIELD,
                simple_name=_text(declarator.child_by_field_name("name")),
                annotations=annotations,
                position=self.position(declarator),
                type=field_type,
            )
            for declarator in _named(node)
            if declarator.type == "variable_declarator"
        ]

    def attribute(self, node: Node) -> AnnotationAttribute:
        default: AnnotationValue | None = None
        children = node.children
        for i, child in enumerate(children):
            if child.type == "default":
                value = next((c for c in children[i + 1:] if c.is_named and c.type not in _COMMENTS), None)
                default = _literal(value)
                break
        return AnnotationAttribute(
            name=_text(node.child_by_field_name("name")),
            type=_normalize(_text(node.child_by_field_name("type"))),
            default=default,
        )


def _parameter_type(node: Node) -> str:
    if node.type == "formal_parameter":
        type_text = _normalize(_text(node.child_by_field_name("type")))
        return type_text + _text(node.child_by_field_name("dimensions"))
    # spread_parameter: modifiers? type '...' variable_declarator
    for child in _named(node):
        if child.type not in ("modifiers", "variable_declarator") + _ANNOTATIONS:
            return _normalize(_text(child)) + "[]"
    return "Object[]"


def _type_parameter_name(node: Node) -> str:
    ident = _first_of(node, ("type_identifier", "identifier"))
    if ident is not None:
        return _text(ident)
    return _text(node).split()[0]


# ── Model ───────────────────────────────────────────────────────


class JavaSourceModel:
    """Declarations of a set of Java sources.

    Usage::

        model = JavaSourceModel.from_paths([Path("src")])
        for cls in model.annotated_types("com.example.Marker"):
            ...
    """

    def __init__(self, units: Iterable[CompilationUnit], skipped: Iterable[str] = ()) -> None:
        self.units = list(units)
        self.skipped = list(skipped)
        self._types = [t for unit in self.units for t in unit.types]

    # ── Construction ────────────────────────────────────────────

    @classmethod
    def from_sources(
        cls,
        sources: Mapping[str, bytes | str],
        external_types: Iterable[str] = (),
        skipped: Iterable[str] = (),
    ) -> JavaSourceModel:
        """Build a model from ``{path: source}``.

        Args:
            sources:        Source text per path; parsed in sorted path order.
            external_types: Qualified names of types that exist outside
                            the given sources (used for name resolution).
            skipped:        Paths that could not be read, carried for reporting.
        """
        parser = Parser(JAVA_LANGUAGE)
        parsed: list[tuple[CompilationUnit, Node]] = []
        known: set[str] = set(external_types)

        for path in sorted(sources):
            raw = sources[path]
            data = raw.encode("utf-8") if isinstance(raw, str) else raw
            tree = parser.parse(data)
            unit = CompilationUnit(path=path, has_errors=tree.root_node.has_error)
            if unit.has_errors:
                logger.warning("Syntax errors in %s — using partial parse tree", path)
            _parse_header(unit, tree.root_node)
            known.update(_declared_names(tree.root_node, unit.package))
            parsed.append((unit, tree.root_node))

        for unit, root in parsed:
            builder = _UnitBuilder(unit, _Resolver(unit, known))
            unit.types = [
                builder.type_element(node, unit.package)
                for node in _named(root)
                if node.type in _TYPE_DECLARATIONS
            ]

        logger.debug("Parsed %d compilation units (%d known types)", len(parsed), len(known))
        return cls(units=[u for u, _ in parsed], skipped=skipped)

    @classmethod
    def from_paths(
        cls,
        roots: Iterable[Path],
        external_types: Iterable[str] = (),
    ) -> JavaSourceModel:
        """Read every ``*.java`` under ``roots`` and build a model.

        Unreadable files and missing roots are skipped with a warning.
        """
        sources: dict[str, bytes] = {}
        skipped: list[str] = []

        for root in roots:
            if root.is_file():
                files = [root]
            elif root.is_dir():
                files = sorted(root.rglob("*.java"))
            else:
                logger.warning("Source root does not exist: %s", root)
                skipped.append(str(root))
                continue

            for path in files:
                try:
                    sources[str(path)] = path.read_bytes()
                except OSError as e:
                    logger.warning("Cannot read %s: %s — skipping", path, e)
                    skipped.append(str(path))

        logger.info("Scanning %d Java files", len(sources))
        return cls.from_sources(sources, external_types=external_types, skipped=skipped)

    # ── DeclarationSource ───────────────────────────────────────

    @property
    def types(self) -> list[TypeElement]:
        return list(self._types)

    def annotated_types(self, marker: str) -> list[TypeElement]:
        return [t for t in walk_types(self._types) if t.get_annotation(marker) is not None]

    def annotation_type(self, qualified_name: str) -> AnnotationTypeElement | None:
        for element in walk_types(self._types):
            if isinstance(element, AnnotationTypeElement) and element.qualified_name == qualified_name:
                return element
        return None

    def find_type(self, qualified_name: str) -> TypeElement | None:
        for element in walk_types(self._types):
            if element.qualified_name == qualified_name:
                return element
        return None
