"""
Python parser: symbol records from a module's AST.

Walks a module with ``ast`` and emits one record per documented entity:

    ==========================  ======================  =============
    Python                      id                      type
    ==========================  ======================  =============
    module ``pkg/mod.py``       ``pkg/mod``             section
    ``class Foo``               ``Foo``                 class
    ``class Foo.Inner``         ``Foo.Inner``           class
    ``def Foo.bar(self)``       ``Foo#bar``             method
    ``@classmethod`` /          ``Foo.bar``             method
    ``@staticmethod``
    ``@property``               ``Foo#bar``             property
    ``def Foo.__init__``        ``Foo.new``             constructor
    module ``def helper()``     ``helper``              method
    ==========================  ======================  =============

Module sections use ``/`` instead of ``.`` because ``.`` is a qualifier
delimiter. Private names are skipped. The first base class becomes the
``superclass``; with several bases all of them become ``inherits``
(mixins). Builtins of the ``python`` profile are never used as ancestors.

Example:
    >>> walker = ASTWalker()
    >>> result = walker.walk_file(Path("src/docspine/errors.py"))
    >>> result.records[0].id
    'docspine/errors'
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path, PurePath
from typing import TYPE_CHECKING

from docspine.errors import ParseError
from docspine.model.records import RecordType, SourceLocation, SymbolRecord
from docspine.profiles import PYTHON_GLOBALS
from docspine.registry import ParseResult
from docspine.resolver.diagnostics import Diagnostic, Severity

if TYPE_CHECKING:
    from docspine.config import DocSpineConfig

_CLASS_LEVEL_DECORATORS = {"classmethod", "staticmethod"}
_PROPERTY_DECORATORS = {"property", "cached_property", "functools.cached_property"}


def short_description(docstring: str | None) -> str:
    """First paragraph of a docstring, joined onto one line."""
    if not docstring:
        return ""
    paragraph = docstring.strip().split("\n\n", 1)[0]
    return " ".join(line.strip() for line in paragraph.splitlines())


@dataclass
class _Scope:
    """Where the walker currently is inside a module."""

    section: str
    owner: str | None = None
    records: list[SymbolRecord] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)


class ASTWalker:
    """Walk a Python module AST and emit symbol records.

    Manifesto:
        Code is the source of truth. Records are mined from the module's
        structure and docstrings, never written separately.

    Architecture:
        ```
        Python File (.py)
              │
              ▼
        ast.parse() ──► Module
              │
              ├──► section record (module docstring)
              ├──► ClassDef ──► class record
              │        ├──► FunctionDef ──► method / property / constructor
              │        └──► ClassDef (nested) ──► class record
              └──► FunctionDef ──► method record
        ```

    Guardrails:
        - Do NOT assume all files are valid Python
          ✅ SyntaxError becomes a ParseError with file and line
        - Do NOT link to builtins as ancestors
          ✅ Bases from the python profile are dropped
    """

    def __init__(self, include_private: bool = False):
        self.include_private = include_private

    def walk_file(self, file_path: Path) -> ParseResult:
        """Extract records from one Python file.

        Raises:
            ParseError: Unreadable file or invalid Python
        """
        try:
            with open(file_path, encoding="utf-8") as f:
                source = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(f"Cannot read file: {e}", file=str(file_path), cause=e)

        try:
            tree = ast.parse(source, filename=str(file_path))
        except SyntaxError as e:
            raise ParseError(f"Invalid Python: {e.msg}", file=str(file_path), line=e.lineno, cause=e)

        return self.walk_module(tree, file_path)

    def walk_module(self, tree: ast.Module, file_path: PurePath) -> ParseResult:
        section = self.derive_section_name(file_path)
        scope = _Scope(section=section)
        docstring = ast.get_docstring(tree)
        scope.records.append(
            SymbolRecord(
                id=section,
                type=RecordType.SECTION.value,
                description=docstring or "",
                short_description=short_description(docstring),
                location=SourceLocation(str(file_path), 1),
            )
        )

        for node in tree.body:
            if isinstance(node, ast.ClassDef):
                self._extract_class(node, file_path, scope)
            elif isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
                self._extract_function(node, file_path, scope)

        return ParseResult(records=scope.records, diagnostics=scope.diagnostics)

    def _is_public(self, name: str) -> bool:
        return self.include_private or not name.startswith("_")

    def _extract_class(self, node: ast.ClassDef, file_path: PurePath, scope: _Scope) -> None:
        if not self._is_public(node.name):
            return

        record_id = f"{scope.owner}.{node.name}" if scope.owner else node.name
        docstring = ast.get_docstring(node)
        bases = [self._base_name(base) for base in node.bases]
        ancestors = [base for base in bases if base and base not in PYTHON_GLOBALS]

        record = SymbolRecord(
            id=record_id,
            type=RecordType.CLASS.value,
            section=scope.section,
            description=docstring or "",
            short_description=short_description(docstring),
            location=SourceLocation(str(file_path), node.lineno),
            superclass=ancestors[0] if ancestors else None,
            inherits=ancestors if len(ancestors) > 1 else [],
            extra={
                "bases": [self._get_name(base) for base in node.bases],
                "decorators": [self._get_name(d) for d in node.decorator_list],
            },
        )
        self._add(record, docstring, scope)

        inner = _Scope(section=scope.section, owner=record_id, records=scope.records, diagnostics=scope.diagnostics)
        for item in node.body:
            if isinstance(item, ast.ClassDef):
                self._extract_class(item, file_path, inner)
            elif isinstance(item, (ast.FunctionDef, ast.AsyncFunctionDef)):
                self._extract_function(item, file_path, inner)

    def _extract_function(
        self,
        node: ast.FunctionDef | ast.AsyncFunctionDef,
        file_path: PurePath,
        scope: _Scope,
    ) -> None:
        decorators = [self._get_name(d) for d in node.decorator_list]
        is_constructor = scope.owner is not None and node.name == "__init__"
        if not is_constructor and not self._is_public(node.name):
            return
        # property setters/deleters share the getter's record
        if any(d.endswith((".setter", ".deleter")) for d in decorators):
            return

        if scope.owner is None:
            record_id, record_type = node.name, RecordType.METHOD.value
        elif is_constructor:
            record_id, record_type = f"{scope.owner}.new", RecordType.CONSTRUCTOR.value
        elif _PROPERTY_DECORATORS.intersection(decorators):
            record_id, record_type = f"{scope.owner}#{node.name}", RecordType.PROPERTY.value
        elif _CLASS_LEVEL_DECORATORS.intersection(decorators):
            record_id, record_type = f"{scope.owner}.{node.name}", RecordType.METHOD.value
        else:
            record_id, record_type = f"{scope.owner}#{node.name}", RecordType.METHOD.value

        docstring = ast.get_docstring(node)
        extra = {
            "signature": self._build_signature(node),
            "decorators": decorators,
            "params": [arg.arg for arg in node.args.args if arg.arg not in ("self", "cls")],
        }
        if node.returns is not None:
            extra["returns"] = ast.unparse(node.returns)
        if isinstance(node, ast.AsyncFunctionDef):
            extra["async"] = True

        record = SymbolRecord(
            id=record_id,
            type=record_type,
            section=scope.section,
            description=docstring or "",
            short_description=short_description(docstring),
            location=SourceLocation(str(file_path), node.lineno),
            extra=extra,
        )
        self._add(record, docstring, scope)

    def _add(self, record: SymbolRecord, docstring: str | None, scope: _Scope) -> None:
        scope.records.append(record)
        if not docstring and record.type != RecordType.CONSTRUCTOR.value:
            scope.diagnostics.append(
                Diagnostic(
                    code="missing_docstring",
                    message=f"'{record.id}' has no docstring",
                    severity=Severity.INFO,
                    record_id=record.id,
                    locations=(record.location,),
                )
            )

    def _build_signature(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> str:
        """Signature string like ``send(self, body: str = '') -> bool``."""
        parts = []
        args = node.args
        positional = args.posonlyargs + args.args
        num_defaults = len(args.defaults)

        for i, arg in enumerate(positional):
            arg_str = arg.arg
            if arg.annotation:
                arg_str += f": {ast.unparse(arg.annotation)}"
            default_idx = i - (len(positional) - num_defaults)
            if default_idx >= 0:
                arg_str += f" = {ast.unparse(args.defaults[default_idx])}"
            parts.append(arg_str)
            if args.posonlyargs and i == len(args.posonlyargs) - 1:
                parts.append("/")

        if args.vararg:
            vararg_str = f"*{args.vararg.arg}"
            if args.vararg.annotation:
                vararg_str += f": {ast.unparse(args.vararg.annotation)}"
            parts.append(vararg_str)
        elif args.kwonlyargs:
            parts.append("*")

        for arg, default in zip(args.kwonlyargs, args.kw_defaults):
            arg_str = arg.arg
            if arg.annotation:
                arg_str += f": {ast.unparse(arg.annotation)}"
            if default is not None:
                arg_str += f" = {ast.unparse(default)}"
            parts.append(arg_str)

        if args.kwarg:
            kwarg_str = f"**{args.kwarg.arg}"
            if args.kwarg.annotation:
                kwarg_str += f": {ast.unparse(args.kwarg.annotation)}"
            parts.append(kwarg_str)

        sig = f"{node.name}({', '.join(parts)})"
        if node.returns:
            sig += f" -> {ast.unparse(node.returns)}"
        return sig

    def _get_name(self, node: ast.expr) -> str:
        if isinstance(node, ast.Name):
            return node.id
        elif isinstance(node, ast.Attribute):
            return f"{self._get_name(node.value)}.{node.attr}"
        elif isinstance(node, ast.Call):
            return self._get_name(node.func)
        return ast.unparse(node)

    def _base_name(self, node: ast.expr) -> str | None:
        """Base class as a record id: the last dotted component, no subscript."""
        if isinstance(node, ast.Subscript):
            node = node.value
        if isinstance(node, ast.Name):
            return node.id
        if isinstance(node, ast.Attribute):
            return node.attr
        return None

    def derive_section_name(self, file_path: PurePath) -> str:
        """Module path joined with ``/``: ``src/pkg/sub/mod.py`` → ``pkg/sub/mod``.

        Without a ``src`` directory only the file stem is used. Package
        ``__init__`` modules take the package's name.
        """
        parts = list(PurePath(file_path).with_suffix("").parts)
        try:
            src_idx = parts.index("src")
            parts = parts[src_idx + 1:]
        except ValueError:
            parts = parts[-2:] if parts[-1] == "__init__" else [parts[-1]]

        if len(parts) > 1 and parts[-1] == "__init__":
            parts = parts[:-1]
        return "/".join(parts)


def parse_python(path: PurePath, config: DocSpineConfig | None = None) -> ParseResult:
    """Parser entry point for ``.py`` files."""
    return ASTWalker().walk_file(Path(path))


__all__ = ["ASTWalker", "parse_python", "short_description"]
