"""Provider that reads declared types from YAML manifests."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import yaml

from ..logging import get_logger, kv
from .base import ImportResolutionError, ProviderError, SourceProvider
from .descriptors import (
    Documentation,
    MemberDescriptor,
    NativeKind,
    Package,
    TypeDeclaration,
    TypeDescriptor,
    quote_tag,
)

_MANIFEST_SUFFIXES = (".yml", ".yaml")
_IDENTIFIER = re.compile(r"[A-Za-z_][\w./-]*")
_ARRAY_LENGTH = re.compile(r"\[(\d+)\]")

BASIC_TYPES = frozenset(
    {
        "bool",
        "string",
        "byte",
        "rune",
        "int",
        "int8",
        "int16",
        "int32",
        "int64",
        "uint",
        "uint8",
        "uint16",
        "uint32",
        "uint64",
        "uintptr",
        "float32",
        "float64",
        "complex64",
        "complex128",
    }
)

logger = get_logger("provider.manifest")


class ManifestProvider(SourceProvider):
    """Loads packages from ``*.yml``/``*.yaml`` manifests in a file or directory tree.

    Loading is two-pass: every declared type first gets a named descriptor,
    then type expressions are parsed, so declarations may refer to each
    other (and to themselves) in any order.
    """

    def __init__(self) -> None:
        self._packages: Dict[str, Package] = {}
        self._named: Dict[Tuple[str, str], TypeDescriptor] = {}

    # ------------------------------------------------------------------
    # SourceProvider

    def load_packages(self, source_path: Path) -> List[Package]:
        source_path = Path(source_path)
        if not source_path.exists():
            raise ProviderError(f"Source path not found: {source_path}")

        self._packages = {}
        self._named = {}
        pending: List[Tuple[Package, List[Mapping[str, Any]]]] = []
        for manifest in self._manifest_files(source_path):
            for entry in self._read_manifest(manifest):
                package, type_entries = self._declare_package(entry, manifest)
                pending.append((package, type_entries))

        for package, type_entries in pending:
            for type_entry in type_entries:
                declaration = package.declarations[str(type_entry["name"])]
                declaration.descriptor.origin = self._declared_origin(package, type_entry)

        logger.debug("Loaded %s", kv(source=str(source_path), packages=len(self._packages)))
        return list(self._packages.values())

    def list_declared_types(self, package: Package) -> List[TypeDeclaration]:
        return list(package.declarations.values())

    def lookup_documentation(self, package: Package, type_name: str) -> Optional[Documentation]:
        declaration = package.declarations.get(type_name)
        if declaration is None:
            return None
        return declaration.doc

    def package_markers(self, package: Package) -> Mapping[str, Any]:
        return package.markers

    def type_markers(self, package: Package, type_name: str) -> Mapping[str, Any]:
        declaration = package.declarations.get(type_name)
        if declaration is None:
            return {}
        return declaration.markers

    def resolve_import(self, package: Package, import_path: str) -> Package:
        if import_path == package.path:
            return package
        if import_path not in package.imports.values():
            raise ImportResolutionError(f"package {package.path} does not import {import_path}")
        imported = self._packages.get(import_path)
        if imported is None:
            raise ImportResolutionError(f"imported package {import_path} is not loaded")
        return imported

    # ------------------------------------------------------------------
    # Manifest reading

    @staticmethod
    def _manifest_files(source_path: Path) -> List[Path]:
        if source_path.is_file():
            return [source_path]
        return sorted(
            path
            for path in source_path.rglob("*")
            if path.is_file() and path.suffix in _MANIFEST_SUFFIXES
        )

    @staticmethod
    def _read_manifest(path: Path) -> List[Mapping[str, Any]]:
        try:
            data = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as exc:
            raise ProviderError(f"Failed to read manifest {path}: {exc}") from exc
        if data is None:
            return []
        if isinstance(data, dict) and "packages" in data:
            entries = data.get("packages") or []
        elif isinstance(data, dict):
            entries = [data]
        else:
            raise ProviderError(f"Manifest {path} must contain a mapping at the root")
        if not isinstance(entries, list) or not all(isinstance(e, dict) for e in entries):
            raise ProviderError(f"Manifest {path}: 'packages' must be a list of mappings")
        return entries

    def _declare_package(
        self, entry: Mapping[str, Any], manifest: Path
    ) -> Tuple[Package, List[Mapping[str, Any]]]:
        path = entry.get("path")
        if not isinstance(path, str) or not path:
            raise ProviderError(f"Manifest {manifest}: every package needs a 'path'")
        if path in self._packages:
            raise ProviderError(f"Manifest {manifest}: package {path} declared twice")

        package = Package(
            path=path,
            name=str(entry.get("name") or path.rsplit("/", 1)[-1]),
            doc_comments=_doc_comments(entry.get("doc")),
            markers=dict(entry.get("markers") or {}),
            imports=_imports(entry.get("imports")),
        )

        type_entries = entry.get("types") or []
        if not isinstance(type_entries, list):
            raise ProviderError(f"Manifest {manifest}: 'types' of {path} must be a list")
        for type_entry in type_entries:
            if not isinstance(type_entry, dict) or not type_entry.get("name"):
                raise ProviderError(f"Manifest {manifest}: every type in {path} needs a 'name'")
            name = str(type_entry["name"])
            if name in package.declarations:
                raise ProviderError(f"Manifest {manifest}: type {path}.{name} declared twice")
            descriptor = TypeDescriptor(kind=NativeKind.NAMED, name=name, package=path)
            self._named[(path, name)] = descriptor
            package.declarations[name] = TypeDeclaration(
                name=name,
                descriptor=descriptor,
                doc=_documentation(type_entry.get("doc"), type_entry.get("raw_doc")),
                markers=dict(type_entry.get("markers") or {}),
            )

        self._packages[path] = package
        return package, type_entries

    def _declared_origin(
        self, package: Package, type_entry: Mapping[str, Any]
    ) -> Optional[TypeDescriptor]:
        if "fields" in type_entry:
            return self._struct(package, type_entry.get("fields") or [])
        if "type" not in type_entry:
            raise ProviderError(
                f"type {package.path}.{type_entry['name']} needs either 'fields' or 'type'"
            )
        return self.parse_type(package, type_entry["type"])

    # ------------------------------------------------------------------
    # Type expressions

    def parse_type(self, package: Package, spec: Any) -> Optional[TypeDescriptor]:
        """Build a descriptor from a type expression string or mapping form."""
        if isinstance(spec, str):
            return _TypeExpression(spec, package, self).parse()
        if isinstance(spec, dict) and len(spec) == 1:
            form, value = next(iter(spec.items()))
            if form == "struct":
                return self._struct(package, value or [])
            if form == "pointer":
                return TypeDescriptor(NativeKind.POINTER, elem=self.parse_type(package, value))
            if form == "slice":
                return TypeDescriptor(NativeKind.SLICE, elem=self.parse_type(package, value))
            if form == "map" and isinstance(value, dict):
                return TypeDescriptor(
                    NativeKind.MAP,
                    key=self.parse_type(package, value.get("key")),
                    elem=self.parse_type(package, value.get("value")),
                )
        raise ProviderError(f"Unsupported type expression in {package.path}: {spec!r}")

    def _struct(self, package: Package, entries: Iterable[Any]) -> TypeDescriptor:
        members: List[MemberDescriptor] = []
        for entry in entries:
            if not isinstance(entry, dict) or "type" not in entry:
                raise ProviderError(f"Struct members in {package.path} need a 'type': {entry!r}")
            doc = _documentation(entry.get("doc"), None)
            members.append(
                MemberDescriptor(
                    name=str(entry.get("name") or ""),
                    type=self.parse_type(package, entry["type"]),
                    doc=doc.text if doc else "",
                    tag=_member_tag(entry),
                )
            )
        return TypeDescriptor(NativeKind.STRUCT, members=members)

    def named(self, package: Package, qualifier: str, name: str) -> Optional[TypeDescriptor]:
        """Return the canonical named descriptor for ``qualifier.name`` as seen from ``package``."""
        if not qualifier:
            path = package.path
        else:
            path = package.imports.get(qualifier, qualifier)
            if path != package.path and path not in package.imports.values():
                alias = path.rsplit("/", 1)[-1]
                package.imports[path if alias in package.imports else alias] = path

        descriptor = self._named.get((path, name))
        if descriptor is not None:
            return descriptor
        if path in self._packages:
            message = f"undefined: {path}.{name}" if qualifier else f"undefined: {name}"
            package.add_error(message)
            logger.warning("Unresolvable type reference %s", kv(package=package.path, type=name))
            return None
        # Declared outside the loaded manifests: opaque, resolved lazily by import.
        descriptor = TypeDescriptor(kind=NativeKind.NAMED, name=name, package=path)
        self._named[(path, name)] = descriptor
        return descriptor


class _TypeExpression:
    """Recursive-descent parser for ``*T``, ``[]T``, ``[N]T``, ``map[K]V`` and names."""

    def __init__(self, text: str, package: Package, provider: ManifestProvider) -> None:
        self._text = text
        self._pos = 0
        self._package = package
        self._provider = provider

    def parse(self) -> Optional[TypeDescriptor]:
        descriptor = self._parse()
        self._skip_spaces()
        if self._pos != len(self._text):
            raise self._error("unexpected trailing input")
        return descriptor

    def _parse(self) -> Optional[TypeDescriptor]:
        self._skip_spaces()
        text, pos = self._text, self._pos
        if text.startswith("*", pos):
            self._pos += 1
            return TypeDescriptor(NativeKind.POINTER, elem=self._parse())
        if text.startswith("[]", pos):
            self._pos += 2
            return TypeDescriptor(NativeKind.SLICE, elem=self._parse())
        array = _ARRAY_LENGTH.match(text, pos)
        if array:
            self._pos = array.end()
            return TypeDescriptor(NativeKind.ARRAY, length=int(array.group(1)), elem=self._parse())
        if text.startswith("map[", pos):
            self._pos += 4
            key = self._parse()
            self._skip_spaces()
            if not self._text.startswith("]", self._pos):
                raise self._error("expected ']' after map key")
            self._pos += 1
            return TypeDescriptor(NativeKind.MAP, key=key, elem=self._parse())
        if text.startswith("chan ", pos):
            self._pos += 5
            return TypeDescriptor(NativeKind.CHAN, elem=self._parse())
        if text.startswith("func(", pos):
            self._pos += 4
            self._consume_group("(", ")")
            # Results run to the end of the expression.
            self._pos = len(text)
            return TypeDescriptor(NativeKind.SIGNATURE, name=text[pos:].strip())
        if text.startswith("interface{", pos):
            self._pos += 9
            self._consume_group("{", "}")
            return TypeDescriptor(NativeKind.INTERFACE, name=text[pos : self._pos])
        if text.startswith("struct{", pos):
            self._pos += 6
            self._consume_group("{", "}")
            if text[pos : self._pos].replace(" ", "") != "struct{}":
                raise self._error("anonymous struct members need the {struct: [...]} form")
            return TypeDescriptor(NativeKind.STRUCT)

        match = _IDENTIFIER.match(text, pos)
        if not match:
            raise self._error("expected a type")
        self._pos = match.end()
        return self._identifier(match.group(0))

    def _identifier(self, ident: str) -> Optional[TypeDescriptor]:
        if ident in BASIC_TYPES:
            return TypeDescriptor(NativeKind.BASIC, name=ident)
        if ident == "any":
            return TypeDescriptor(NativeKind.INTERFACE, name="interface{}")
        if ident == "error":
            return TypeDescriptor(NativeKind.INTERFACE, name="error")
        qualifier, _, name = ident.rpartition(".")
        return self._provider.named(self._package, qualifier, name)

    def _consume_group(self, opening: str, closing: str) -> None:
        depth = 0
        while self._pos < len(self._text):
            char = self._text[self._pos]
            self._pos += 1
            if char == opening:
                depth += 1
            elif char == closing:
                depth -= 1
                if depth == 0:
                    return
        raise self._error(f"unbalanced '{opening}'")

    def _skip_spaces(self) -> None:
        while self._pos < len(self._text) and self._text[self._pos].isspace():
            self._pos += 1

    def _error(self, message: str) -> ProviderError:
        return ProviderError(
            f"Invalid type expression {self._text!r} in {self._package.path} "
            f"at offset {self._pos}: {message}"
        )


def _documentation(doc: Any, raw_doc: Any) -> Optional[Documentation]:
    if not isinstance(doc, str) or not doc.strip():
        return None
    raw = raw_doc if isinstance(raw_doc, str) else doc
    return Documentation(text=normalize_doc(doc), raw=raw.rstrip("\n"))


def normalize_doc(text: str) -> str:
    """Collapse comment lines into paragraphs and drop ``+marker`` lines."""
    paragraphs: List[str] = []
    current: List[str] = []
    for line in text.splitlines():
        stripped = line.strip()
        if stripped.startswith("+"):
            continue
        if not stripped:
            if current:
                paragraphs.append(" ".join(current))
                current = []
            continue
        current.append(stripped)
    if current:
        paragraphs.append(" ".join(current))
    return "\n".join(paragraphs)


def _doc_comments(value: Any) -> List[str]:
    if isinstance(value, str):
        return [value]
    if isinstance(value, list):
        return [item for item in value if isinstance(item, str)]
    return []


def _imports(value: Any) -> Dict[str, str]:
    if isinstance(value, dict):
        return {str(alias): str(path) for alias, path in value.items()}
    if isinstance(value, list):
        return {str(path).rsplit("/", 1)[-1]: str(path) for path in value}
    return {}


def _member_tag(entry: Mapping[str, Any]) -> str:
    tag = str(entry.get("tag") or "")
    json_name = entry.get("json")
    if json_name is not None and "json:" not in tag:
        pair = "json:" + quote_tag(str(json_name))
        tag = f"{tag} {pair}" if tag else pair
    return tag


__all__ = ["BASIC_TYPES", "ManifestProvider", "normalize_doc"]
