from __future__ import annotations

import ast
import builtins
from typing import Dict, List, Optional, Tuple, Union

from ..errors import ExtractionError
from ..model import (
	FieldDescriptor,
	MemberDescriptor,
	ModuleDescriptor,
	ParameterDescriptor,
	TypeDescriptor,
)
from ..names import to_module_name, to_package_name
from ..vfs import VirtualFile
from .base import MetadataAdapter
from .usage import collect_usages, dotted_name

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]

ANNOTATED = {"typing.Annotated", "typing_extensions.Annotated"}
BUILTIN_NAMES = frozenset(dir(builtins))


def is_public_name(name: str) -> bool:
	if name.startswith("__") and name.endswith("__"):
		return True
	return not name.startswith("_")


class NameResolver:
	"""Qualifies names used in a module through its imports and definitions."""

	def __init__(self, module: str, package: str) -> None:
		self.module = module
		self.package = package
		self.aliases: Dict[str, str] = {}
		self.local: Dict[str, str] = {}

	def add_imports(self, body: List[ast.stmt]) -> List[str]:
		imports: List[str] = []
		for node in body:
			if isinstance(node, ast.Import):
				for alias in node.names:
					imports.append(alias.name)
					if alias.asname:
						self.aliases[alias.asname] = alias.name
					else:
						head = alias.name.split(".", 1)[0]
						self.aliases[head] = head
			elif isinstance(node, ast.ImportFrom):
				module = self._absolute(node.module or "", node.level)
				for alias in node.names:
					if alias.name == "*":
						continue
					name = f"{module}.{alias.name}" if module else alias.name
					imports.append(name)
					self.aliases[alias.asname or alias.name] = name
			elif isinstance(node, (ast.If, ast.Try)):
				# TYPE_CHECKING blocks and import fallbacks
				nested = list(node.body) + list(node.orelse)
				nested += [stmt for handler in getattr(node, "handlers", []) for stmt in handler.body]
				imports.extend(self.add_imports(nested))
		return imports

	def add_local(self, name: str, qualified: Optional[str] = None) -> None:
		self.local[name] = qualified or f"{self.module}.{name}"

	def _absolute(self, module: str, level: int) -> str:
		if not level:
			return module
		parts = self.package.split(".") if self.package else []
		if level > 1:
			parts = parts[: len(parts) - (level - 1)]
		if module:
			parts.append(module)
		return ".".join(parts)

	def lookup(self, dotted: str) -> Optional[str]:
		"""Qualified name, or None when the first segment is unknown."""
		head, _, tail = dotted.partition(".")
		if head in self.local:
			base = self.local[head]
		elif head in self.aliases:
			base = self.aliases[head]
		elif head in BUILTIN_NAMES:
			base = f"builtins.{head}"
		else:
			return None
		return f"{base}.{tail}" if tail else base

	def resolve(self, dotted: str) -> str:
		return self.lookup(dotted) or dotted

	def type_name(self, node: Optional[ast.AST]) -> str:
		if node is None:
			return "object"
		if isinstance(node, ast.Constant):
			if node.value is None:
				return "None"
			if isinstance(node.value, str):
				parsed = _parse_annotation(node.value)
				return self.type_name(parsed) if parsed is not None else node.value
			return repr(node.value)
		name = dotted_name(node)
		if name:
			return self.resolve(name)
		if isinstance(node, ast.Subscript):
			origin = self.type_name(node.value)
			elements = node.slice.elts if isinstance(node.slice, ast.Tuple) else [node.slice]
			return f"{origin}[{', '.join(self.type_name(e) for e in elements)}]"
		if isinstance(node, ast.BinOp) and isinstance(node.op, ast.BitOr):
			return f"{self.type_name(node.left)} | {self.type_name(node.right)}"
		if isinstance(node, (ast.List, ast.Tuple)):
			return f"[{', '.join(self.type_name(e) for e in node.elts)}]"
		return ast.unparse(node)

	def annotation(self, node: Optional[ast.AST]) -> Tuple[str, List[str]]:
		"""Split an annotation into its type name and ``Annotated`` tags."""
		if isinstance(node, ast.Constant) and isinstance(node.value, str):
			parsed = _parse_annotation(node.value)
			if parsed is not None:
				node = parsed
		if isinstance(node, ast.Subscript) and isinstance(node.slice, ast.Tuple):
			origin = dotted_name(node.value)
			if origin and self.resolve(origin) in ANNOTATED and node.slice.elts:
				first, *metadata = node.slice.elts
				return self.type_name(first), [self.tag_name(m) for m in metadata]
		return self.type_name(node), []

	def tag_name(self, node: ast.AST) -> str:
		if isinstance(node, ast.Call):
			node = node.func
		name = dotted_name(node)
		if name:
			return self.resolve(name)
		return ast.unparse(node)


def _parse_annotation(text: str) -> Optional[ast.AST]:
	try:
		return ast.parse(text, mode="eval").body
	except SyntaxError:
		return None


def _get_decorator_names(node: ast.AST, resolver: NameResolver) -> List[str]:
	return [resolver.tag_name(deco) for deco in getattr(node, "decorator_list", []) or []]


def _base_name(node: ast.expr, resolver: NameResolver) -> str:
	# Generic[T] and friends are recorded by their origin
	if isinstance(node, ast.Subscript):
		node = node.value
	name = dotted_name(node)
	if name:
		return resolver.resolve(name)
	return ast.unparse(node)


def _parameters(args: ast.arguments, resolver: NameResolver, bound: bool) -> List[ParameterDescriptor]:
	entries: List[Tuple[ast.arg, str]] = []
	for a in args.posonlyargs + args.args:
		entries.append((a, "positional"))
	if args.vararg:
		entries.append((args.vararg, "vararg"))
	for a in args.kwonlyargs:
		entries.append((a, "keyword"))
	if args.kwarg:
		entries.append((args.kwarg, "kwarg"))
	if bound and entries and entries[0][1] == "positional":
		entries = entries[1:]  # self / cls
	params: List[ParameterDescriptor] = []
	for arg, kind in entries:
		type_name, tags = resolver.annotation(arg.annotation)
		params.append(ParameterDescriptor(name=arg.arg, type_name=type_name, tags=tags, kind=kind))
	return params


def _member(node: FunctionNode, owner: str, resolver: NameResolver, owner_type: Optional[str]) -> MemberDescriptor:
	tags = _get_decorator_names(node, resolver)
	if owner_type is None:
		kind = "function"
	elif "builtins.staticmethod" in tags:
		kind = "staticmethod"
	elif "builtins.classmethod" in tags:
		kind = "classmethod"
	else:
		kind = "method"
	return MemberDescriptor(
		name=node.name,
		owner=owner,
		parameters=_parameters(node.args, resolver, bound=kind in ("method", "classmethod")),
		return_type=resolver.type_name(node.returns),
		tags=tags,
		usages=collect_usages(node, resolver.lookup, owner_type),
		kind=kind,
		public=is_public_name(node.name),
		line=node.lineno,
	)


def _fields(node: ast.ClassDef, owner: str, resolver: NameResolver) -> List[FieldDescriptor]:
	fields: Dict[str, FieldDescriptor] = {}

	def add(name: str, annotation: Optional[ast.AST]) -> None:
		if name in fields or (name.startswith("__") and name.endswith("__")):
			return
		type_name, tags = resolver.annotation(annotation)
		fields[name] = FieldDescriptor(
			name=name, owner=owner, type_name=type_name, tags=tags, public=is_public_name(name)
		)

	for sub in node.body:
		if isinstance(sub, ast.AnnAssign) and isinstance(sub.target, ast.Name):
			add(sub.target.id, sub.annotation)
		elif isinstance(sub, ast.Assign):
			for target in sub.targets:
				if isinstance(target, ast.Name):
					add(target.id, None)
	# Instance attributes assigned in __init__
	for sub in node.body:
		if isinstance(sub, (ast.FunctionDef, ast.AsyncFunctionDef)) and sub.name == "__init__":
			for stmt in ast.walk(sub):
				if isinstance(stmt, ast.AnnAssign):
					targets, annotation = [stmt.target], stmt.annotation
				elif isinstance(stmt, ast.Assign):
					targets, annotation = stmt.targets, None
				else:
					continue
				for target in targets:
					if (
						isinstance(target, ast.Attribute)
						and isinstance(target.value, ast.Name)
						and target.value.id == "self"
					):
						add(target.attr, annotation)
	return list(fields.values())


def _classes(body: List[ast.stmt], prefix: str, resolver: NameResolver) -> List[TypeDescriptor]:
	classes: List[TypeDescriptor] = []
	for node in body:
		if not isinstance(node, ast.ClassDef):
			continue
		name = f"{prefix}.{node.name}"
		methods: List[MemberDescriptor] = []
		for sub in node.body:
			if isinstance(sub, (ast.FunctionDef, ast.AsyncFunctionDef)):
				methods.append(_member(sub, name, resolver, owner_type=name))
		classes.append(
			TypeDescriptor(
				name=name,
				bases=[_base_name(b, resolver) for b in node.bases],
				tags=_get_decorator_names(node, resolver),
				fields=_fields(node, name, resolver),
				methods=methods,
				public=is_public_name(node.name),
				line=node.lineno,
			)
		)
		classes.extend(_classes(node.body, name, resolver))
	return classes


def parse_python_module(module_name: str, path: str, text: str, package: Optional[str] = None) -> ModuleDescriptor:
	tree = ast.parse(text, filename=path)
	resolver = NameResolver(module_name, package if package is not None else to_package_name(module_name, path))
	imports = resolver.add_imports(tree.body)

	for node in tree.body:
		if isinstance(node, (ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
			resolver.add_local(node.name)
		elif isinstance(node, ast.Assign):
			for target in node.targets:
				if isinstance(target, ast.Name):
					resolver.add_local(target.id)
		elif isinstance(node, ast.AnnAssign) and isinstance(node.target, ast.Name):
			resolver.add_local(node.target.id)

	functions: List[MemberDescriptor] = []
	for node in tree.body:
		if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
			functions.append(_member(node, module_name, resolver, owner_type=None))

	return ModuleDescriptor(
		name=module_name,
		path=path,
		imports=sorted(set(imports)),
		types=_classes(tree.body, module_name, resolver),
		functions=functions,
	)


def read_source(file: VirtualFile) -> str:
	try:
		return file.read_text()
	except (OSError, UnicodeDecodeError) as e:
		raise ExtractionError(file.relative_path, str(e)) from e


class SourceAdapter(MetadataAdapter):
	"""Describes modules from their source text without importing them."""

	def descriptor_of(self, file: VirtualFile) -> ModuleDescriptor:
		text = read_source(file)
		module = to_module_name(file.relative_path)
		try:
			return parse_python_module(module, file.relative_path, text)
		except (SyntaxError, ValueError) as e:
			raise ExtractionError(file.relative_path, str(e)) from e
