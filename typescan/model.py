from __future__ import annotations

from typing import Dict, List

from pydantic import BaseModel


class UsageDescriptor(BaseModel):
	target: str
	line: int = 0


class ParameterDescriptor(BaseModel):
	name: str
	type_name: str = "object"
	tags: List[str] = []
	kind: str = "positional"  # "positional", "vararg", "keyword", "kwarg"


class FieldDescriptor(BaseModel):
	name: str
	owner: str
	type_name: str = "object"
	tags: List[str] = []
	public: bool = True


class MemberDescriptor(BaseModel):
	name: str
	owner: str
	parameters: List[ParameterDescriptor] = []
	return_type: str = "object"
	tags: List[str] = []
	usages: List[UsageDescriptor] = []
	kind: str = "function"  # "function", "method", "staticmethod", "classmethod"
	public: bool = True
	line: int = 0


class TypeDescriptor(BaseModel):
	name: str
	bases: List[str] = []
	tags: List[str] = []
	fields: List[FieldDescriptor] = []
	methods: List[MemberDescriptor] = []
	public: bool = True
	line: int = 0


class ModuleDescriptor(BaseModel):
	name: str
	path: str
	imports: List[str] = []
	types: List[TypeDescriptor] = []
	functions: List[MemberDescriptor] = []


class StoreSnapshot(BaseModel):
	indexes: Dict[str, Dict[str, List[str]]] = {}
