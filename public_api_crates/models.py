"""Data models for the rustdoc JSON declaration graph.

Only the parts of the schema that can carry a reference to another item are
modeled in detail; bookkeeping fields (docs, attrs, visibility, headers) are
dropped by the loader.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple, Union

Id = str


# ===================================================================
# Spans and crate-level tables
# ===================================================================

@dataclass(frozen=True)
class Span:
    """Source range of an item, lines and columns are 1-based."""
    filename: str
    begin: Tuple[int, int]
    end: Tuple[int, int]

    def sort_key(self) -> Tuple[str, int, int, int, int]:
        return (self.filename, self.begin[0], self.begin[1], self.end[0], self.end[1])

    def __str__(self) -> str:
        return f"{self.filename}:{self.begin[0]}:{self.begin[1]}"


@dataclass
class ItemSummary:
    """Entry of the ``paths`` table."""
    crate_id: int
    path: List[str]
    kind: str = ""

    @property
    def display_path(self) -> str:
        return "::".join(self.path)


@dataclass
class ExternalCrate:
    name: str
    html_root_url: Optional[str] = None  # schema field, unused


# ===================================================================
# Paths, generics and bounds
# ===================================================================

@dataclass
class PathRef:
    """A reference to another item by id, with optional generic arguments."""
    name: str
    id: Id
    args: Optional[GenericArgs] = None


@dataclass
class AngleBracketedArgs:
    args: List[GenericArg] = field(default_factory=list)
    bindings: List[TypeBinding] = field(default_factory=list)


@dataclass
class ParenthesizedArgs:
    inputs: List[Type] = field(default_factory=list)
    output: Optional[Type] = None


@dataclass
class LifetimeArg:
    name: str


@dataclass
class TypeArg:
    type: Type


@dataclass
class ConstArg:
    constant: Constant


@dataclass
class InferArg:
    pass


@dataclass
class TypeBinding:
    name: str
    args: GenericArgs
    binding: Union[EqualityBinding, ConstraintBinding]


@dataclass
class EqualityBinding:
    term: Term


@dataclass
class ConstraintBinding:
    bounds: List[GenericBound] = field(default_factory=list)


@dataclass
class TraitBound:
    trait: PathRef
    generic_params: List[GenericParamDef] = field(default_factory=list)
    modifier: str = "none"


@dataclass
class OutlivesBound:
    lifetime: str


@dataclass
class GenericParamDef:
    name: str
    kind: GenericParamDefKind


@dataclass
class LifetimeParam:
    outlives: List[str] = field(default_factory=list)


@dataclass
class TypeParam:
    bounds: List[GenericBound] = field(default_factory=list)
    default: Optional[Type] = None
    synthetic: bool = False


@dataclass
class ConstParam:
    type: Type
    default: Optional[str] = None


@dataclass
class BoundPredicate:
    type: Type
    bounds: List[GenericBound] = field(default_factory=list)
    generic_params: List[GenericParamDef] = field(default_factory=list)


@dataclass
class RegionPredicate:
    lifetime: str
    bounds: List[GenericBound] = field(default_factory=list)


@dataclass
class EqPredicate:
    lhs: Type
    rhs: Term


@dataclass
class Generics:
    params: List[GenericParamDef] = field(default_factory=list)
    where_predicates: List[WherePredicate] = field(default_factory=list)


@dataclass
class FnDecl:
    inputs: List[Tuple[str, Type]] = field(default_factory=list)
    output: Optional[Type] = None
    c_variadic: bool = False


@dataclass
class PolyTrait:
    trait: PathRef
    generic_params: List[GenericParamDef] = field(default_factory=list)


# ===================================================================
# Type expressions
# ===================================================================

@dataclass
class ResolvedPathType:
    path: PathRef


@dataclass
class DynTraitType:
    traits: List[PolyTrait] = field(default_factory=list)
    lifetime: Optional[str] = None


@dataclass
class GenericType:
    name: str


@dataclass
class PrimitiveType:
    name: str


@dataclass
class FunctionPointerType:
    decl: FnDecl
    generic_params: List[GenericParamDef] = field(default_factory=list)


@dataclass
class TupleType:
    types: List[Type] = field(default_factory=list)


@dataclass
class SliceType:
    type: Type


@dataclass
class ArrayType:
    type: Type
    len: str = ""


@dataclass
class ImplTraitType:
    bounds: List[GenericBound] = field(default_factory=list)


@dataclass
class InferType:
    pass


@dataclass
class RawPointerType:
    type: Type
    mutable: bool = False


@dataclass
class BorrowedRefType:
    type: Type
    lifetime: Optional[str] = None
    mutable: bool = False


@dataclass
class QualifiedPathType:
    name: str
    args: GenericArgs
    self_type: Type
    trait: PathRef


# ===================================================================
# Item payloads
# ===================================================================

@dataclass
class Module:
    items: List[Id] = field(default_factory=list)
    is_crate: bool = False


@dataclass
class ExternCrate:
    name: str
    rename: Optional[str] = None


@dataclass
class Import:
    source: str
    name: str
    id: Optional[Id] = None
    glob: bool = False


@dataclass
class StructDef:
    """A struct; ``kind`` is "unit", "tuple" or "plain" and field ids are kept opaque."""
    kind: str
    generics: Generics = field(default_factory=Generics)
    fields: List[Optional[Id]] = field(default_factory=list)
    impls: List[Id] = field(default_factory=list)


@dataclass
class UnionDef:
    generics: Generics = field(default_factory=Generics)
    fields: List[Id] = field(default_factory=list)
    impls: List[Id] = field(default_factory=list)


@dataclass
class EnumDef:
    generics: Generics = field(default_factory=Generics)
    variants: List[Id] = field(default_factory=list)
    impls: List[Id] = field(default_factory=list)


@dataclass
class Variant:
    kind: str = "plain"


@dataclass
class StructField:
    type: Type


@dataclass
class Function:
    decl: FnDecl
    generics: Generics = field(default_factory=Generics)
    has_body: bool = True


@dataclass
class Trait:
    generics: Generics = field(default_factory=Generics)
    bounds: List[GenericBound] = field(default_factory=list)
    items: List[Id] = field(default_factory=list)
    is_auto: bool = False
    is_unsafe: bool = False


@dataclass
class TraitAlias:
    generics: Generics = field(default_factory=Generics)
    params: List[GenericBound] = field(default_factory=list)


@dataclass
class Impl:
    for_: Type
    generics: Generics = field(default_factory=Generics)
    trait: Optional[PathRef] = None
    items: List[Id] = field(default_factory=list)
    negative: bool = False
    synthetic: bool = False
    blanket_impl: Optional[Type] = None


@dataclass
class TypeAlias:
    type: Type
    generics: Generics = field(default_factory=Generics)


@dataclass
class OpaqueTy:
    bounds: List[GenericBound] = field(default_factory=list)
    generics: Generics = field(default_factory=Generics)


@dataclass
class Constant:
    type: Type
    expr: str = ""
    value: Optional[str] = None
    is_literal: bool = False


@dataclass
class Static:
    type: Type
    mutable: bool = False
    expr: str = ""


@dataclass
class ForeignType:
    pass


@dataclass
class Macro:
    source: str = ""


@dataclass
class ProcMacro:
    kind: str = "bang"


@dataclass
class Primitive:
    name: str


@dataclass
class AssocConst:
    type: Type
    default: Optional[str] = None


@dataclass
class AssocType:
    generics: Generics = field(default_factory=Generics)
    bounds: List[GenericBound] = field(default_factory=list)
    default: Optional[Type] = None


# ===================================================================
# Closed unions
# ===================================================================

Type = Union[
    ResolvedPathType,
    DynTraitType,
    GenericType,
    PrimitiveType,
    FunctionPointerType,
    TupleType,
    SliceType,
    ArrayType,
    ImplTraitType,
    InferType,
    RawPointerType,
    BorrowedRefType,
    QualifiedPathType,
]

GenericArgs = Union[AngleBracketedArgs, ParenthesizedArgs]
GenericArg = Union[LifetimeArg, TypeArg, ConstArg, InferArg]
GenericBound = Union[TraitBound, OutlivesBound]
GenericParamDefKind = Union[LifetimeParam, TypeParam, ConstParam]
WherePredicate = Union[BoundPredicate, RegionPredicate, EqPredicate]
Term = Union[Type, Constant]

ItemInner = Union[
    Module,
    ExternCrate,
    Import,
    StructDef,
    UnionDef,
    EnumDef,
    Variant,
    StructField,
    Function,
    Trait,
    TraitAlias,
    Impl,
    TypeAlias,
    OpaqueTy,
    Constant,
    Static,
    ForeignType,
    Macro,
    ProcMacro,
    Primitive,
    AssocConst,
    AssocType,
]


# ===================================================================
# Items and the crate
# ===================================================================

@dataclass
class Item:
    id: Id
    crate_id: int
    inner: ItemInner
    name: Optional[str] = None
    span: Optional[Span] = None


@dataclass
class Crate:
    """A parsed rustdoc JSON document.

    The crate being documented is the one whose id is *absent* from
    ``external_crates``.
    """
    index: Dict[Id, Item] = field(default_factory=dict)
    paths: Dict[Id, ItemSummary] = field(default_factory=dict)
    external_crates: Dict[int, ExternalCrate] = field(default_factory=dict)
    # root and crate_version mirror the schema; analysis does not read them
    root: Optional[Id] = None
    crate_version: Optional[str] = None
    format_version: int = 0

    def is_local(self, crate_id: int) -> bool:
        return crate_id not in self.external_crates

    def local_items(self) -> List[Item]:
        return [item for item in self.index.values() if self.is_local(item.crate_id)]
