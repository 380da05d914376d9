"""Recursive traversal over item payloads.

:func:`visit_item` walks everything reachable from one item's signature
(types, generics, bounds, where clauses, impl headers) and reports each
:class:`PathRef` and each :class:`Import` to a :class:`Visitor`.

Items that are indexed on their own (struct fields, enum variants, trait
methods, impl members) are *not* descended into from their parent; each is
visited when the index reaches it.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, Optional

from .models import (
    AngleBracketedArgs,
    ArrayType,
    AssocConst,
    AssocType,
    BorrowedRefType,
    BoundPredicate,
    ConstArg,
    Constant,
    ConstParam,
    ConstraintBinding,
    DynTraitType,
    EnumDef,
    EqPredicate,
    EqualityBinding,
    ExternCrate,
    FnDecl,
    ForeignType,
    Function,
    FunctionPointerType,
    GenericArgs,
    GenericBound,
    GenericParamDef,
    Generics,
    GenericType,
    Impl,
    ImplTraitType,
    Import,
    InferType,
    Item,
    Macro,
    Module,
    OpaqueTy,
    ParenthesizedArgs,
    PathRef,
    PolyTrait,
    Primitive,
    PrimitiveType,
    ProcMacro,
    QualifiedPathType,
    RawPointerType,
    RegionPredicate,
    ResolvedPathType,
    SliceType,
    Static,
    StructDef,
    StructField,
    Term,
    Trait,
    TraitAlias,
    TraitBound,
    TupleType,
    Type,
    TypeAlias,
    TypeArg,
    TypeBinding,
    TypeParam,
    UnionDef,
    Variant,
)

logger = logging.getLogger(__name__)


class Visitor:
    """Observer for :func:`visit_item`. Both hooks default to no-ops."""

    def on_path_reference(self, path: PathRef) -> None:
        pass

    def on_import_reference(self, import_: Import) -> None:
        pass


def visit_item(item: Item, v: Visitor) -> None:
    _visit_inner(item.inner, v)


def _visit_inner(inner: Any, v: Visitor) -> None:
    handler = _ITEM_VISITORS.get(type(inner))
    if handler is None:
        logger.debug("No visitor for item payload %s; skipping", type(inner).__name__)
        return
    handler(inner, v)


def _ignore(_payload: Any, _v: Visitor) -> None:
    pass


# ===================================================================
# Items
# ===================================================================

def _visit_function(fun: Function, v: Visitor) -> None:
    _visit_fn_decl(fun.decl, v)
    _visit_generics(fun.generics, v)


def _visit_struct(struct: StructDef, v: Visitor) -> None:
    # field types are reached through their own StructField items
    _visit_generics(struct.generics, v)


def _visit_union(union: UnionDef, v: Visitor) -> None:
    _visit_generics(union.generics, v)


def _visit_enum(enum: EnumDef, v: Visitor) -> None:
    _visit_generics(enum.generics, v)


def _visit_struct_field(field: StructField, v: Visitor) -> None:
    _visit_type(field.type, v)


def _visit_assoc_type(assoc: AssocType, v: Visitor) -> None:
    _visit_generics(assoc.generics, v)
    _visit_bounds(assoc.bounds, v)
    if assoc.default is not None:
        _visit_type(assoc.default, v)


def _visit_assoc_const(assoc: AssocConst, v: Visitor) -> None:
    _visit_type(assoc.type, v)


def _visit_impl(impl: Impl, v: Visitor) -> None:
    # blanket impls from other crates that happen to cover our types don't count
    if impl.blanket_impl is not None:
        return
    _visit_generics(impl.generics, v)
    if impl.trait is not None:
        _visit_path(impl.trait, v)
    _visit_type(impl.for_, v)


def _visit_type_alias(alias: TypeAlias, v: Visitor) -> None:
    _visit_type(alias.type, v)
    _visit_generics(alias.generics, v)


def _visit_opaque_ty(opaque: OpaqueTy, v: Visitor) -> None:
    _visit_bounds(opaque.bounds, v)
    _visit_generics(opaque.generics, v)


def _visit_trait(trait: Trait, v: Visitor) -> None:
    _visit_generics(trait.generics, v)
    _visit_bounds(trait.bounds, v)


def _visit_trait_alias(alias: TraitAlias, v: Visitor) -> None:
    _visit_generics(alias.generics, v)
    _visit_bounds(alias.params, v)


def _visit_constant(constant: Constant, v: Visitor) -> None:
    _visit_type(constant.type, v)


def _visit_static(static: Static, v: Visitor) -> None:
    _visit_type(static.type, v)


def _visit_import(import_: Import, v: Visitor) -> None:
    v.on_import_reference(import_)


_ITEM_VISITORS: Dict[type, Callable[[Any, Visitor], None]] = {
    Function: _visit_function,
    StructDef: _visit_struct,
    UnionDef: _visit_union,
    EnumDef: _visit_enum,
    StructField: _visit_struct_field,
    AssocType: _visit_assoc_type,
    AssocConst: _visit_assoc_const,
    Impl: _visit_impl,
    TypeAlias: _visit_type_alias,
    OpaqueTy: _visit_opaque_ty,
    Trait: _visit_trait,
    TraitAlias: _visit_trait_alias,
    Constant: _visit_constant,
    Static: _visit_static,
    Import: _visit_import,
    # nothing of interest in these
    Module: _ignore,
    Variant: _ignore,
    ExternCrate: _ignore,
    ForeignType: _ignore,
    Primitive: _ignore,
    Macro: _ignore,
    ProcMacro: _ignore,
}


# ===================================================================
# Signatures, generics and bounds
# ===================================================================

def _visit_fn_decl(decl: FnDecl, v: Visitor) -> None:
    for _, ty in decl.inputs:
        _visit_type(ty, v)
    if decl.output is not None:
        _visit_type(decl.output, v)


def _visit_generics(generics: Generics, v: Visitor) -> None:
    _visit_params(generics.params, v)
    for predicate in generics.where_predicates:
        if isinstance(predicate, BoundPredicate):
            _visit_type(predicate.type, v)
            _visit_bounds(predicate.bounds, v)
            _visit_params(predicate.generic_params, v)
        elif isinstance(predicate, RegionPredicate):
            _visit_bounds(predicate.bounds, v)
        elif isinstance(predicate, EqPredicate):
            _visit_type(predicate.lhs, v)
            _visit_term(predicate.rhs, v)


def _visit_params(params: Iterable[GenericParamDef], v: Visitor) -> None:
    for param in params:
        kind = param.kind
        if isinstance(kind, TypeParam):
            _visit_bounds(kind.bounds, v)
            if kind.default is not None:
                _visit_type(kind.default, v)
        elif isinstance(kind, ConstParam):
            _visit_type(kind.type, v)


def _visit_bounds(bounds: Iterable[GenericBound], v: Visitor) -> None:
    for bound in bounds:
        if isinstance(bound, TraitBound):
            _visit_path(bound.trait, v)
            _visit_params(bound.generic_params, v)


def _visit_term(term: Term, v: Visitor) -> None:
    if isinstance(term, Constant):
        _visit_constant(term, v)
    else:
        _visit_type(term, v)


def _visit_path(path: PathRef, v: Visitor) -> None:
    v.on_path_reference(path)
    if path.args is not None:
        _visit_generic_args(path.args, v)


def _visit_generic_args(args: Optional[GenericArgs], v: Visitor) -> None:
    if isinstance(args, AngleBracketedArgs):
        for arg in args.args:
            if isinstance(arg, TypeArg):
                _visit_type(arg.type, v)
            elif isinstance(arg, ConstArg):
                _visit_constant(arg.constant, v)
        for binding in args.bindings:
            _visit_type_binding(binding, v)
    elif isinstance(args, ParenthesizedArgs):
        for ty in args.inputs:
            _visit_type(ty, v)
        if args.output is not None:
            _visit_type(args.output, v)


def _visit_type_binding(binding: TypeBinding, v: Visitor) -> None:
    _visit_generic_args(binding.args, v)
    if isinstance(binding.binding, EqualityBinding):
        _visit_term(binding.binding.term, v)
    elif isinstance(binding.binding, ConstraintBinding):
        _visit_bounds(binding.binding.bounds, v)


# ===================================================================
# Types
# ===================================================================

def _visit_type(ty: Type, v: Visitor) -> None:
    handler = _TYPE_VISITORS.get(type(ty))
    if handler is None:
        logger.debug("No visitor for type %s; skipping", type(ty).__name__)
        return
    handler(ty, v)


def _visit_poly_trait(poly: PolyTrait, v: Visitor) -> None:
    _visit_path(poly.trait, v)
    _visit_params(poly.generic_params, v)


def _visit_dyn_trait(dyn: DynTraitType, v: Visitor) -> None:
    for poly in dyn.traits:
        _visit_poly_trait(poly, v)


def _visit_qualified_path(qpath: QualifiedPathType, v: Visitor) -> None:
    _visit_generic_args(qpath.args, v)
    _visit_type(qpath.self_type, v)
    _visit_path(qpath.trait, v)


def _visit_function_pointer(fn_ptr: FunctionPointerType, v: Visitor) -> None:
    _visit_fn_decl(fn_ptr.decl, v)
    _visit_params(fn_ptr.generic_params, v)


def _visit_each_type(types: Iterable[Type], v: Visitor) -> None:
    for ty in types:
        _visit_type(ty, v)


_TYPE_VISITORS: Dict[type, Callable[[Any, Visitor], None]] = {
    ResolvedPathType: lambda ty, v: _visit_path(ty.path, v),
    DynTraitType: _visit_dyn_trait,
    GenericType: _ignore,
    PrimitiveType: _ignore,
    FunctionPointerType: _visit_function_pointer,
    TupleType: lambda ty, v: _visit_each_type(ty.types, v),
    SliceType: lambda ty, v: _visit_type(ty.type, v),
    ArrayType: lambda ty, v: _visit_type(ty.type, v),
    ImplTraitType: lambda ty, v: _visit_bounds(ty.bounds, v),
    InferType: _ignore,
    RawPointerType: lambda ty, v: _visit_type(ty.type, v),
    BorrowedRefType: lambda ty, v: _visit_type(ty.type, v),
    QualifiedPathType: _visit_qualified_path,
}
