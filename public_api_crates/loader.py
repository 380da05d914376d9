"""Load a rustdoc JSON document into :mod:`public_api_crates.models`.

Enum-like values in rustdoc JSON are externally tagged: a variant with data is
a one-key object (``{"resolved_path": {...}}``) and a variant without data is
a bare string (``"infer"``).  Any structural surprise is reported as a
:class:`DocJsonError`; nothing here tries to recover a partial graph.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from . import config
from .errors import DocJsonError
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
    Crate,
    DynTraitType,
    EnumDef,
    EqPredicate,
    EqualityBinding,
    ExternalCrate,
    ExternCrate,
    FnDecl,
    ForeignType,
    Function,
    FunctionPointerType,
    GenericArg,
    GenericArgs,
    GenericBound,
    GenericParamDef,
    Generics,
    GenericType,
    Impl,
    ImplTraitType,
    Import,
    InferArg,
    InferType,
    Item,
    ItemInner,
    ItemSummary,
    LifetimeArg,
    LifetimeParam,
    Macro,
    Module,
    OpaqueTy,
    OutlivesBound,
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
    Span,
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
    WherePredicate,
)

logger = logging.getLogger(__name__)


def load_crate(doc_json_path: Path) -> Crate:
    """Read and parse the rustdoc JSON file at *doc_json_path*."""
    try:
        text = doc_json_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocJsonError(f"failed to read {doc_json_path}: {exc}") from exc
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DocJsonError(f"failed to parse {doc_json_path}: {exc}") from exc
    logger.debug("Loaded %s (%d bytes)", doc_json_path, len(text))
    return parse_crate(data)


def parse_crate(data: Dict[str, Any]) -> Crate:
    if not isinstance(data, dict):
        raise DocJsonError("rustdoc JSON root must be an object")

    format_version = data.get("format_version", 0)
    if format_version not in config.SUPPORTED_FORMAT_VERSIONS:
        logger.warning(
            "rustdoc JSON format version %s has not been tested; results may be incomplete",
            format_version,
        )

    index: Dict[str, Item] = {}
    for item_id, raw in _section(data, "index").items():
        try:
            index[item_id] = _parse_item(item_id, raw)
        except DocJsonError as exc:
            raise DocJsonError(f"item {item_id}: {exc}") from exc
        except (AttributeError, KeyError, TypeError, ValueError) as exc:
            raise DocJsonError(f"item {item_id}: malformed payload ({exc!r})") from exc

    try:
        paths = {
            item_id: ItemSummary(
                crate_id=int(raw["crate_id"]),
                path=list(raw["path"]),
                kind=raw.get("kind", ""),
            )
            for item_id, raw in _section(data, "paths").items()
        }
        external_crates = {
            int(crate_id): ExternalCrate(name=raw["name"], html_root_url=raw.get("html_root_url"))
            for crate_id, raw in _section(data, "external_crates").items()
        }
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise DocJsonError(f"malformed paths or external_crates table ({exc!r})") from exc

    return Crate(
        index=index,
        paths=paths,
        external_crates=external_crates,
        root=data.get("root"),
        crate_version=data.get("crate_version"),
        format_version=format_version,
    )


def _section(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    section = data.get(key)
    if not isinstance(section, dict):
        raise DocJsonError(f"missing or invalid '{key}' table")
    return section


def _tagged(value: Any) -> Tuple[str, Any]:
    """Split an externally tagged enum value into ``(tag, payload)``."""
    if isinstance(value, str):
        return value, None
    if isinstance(value, dict) and len(value) == 1:
        tag, payload = next(iter(value.items()))
        return tag, payload
    raise DocJsonError(f"expected a tagged value, got {value!r}")


def _dispatch(value: Any, table: Dict[str, Callable[[Any], Any]], what: str) -> Any:
    tag, payload = _tagged(value)
    handler = table.get(tag)
    if handler is None:
        raise DocJsonError(f"unknown {what} variant '{tag}'")
    return handler(payload)


# ===================================================================
# Items
# ===================================================================

def _parse_item(item_id: str, raw: Dict[str, Any]) -> Item:
    span = raw.get("span")
    return Item(
        id=item_id,
        crate_id=int(raw["crate_id"]),
        name=raw.get("name"),
        span=_parse_span(span) if span else None,
        inner=_dispatch(raw["inner"], _ITEM_PARSERS, "item"),
    )


def _parse_span(raw: Dict[str, Any]) -> Span:
    begin = raw["begin"]
    end = raw["end"]
    return Span(
        filename=str(raw["filename"]),
        begin=(int(begin[0]), int(begin[1])),
        end=(int(end[0]), int(end[1])),
    )


def _parse_struct(raw: Dict[str, Any]) -> StructDef:
    kind, payload = _tagged(raw["kind"])
    if kind == "unit":
        fields: List[Optional[str]] = []
    elif kind == "tuple":
        fields = list(payload)
    elif kind == "plain":
        fields = list(payload["fields"])
    else:
        raise DocJsonError(f"unknown struct kind '{kind}'")
    return StructDef(
        kind=kind,
        generics=_parse_generics(raw["generics"]),
        fields=fields,
        impls=list(raw.get("impls", [])),
    )


def _parse_impl(raw: Dict[str, Any]) -> Impl:
    trait = raw.get("trait")
    blanket = raw.get("blanket_impl")
    return Impl(
        for_=_parse_type(raw["for"]),
        generics=_parse_generics(raw["generics"]),
        trait=_parse_path(trait) if trait else None,
        items=list(raw.get("items", [])),
        negative=bool(raw.get("negative", False)),
        synthetic=bool(raw.get("synthetic", False)),
        blanket_impl=_parse_type(blanket) if blanket else None,
    )


def _parse_function(raw: Dict[str, Any]) -> Function:
    # newer formats renamed "decl" to "sig"
    decl = raw["decl"] if "decl" in raw else raw["sig"]
    return Function(
        decl=_parse_fn_decl(decl),
        generics=_parse_generics(raw["generics"]),
        has_body=bool(raw.get("has_body", True)),
    )


def _parse_variant(raw: Any) -> Variant:
    if isinstance(raw, dict) and "kind" in raw:
        kind, _ = _tagged(raw["kind"])
        return Variant(kind=kind)
    return Variant()


def _parse_constant(raw: Dict[str, Any]) -> Constant:
    return Constant(
        type=_parse_type(raw["type"]),
        expr=raw.get("expr", ""),
        value=raw.get("value"),
        is_literal=bool(raw.get("is_literal", False)),
    )


def _parse_type_alias(raw: Dict[str, Any]) -> TypeAlias:
    return TypeAlias(type=_parse_type(raw["type"]), generics=_parse_generics(raw["generics"]))


_ITEM_PARSERS: Dict[str, Callable[[Any], ItemInner]] = {
    "module": lambda raw: Module(items=list(raw.get("items", [])), is_crate=bool(raw.get("is_crate"))),
    "extern_crate": lambda raw: ExternCrate(name=raw["name"], rename=raw.get("rename")),
    "import": lambda raw: Import(
        source=raw["source"], name=raw["name"], id=raw.get("id"), glob=bool(raw.get("glob"))
    ),
    "struct": _parse_struct,
    "union": lambda raw: UnionDef(
        generics=_parse_generics(raw["generics"]),
        fields=list(raw.get("fields", [])),
        impls=list(raw.get("impls", [])),
    ),
    "enum": lambda raw: EnumDef(
        generics=_parse_generics(raw["generics"]),
        variants=list(raw.get("variants", [])),
        impls=list(raw.get("impls", [])),
    ),
    "variant": _parse_variant,
    "struct_field": lambda raw: StructField(type=_parse_type(raw)),
    "function": _parse_function,
    "trait": lambda raw: Trait(
        generics=_parse_generics(raw["generics"]),
        bounds=[_parse_bound(b) for b in raw.get("bounds", [])],
        items=list(raw.get("items", [])),
        is_auto=bool(raw.get("is_auto")),
        is_unsafe=bool(raw.get("is_unsafe")),
    ),
    "trait_alias": lambda raw: TraitAlias(
        generics=_parse_generics(raw["generics"]),
        params=[_parse_bound(b) for b in raw.get("params", [])],
    ),
    "impl": _parse_impl,
    "typedef": _parse_type_alias,
    "type_alias": _parse_type_alias,
    "opaque_ty": lambda raw: OpaqueTy(
        bounds=[_parse_bound(b) for b in raw.get("bounds", [])],
        generics=_parse_generics(raw["generics"]),
    ),
    "constant": _parse_constant,
    "static": lambda raw: Static(
        type=_parse_type(raw["type"]), mutable=bool(raw.get("mutable")), expr=raw.get("expr", "")
    ),
    "foreign_type": lambda raw: ForeignType(),
    "macro": lambda raw: Macro(source=raw or ""),
    "proc_macro": lambda raw: ProcMacro(kind=(raw or {}).get("kind", "bang")),
    "primitive": lambda raw: Primitive(name=raw["name"] if isinstance(raw, dict) else str(raw)),
    "assoc_const": lambda raw: AssocConst(type=_parse_type(raw["type"]), default=raw.get("default")),
    "assoc_type": lambda raw: AssocType(
        generics=_parse_generics(raw["generics"]),
        bounds=[_parse_bound(b) for b in raw.get("bounds", [])],
        default=_parse_type(raw["default"]) if raw.get("default") else None,
    ),
}


# ===================================================================
# Generics, bounds and paths
# ===================================================================

def _parse_generics(raw: Dict[str, Any]) -> Generics:
    return Generics(
        params=[_parse_param(p) for p in raw.get("params", [])],
        where_predicates=[_parse_where(w) for w in raw.get("where_predicates", [])],
    )


def _parse_param(raw: Dict[str, Any]) -> GenericParamDef:
    return GenericParamDef(name=raw["name"], kind=_dispatch(raw["kind"], _PARAM_KIND_PARSERS, "generic param"))


_PARAM_KIND_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "lifetime": lambda raw: LifetimeParam(outlives=list((raw or {}).get("outlives", []))),
    "type": lambda raw: TypeParam(
        bounds=[_parse_bound(b) for b in raw.get("bounds", [])],
        default=_parse_type(raw["default"]) if raw.get("default") else None,
        synthetic=bool(raw.get("synthetic")),
    ),
    "const": lambda raw: ConstParam(type=_parse_type(raw["type"]), default=raw.get("default")),
}


def _parse_where(raw: Any) -> WherePredicate:
    return _dispatch(raw, _WHERE_PARSERS, "where predicate")


_WHERE_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "bound_predicate": lambda raw: BoundPredicate(
        type=_parse_type(raw["type"]),
        bounds=[_parse_bound(b) for b in raw.get("bounds", [])],
        generic_params=[_parse_param(p) for p in raw.get("generic_params", [])],
    ),
    "region_predicate": lambda raw: RegionPredicate(
        lifetime=raw["lifetime"], bounds=[_parse_bound(b) for b in raw.get("bounds", [])]
    ),
    "eq_predicate": lambda raw: EqPredicate(lhs=_parse_type(raw["lhs"]), rhs=_parse_term(raw["rhs"])),
}


def _parse_bound(raw: Any) -> GenericBound:
    return _dispatch(raw, _BOUND_PARSERS, "generic bound")


_BOUND_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "trait_bound": lambda raw: TraitBound(
        trait=_parse_path(raw["trait"]),
        generic_params=[_parse_param(p) for p in raw.get("generic_params", [])],
        modifier=raw.get("modifier", "none"),
    ),
    "outlives": lambda raw: OutlivesBound(lifetime=raw),
}


def _parse_path(raw: Dict[str, Any]) -> PathRef:
    if not isinstance(raw, dict):
        raise DocJsonError("expected a path object")
    args = raw.get("args")
    return PathRef(
        name=raw.get("name", ""),
        id=raw["id"],
        args=_parse_generic_args(args) if args else None,
    )


def _parse_generic_args(raw: Any) -> GenericArgs:
    return _dispatch(raw, _GENERIC_ARGS_PARSERS, "generic args")


_GENERIC_ARGS_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "angle_bracketed": lambda raw: AngleBracketedArgs(
        args=[_parse_generic_arg(a) for a in raw.get("args", [])],
        bindings=[_parse_binding(b) for b in raw.get("bindings", raw.get("constraints", []))],
    ),
    "parenthesized": lambda raw: ParenthesizedArgs(
        inputs=[_parse_type(t) for t in raw.get("inputs", [])],
        output=_parse_type(raw["output"]) if raw.get("output") else None,
    ),
}


def _parse_generic_arg(raw: Any) -> GenericArg:
    return _dispatch(raw, _GENERIC_ARG_PARSERS, "generic arg")


_GENERIC_ARG_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "lifetime": lambda raw: LifetimeArg(name=raw),
    "type": lambda raw: TypeArg(type=_parse_type(raw)),
    "const": lambda raw: ConstArg(constant=_parse_constant(raw)),
    "infer": lambda raw: InferArg(),
}


def _parse_binding(raw: Dict[str, Any]) -> TypeBinding:
    kind, payload = _tagged(raw["binding"])
    if kind == "equality":
        binding: Any = EqualityBinding(term=_parse_term(payload))
    elif kind == "constraint":
        binding = ConstraintBinding(bounds=[_parse_bound(b) for b in payload])
    else:
        raise DocJsonError(f"unknown type binding variant '{kind}'")
    args = raw.get("args")
    return TypeBinding(
        name=raw["name"],
        args=_parse_generic_args(args) if args else AngleBracketedArgs(),
        binding=binding,
    )


def _parse_term(raw: Any) -> Term:
    kind, payload = _tagged(raw)
    if kind == "type":
        return _parse_type(payload)
    if kind == "constant":
        return _parse_constant(payload)
    raise DocJsonError(f"unknown term variant '{kind}'")


def _parse_fn_decl(raw: Dict[str, Any]) -> FnDecl:
    output = raw.get("output")
    return FnDecl(
        inputs=[(name, _parse_type(ty)) for name, ty in raw.get("inputs", [])],
        output=_parse_type(output) if output else None,
        c_variadic=bool(raw.get("c_variadic") or raw.get("is_c_variadic")),
    )


# ===================================================================
# Types
# ===================================================================

def _parse_type(raw: Any) -> Type:
    return _dispatch(raw, _TYPE_PARSERS, "type")


def _parse_poly_trait(raw: Dict[str, Any]) -> PolyTrait:
    return PolyTrait(
        trait=_parse_path(raw["trait"]),
        generic_params=[_parse_param(p) for p in raw.get("generic_params", [])],
    )


_TYPE_PARSERS: Dict[str, Callable[[Any], Any]] = {
    "resolved_path": lambda raw: ResolvedPathType(path=_parse_path(raw)),
    "dyn_trait": lambda raw: DynTraitType(
        traits=[_parse_poly_trait(t) for t in raw.get("traits", [])],
        lifetime=raw.get("lifetime"),
    ),
    "generic": lambda raw: GenericType(name=raw),
    "primitive": lambda raw: PrimitiveType(name=raw),
    "function_pointer": lambda raw: FunctionPointerType(
        decl=_parse_fn_decl(raw["decl"] if "decl" in raw else raw["sig"]),
        generic_params=[_parse_param(p) for p in raw.get("generic_params", [])],
    ),
    "tuple": lambda raw: TupleType(types=[_parse_type(t) for t in raw]),
    "slice": lambda raw: SliceType(type=_parse_type(raw)),
    "array": lambda raw: ArrayType(type=_parse_type(raw["type"]), len=str(raw.get("len", ""))),
    "impl_trait": lambda raw: ImplTraitType(bounds=[_parse_bound(b) for b in raw]),
    "infer": lambda raw: InferType(),
    "raw_pointer": lambda raw: RawPointerType(type=_parse_type(raw["type"]), mutable=bool(raw.get("mutable"))),
    "borrowed_ref": lambda raw: BorrowedRefType(
        type=_parse_type(raw["type"]),
        lifetime=raw.get("lifetime"),
        mutable=bool(raw.get("mutable")),
    ),
    "qualified_path": lambda raw: QualifiedPathType(
        name=raw["name"],
        args=_parse_generic_args(raw["args"]) if raw.get("args") else AngleBracketedArgs(),
        self_type=_parse_type(raw["self_type"]),
        trait=_parse_path(raw["trait"]),
    ),
}
