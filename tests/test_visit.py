"""Tests for the item traversal."""

import typing
from collections import Counter
from typing import List

import pytest

from public_api_crates import visit
from public_api_crates.models import (
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
    GenericParamDef,
    Generics,
    GenericType,
    Impl,
    ImplTraitType,
    Import,
    InferType,
    Item,
    ItemInner,
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
    Static,
    StructDef,
    StructField,
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


class RecordingVisitor(visit.Visitor):
    def __init__(self):
        self.paths: List[str] = []
        self.imports: List[str] = []

    def on_path_reference(self, path):
        self.paths.append(path.id)

    def on_import_reference(self, import_):
        self.imports.append(import_.id)


def ty(item_id: str, args=None) -> ResolvedPathType:
    return ResolvedPathType(PathRef(item_id.upper(), item_id, args))


def bound(item_id: str, args=None) -> TraitBound:
    return TraitBound(PathRef(item_id.upper(), item_id, args))


def type_param(name: str, *bounds, default=None) -> GenericParamDef:
    return GenericParamDef(name, TypeParam(bounds=list(bounds), default=default))


def generics(*params, where=()) -> Generics:
    return Generics(params=list(params), where_predicates=list(where))


def record(inner) -> RecordingVisitor:
    v = RecordingVisitor()
    visit.visit_item(Item(id="0:0", crate_id=0, inner=inner), v)
    return v


ITEM_CASES = [
    pytest.param(
        Function(
            decl=FnDecl(inputs=[("a", ty("fa")), ("b", GenericType("T"))], output=BorrowedRefType(ty("fb"))),
            generics=generics(
                type_param("T", bound("fc")),
                where=[BoundPredicate(GenericType("T"), [bound("fd")])],
            ),
        ),
        ["fa", "fb", "fc", "fd"],
        id="function",
    ),
    pytest.param(
        StructDef(kind="plain", generics=generics(type_param("T", default=ty("sa"))), fields=["0:9"]),
        ["sa"],
        id="struct",
    ),
    pytest.param(
        UnionDef(generics=generics(type_param("T", bound("ua")))),
        ["ua"],
        id="union",
    ),
    pytest.param(
        EnumDef(generics=generics(GenericParamDef("N", ConstParam(type=ty("ea")))), variants=["0:8"]),
        ["ea"],
        id="enum",
    ),
    pytest.param(
        StructField(type=TupleType([ty("sfa"), SliceType(ty("sfb")), PrimitiveType("u8")])),
        ["sfa", "sfb"],
        id="struct_field",
    ),
    pytest.param(
        AssocType(
            generics=generics(type_param("T", bound("ata"))),
            bounds=[bound("atb"), OutlivesBound("'a")],
            default=ArrayType(ty("atc"), "4"),
        ),
        ["ata", "atb", "atc"],
        id="assoc_type",
    ),
    pytest.param(AssocConst(type=RawPointerType(ty("aca"))), ["aca"], id="assoc_const"),
    pytest.param(
        Impl(
            for_=ty("ifor"),
            generics=generics(type_param("T", bound("igen"))),
            trait=PathRef("Trait", "itrait", AngleBracketedArgs(args=[TypeArg(ty("iarg"))])),
        ),
        ["igen", "itrait", "iarg", "ifor"],
        id="impl",
    ),
    pytest.param(
        TypeAlias(
            type=DynTraitType(traits=[PolyTrait(PathRef("Dyn", "taa"))], lifetime="'static"),
            generics=generics(type_param("T", bound("tab"))),
        ),
        ["taa", "tab"],
        id="type_alias",
    ),
    pytest.param(
        OpaqueTy(bounds=[bound("oa")], generics=generics(type_param("T", bound("ob")))),
        ["oa", "ob"],
        id="opaque_ty",
    ),
    pytest.param(
        Trait(generics=generics(type_param("T", bound("ta"))), bounds=[bound("tb")], items=["0:7"]),
        ["ta", "tb"],
        id="trait",
    ),
    pytest.param(
        TraitAlias(generics=generics(type_param("T", bound("tla"))), params=[bound("tlb")]),
        ["tla", "tlb"],
        id="trait_alias",
    ),
    pytest.param(
        Constant(
            type=FunctionPointerType(
                decl=FnDecl(inputs=[("_", ty("ca"))], output=ty("cb")),
                generic_params=[type_param("T", bound("cc"))],
            )
        ),
        ["ca", "cb", "cc"],
        id="constant",
    ),
    pytest.param(
        Static(
            type=QualifiedPathType(
                name="Output",
                args=AngleBracketedArgs(args=[TypeArg(ty("sta"))]),
                self_type=ty("stb"),
                trait=PathRef("Trait", "stc"),
            )
        ),
        ["sta", "stb", "stc"],
        id="static",
    ),
    pytest.param(Module(items=["0:1"]), [], id="module"),
    pytest.param(Variant(), [], id="variant"),
    pytest.param(ExternCrate(name="serde"), [], id="extern_crate"),
    pytest.param(ForeignType(), [], id="foreign_type"),
    pytest.param(Primitive(name="u8"), [], id="primitive"),
    pytest.param(Macro(source="macro_rules! m {}"), [], id="macro"),
    pytest.param(ProcMacro(kind="derive"), [], id="proc_macro"),
]


@pytest.mark.parametrize("inner, expected", ITEM_CASES)
def test_every_path_reference_is_visited_once(inner, expected):
    v = record(inner)
    assert Counter(v.paths) == Counter(expected)
    assert all(count == 1 for count in Counter(v.paths).values())
    assert v.imports == []


def test_every_item_kind_is_covered_by_cases():
    covered = {type(case.values[0]) for case in ITEM_CASES}
    assert covered | {Import} == set(typing.get_args(ItemInner))


def test_every_item_kind_has_a_visitor():
    assert set(visit._ITEM_VISITORS) == set(typing.get_args(ItemInner))


def test_every_type_kind_has_a_visitor():
    assert set(visit._TYPE_VISITORS) == set(typing.get_args(Type))


def test_import_reports_its_target():
    v = record(Import(source="bytes::Buf", name="Buf", id="3:12"))
    assert v.imports == ["3:12"]
    assert v.paths == []


def test_glob_import_without_target_is_still_reported():
    v = record(Import(source="bytes::*", name="bytes", id=None, glob=True))
    assert v.imports == [None]


def test_blanket_impl_contributes_nothing():
    inner = Impl(
        for_=ty("ifor"),
        generics=generics(type_param("T", bound("igen"))),
        trait=PathRef("Into", "itrait"),
        blanket_impl=GenericType("T"),
    )
    v = record(inner)
    assert v.paths == []


def test_struct_does_not_descend_into_fields():
    v = record(StructDef(kind="tuple", fields=["0:3", None]))
    assert v.paths == []


def test_nested_generic_arguments_are_visited():
    # Result<Vec<Bytes>, Box<dyn Error + Send>>
    inner = StructField(
        type=ty(
            "result",
            AngleBracketedArgs(
                args=[
                    TypeArg(ty("vec", AngleBracketedArgs(args=[TypeArg(ty("bytes"))]))),
                    TypeArg(
                        ty(
                            "box",
                            AngleBracketedArgs(
                                args=[
                                    TypeArg(
                                        DynTraitType(
                                            traits=[PolyTrait(PathRef("Error", "error")), PolyTrait(PathRef("Send", "send"))]
                                        )
                                    )
                                ]
                            ),
                        )
                    ),
                ]
            ),
        )
    )
    v = record(inner)
    assert v.paths == ["result", "vec", "bytes", "box", "error", "send"]


def test_parenthesized_args_and_bindings():
    # impl Fn(Request) -> Response, plus Iterator<Item = Frame, IntoIter: Send>
    fn_bound = bound("fn", ParenthesizedArgs(inputs=[ty("request")], output=ty("response")))
    iter_bound = bound(
        "iterator",
        AngleBracketedArgs(
            bindings=[
                TypeBinding("Item", AngleBracketedArgs(), EqualityBinding(ty("frame"))),
                TypeBinding("IntoIter", AngleBracketedArgs(), ConstraintBinding([bound("send")])),
            ]
        ),
    )
    v = record(Function(decl=FnDecl(output=ImplTraitType([fn_bound, iter_bound]))))
    assert v.paths == ["fn", "request", "response", "iterator", "frame", "send"]


def test_const_generic_args_and_terms():
    const = Constant(type=ty("len"), expr="N")
    inner = TypeAlias(
        type=ty("array_vec", AngleBracketedArgs(args=[ConstArg(const)])),
        generics=generics(where=[EqPredicate(lhs=GenericType("T"), rhs=Constant(type=ty("rhs")))]),
    )
    v = record(inner)
    assert v.paths == ["array_vec", "len", "rhs"]


def test_higher_ranked_and_region_predicates():
    hr_param = type_param("U", bound("inner"))
    inner = Function(
        decl=FnDecl(),
        generics=generics(
            GenericParamDef("'a", LifetimeParam(outlives=["'b"])),
            where=[
                BoundPredicate(GenericType("T"), [TraitBound(PathRef("F", "outer"), [hr_param])]),
                RegionPredicate("'a", [OutlivesBound("'b")]),
            ],
        ),
    )
    v = record(inner)
    assert v.paths == ["outer", "inner"]


def test_terminal_types_visit_nothing():
    v = record(StructField(type=TupleType([GenericType("T"), PrimitiveType("bool"), InferType()])))
    assert v.paths == []


def test_default_visitor_hooks_are_no_ops():
    visit.visit_item(Item(id="0:0", crate_id=0, inner=StructField(type=ty("x"))), visit.Visitor())


def test_unknown_payload_is_skipped():
    class Unknown:
        pass

    v = RecordingVisitor()
    visit.visit_item(Item(id="0:0", crate_id=0, inner=Unknown()), v)
    assert v.paths == []
