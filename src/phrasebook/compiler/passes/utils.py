from __future__ import annotations

import ast
import logging
import typing as tp

from ..dsl import ir
from ..dsl.ir_types import InferredType
from ..dsl.type_map import TypeMap
from .pass_base import PassManager, Context
from .envobj import TypeMapObj, AllowedSymbols, FunctionSignatures
from .analyses import TypeInferencePass, DeadCodeAnalysis, AllowedSymbolsPass, TreePrinterPass
from .transforms import TypedTreePass, ConstFoldPass
from ..emitting import EmitContext, EmitTranslationPass, EmittedTranslation, translations_module

logger = logging.getLogger(__name__)

FunctionTypes = tp.Mapping[str, tp.Sequence[tp.Union[InferredType, str]]]


def _type_map_context(type_map: TypeMap, function_types: tp.Optional[FunctionTypes] = None) -> Context:
    ctx = Context()
    ctx.add(TypeMapObj(type_map))
    if function_types:
        ctx.add(FunctionSignatures(function_types))
    return ctx


def infer_translation_types(
    translation: ir.Translation,
    type_map: tp.Optional[TypeMap] = None,
    *,
    function_types: tp.Optional[FunctionTypes] = None,
    verbose: bool = False,
) -> TypeMap:
    """Record the type usages of `translation` in `type_map` (a new map if
    None) and return the map. The map is not frozen."""
    if type_map is None:
        type_map = TypeMap()
    ctx = _type_map_context(type_map, function_types)
    PassManager(TypeInferencePass(), verbose=verbose).run(translation, ctx)
    return type_map


def analyze_only_translation(translation: ir.Translation, type_map: TypeMap, *, verbose: bool = False) -> ir.Translation:
    """Build the typed tree from a frozen map and constant fold it."""
    passes = [TypedTreePass(), ConstFoldPass()]
    if verbose:
        passes.append(TreePrinterPass())
    return PassManager(*passes, verbose=verbose).run(translation, _type_map_context(type_map))


def analyze_translation(
    translation: ir.Translation,
    type_map: tp.Optional[TypeMap] = None,
    *,
    function_types: tp.Optional[FunctionTypes] = None,
    verbose: bool = False,
) -> ir.Translation:
    """Infer, freeze, then build the typed and folded tree.

    A map that is already frozen is used as is.
    """
    if type_map is None:
        type_map = TypeMap()
    if not type_map.is_frozen:
        infer_translation_types(translation, type_map, function_types=function_types, verbose=verbose)
        type_map.freeze()
        logger.debug("froze %r", type_map)
    return analyze_only_translation(translation, type_map, verbose=verbose)


def compile_translation(
    translation: ir.Translation,
    *,
    type_map: tp.Optional[TypeMap] = None,
    allowed_variables: tp.Optional[tp.Iterable[str]] = None,
    allowed_functions: tp.Optional[tp.Iterable[str]] = None,
    function_types: tp.Optional[FunctionTypes] = None,
    check_dead_code: bool = True,
    name: str = "translation",
    ctx: tp.Optional[EmitContext] = None,
    verbose: bool = False,
) -> EmittedTranslation:
    """Run the whole pipeline on one translation.

    The dead code and allowed symbol checks are optional; the symbol check
    only runs when an allow-list is given. Pass the same EmitContext to
    several calls to collect their helper usage in one place.
    """
    if type_map is None:
        type_map = TypeMap()
    typed = analyze_translation(translation, type_map, function_types=function_types, verbose=verbose)

    pctx = _type_map_context(type_map)
    pctx.add(ctx if ctx is not None else EmitContext())
    passes = []
    if check_dead_code:
        passes.append(DeadCodeAnalysis())
    if allowed_variables is not None or allowed_functions is not None:
        pctx.add(AllowedSymbols(allowed_variables, allowed_functions))
        passes.append(AllowedSymbolsPass())
    passes.append(EmitTranslationPass(name))
    PassManager(*passes, verbose=verbose).run(typed, pctx)
    return pctx.get(EmittedTranslation)


def compile_translations(
    translations: tp.Mapping[str, ir.Translation],
    *,
    allowed_variables: tp.Optional[tp.Iterable[str]] = None,
    allowed_functions: tp.Optional[tp.Iterable[str]] = None,
    function_types: tp.Optional[FunctionTypes] = None,
    check_dead_code: bool = True,
    verbose: bool = False,
) -> ast.Module:
    """Compile a set of translations into one module.

    Each translation gets its own TypeMap. The module defines the helpers
    once and a `translations` dict from key to function or constant.
    """
    ectx = EmitContext()
    emitted: tp.Dict[str, EmittedTranslation] = {}
    for i, (key, translation) in enumerate(translations.items()):
        logger.debug("compiling %r", key)
        emitted[key] = compile_translation(
            translation,
            allowed_variables=allowed_variables,
            allowed_functions=allowed_functions,
            function_types=function_types,
            check_dead_code=check_dead_code,
            name=f"_translation_{i}",
            ctx=ectx,
            verbose=verbose,
        )
    return translations_module(emitted, ectx)
