from __future__ import annotations
from functools import singledispatchmethod
import logging
import typing as tp
from abc import ABC, abstractmethod

if tp.TYPE_CHECKING:
    from ..dsl import ir

logger = logging.getLogger(__name__)


class AnalysisObject(ABC): ...


class Context:
    def __init__(self):
        self._store: tp.Dict[tp.Type[AnalysisObject], AnalysisObject] = {}

    def add(self, result: object):
        self._store[type(result)] = result

    def get(self, cls: tp.Type[AnalysisObject]) -> AnalysisObject:
        if cls not in self._store:
            raise KeyError(f"Context does not contain {cls}")
        return self._store[cls]

    def try_get(self, cls: tp.Type[AnalysisObject]) -> tp.Optional[AnalysisObject]:
        if cls not in self._store:
            return None
        return self._store[cls]

    def __contains__(self, cls: tp.Type[AnalysisObject]):
        return cls in self._store


class Pass(ABC):
    name: str
    requires: tp.Tuple[tp.Type[AnalysisObject], ...] = ()
    produces: tp.Tuple[tp.Type[AnalysisObject], ...] = ()

    def ensure_dependencies(self, ctx: 'Context'):
        requires = self.requires if isinstance(self.requires, tuple) else (self.requires,)
        for r in requires:
            if not issubclass(r, AnalysisObject):
                raise TypeError(f"Pass {self.name} requires {r} which is not a subclass of AnalysisObject")
        missing_deps = [r for r in requires if ctx.try_get(r) is None]
        if missing_deps:
            mnames = ", ".join(str(m.__qualname__) for m in missing_deps)
            raise RuntimeError(f"Pass {self.name} requires {mnames}")

    @abstractmethod
    def __call__(self, root: ir.Node, ctx) -> tp.Any: ...


_PENDING: tp.Dict[tp.Tuple[str, str], tp.List[tp.Tuple[tp.Callable, tp.Tuple[type, ...]]]] = {}


def handles(*types: type):
    """
    @handles(A, B)  -> register the method for node classes A and B
    (stackable; multiple '_' defs are fine)
    """
    if not types or not all(isinstance(t, type) for t in types):
        raise TypeError(f"@handles needs node classes, got {types}")

    def deco(fn: tp.Callable) -> tp.Callable:
        # queue this exact (function, types) pair so same-named defs aren't lost
        cls_qual = fn.__qualname__.rsplit(".", 1)[0]
        key = (fn.__module__, cls_qual)
        _PENDING.setdefault(key, []).append((fn, types))
        return fn
    return deco


def _make_dispatcher(cls) -> singledispatchmethod:
    v = cls.__dict__.get("visit", None)
    if v is None:
        def v(self, node):
            return super(cls, self).visit(node)

    # Define the base dispatcher visit method
    def _base(self, node):
        return v(self, node)
    dispatcher = singledispatchmethod(_base)

    # consume exactly the queued (fn, types) for THIS class
    key = (cls.__module__, cls.__qualname__)
    for fn, types in _PENDING.pop(key, []):
        for t in types:
            dispatcher.register(t)(fn)
    return dispatcher


class Analysis(Pass):
    enable_memoization = True

    def __call__(self, root: ir.Node, ctx: 'Context') -> AnalysisObject:
        self.ensure_dependencies(ctx)
        # Initialize memoization for this analysis
        self._cache = {}
        aobj = self.run(root, ctx)
        if not isinstance(aobj, AnalysisObject):
            raise RuntimeError(f"Analysis pass {self.name} did not return an AnalysisObject, {aobj}")
        return aobj

    def visit(self, node: ir.Node) -> tp.Any:
        return self.visit_children(node)

    @abstractmethod
    def run(self, root: ir.Node, ctx: 'Context'):
        raise NotImplementedError()

    def visit_children(self, node: ir.Node) -> tp.Tuple[tp.Any, ...]:
        return tuple(self.visit(c) for c in node._children)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "__call__" in cls.__dict__:
            raise ValueError("Cannot override __call__")
        if "run" not in cls.__dict__:
            raise ValueError("Must override run")

        dispatcher = _make_dispatcher(cls)

        # Define custom visit function to do caching
        def visit(self, node: ir.Node):
            if self.enable_memoization:
                if node in self._cache:
                    return self._cache[node]
            # Hacked way to get the dispatcher to work without binding to an instance
            new_val = dispatcher.__get__(self, type(self))(node)
            if self.enable_memoization:
                self._cache[node] = new_val
            return new_val
        setattr(cls, "visit", visit)


class Transform(Pass):
    enable_memoization = True

    def __call__(self, root: ir.Node, ctx: 'Context') -> ir.Node:
        self.ensure_dependencies(ctx)
        # Initialize memoization for this transformation
        self._cache = {}
        new_root = self.run(root, ctx)
        from ..dsl import ir
        if not isinstance(new_root, ir.Node):
            raise RuntimeError(f"Transform pass {self.name} did not return a tree node")
        return new_root

    def visit(self, node: ir.Node) -> ir.Node:
        # Fallback: recurse
        new_children = self.visit_children(node)
        return node.replace(*new_children)

    def run(self, root: ir.Node, ctx: 'Context') -> ir.Node:
        return self.visit(root)

    def visit_children(self, node: ir.Node) -> tp.Tuple[ir.Node, ...]:
        return tuple(self.visit(c) for c in node._children)

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        if "__call__" in cls.__dict__:
            raise ValueError("Cannot override __call__")

        dispatcher = _make_dispatcher(cls)

        # Define custom visit function that caches on the structural key
        def visit(self, node: ir.Node):
            cache_key = node._key
            if self.enable_memoization and cache_key in self._cache:
                return self._cache[cache_key]

            # Hacked way to get the dispatcher to work without binding to an instance
            new_node = dispatcher.__get__(self, type(self))(node)
            if new_node._key == node._key:
                new_node = node

            if self.enable_memoization:
                self._cache[cache_key] = new_node
            return new_node
        setattr(cls, "visit", visit)


class PassManager:
    def __init__(self, *passes: tp.Union[Pass, tp.Sequence[Pass]], verbose=False, max_iter=5):
        self.passes = passes
        self.verbose = verbose
        self.max_iter = max_iter

    def run(self, root: ir.Node, ctx: tp.Optional[Context] = None, fixed_point=False) -> ir.Node:
        if ctx is None:
            ctx = Context()
        if fixed_point:
            return self._run_fixed(root, self.passes, ctx)
        return self._run_passes(root, self.passes, ctx)

    def _run_pass(self, root: ir.Node, p: Pass, ctx: Context) -> ir.Node:
        logger.log(logging.INFO if self.verbose else logging.DEBUG, "P: %s on %s", p.__class__.__name__, type(root).__name__)
        if isinstance(p, Transform):
            root = p(root, ctx)
        else:
            assert isinstance(p, Analysis)
            anal_obj = p(root, ctx)
            ctx.add(anal_obj)
        return root

    def _run_passes(self, root: ir.Node, passes: tp.Iterable[Pass], ctx: Context) -> ir.Node:
        for p in passes:
            if isinstance(p, tp.Iterable):
                root = self._run_fixed(root, p, ctx)
            else:
                root = self._run_pass(root, p, ctx)
        return root

    # Does a fixed point iteration
    def _run_fixed(self, root: ir.Node, passes: tp.Iterable[Pass], ctx: 'Context') -> ir.Node:
        for _ in range(self.max_iter):
            new_root = self._run_passes(root, passes, ctx)
            if new_root == root:
                return new_root
            root = new_root
        raise RuntimeError(f"Fixed point iteration did not converge in {self.max_iter} iterations")
