from __future__ import annotations

from graphlib import CycleError, TopologicalSorter
from typing import TYPE_CHECKING, Any, Callable, Dict, Generic, Iterable, Tuple, Type, TypeVar

from .errors import HandlerDependencyError

if TYPE_CHECKING:
    from .handler import TraceHandler

T = TypeVar("T")


class RegistryBase(Generic[T]):
    """Name to entry mapping, kept separately for every subclass.

    Entries are normally added at import time with the :meth:`register`
    decorator. Subclasses that track more per entry extend :meth:`_add`.
    """

    @classmethod
    def _storage(cls, attribute: str) -> Dict[str, Any]:
        storage = cls.__dict__.get(attribute)
        if storage is None:
            storage = {}
            setattr(cls, attribute, storage)
        return storage

    @classmethod
    def _entries(cls) -> Dict[str, T]:
        return cls._storage("_registry_entries")

    @classmethod
    def register(cls, key: str) -> Callable[[T], T]:
        def decorator(entry: T) -> T:
            if key in cls._entries():
                raise ValueError(f"'{key}' is already registered with {cls.__name__}")
            cls._add(key, entry)
            return entry

        return decorator

    @classmethod
    def _add(cls, key: str, entry: T) -> None:
        cls._entries()[key] = entry

    @classmethod
    def get(cls, key: str) -> T:
        entries = cls._entries()
        if key not in entries:
            raise KeyError(f"No entry named '{key}' in {cls.__name__}")
        return entries[key]

    @classmethod
    def create(cls, key: str, *args: Any, **kwargs: Any) -> Any:
        entry = cls.get(key)
        if not callable(entry):
            raise TypeError(f"{cls.__name__} entry '{key}' cannot be instantiated")
        return entry(*args, **kwargs)

    @classmethod
    def items(cls) -> Tuple[Tuple[str, T], ...]:
        return tuple(cls._entries().items())

    @classmethod
    def clear(cls) -> None:
        cls._entries().clear()


class HandlerRegistry(RegistryBase[Type["TraceHandler"]]):
    """Registry for trace handlers and the dependencies they declare.

    A registration that would close a dependency cycle is rejected and leaves
    the registry untouched. Dependencies may name handlers that are registered
    later; they only have to exist once an order is resolved.
    """

    @classmethod
    def _dependencies(cls) -> Dict[str, Tuple[str, ...]]:
        return cls._storage("_registry_dependencies")

    @classmethod
    def _add(cls, key: str, entry: Type["TraceHandler"]) -> None:
        deps = tuple(entry.deps())
        graph = dict(cls._dependencies())
        graph[key] = deps
        _ensure_acyclic(graph)
        super()._add(key, entry)
        cls._dependencies()[key] = deps

    @classmethod
    def dependencies_of(cls, key: str) -> Tuple[str, ...]:
        cls.get(key)
        return cls._dependencies()[key]

    @classmethod
    def resolve_order(cls, names: Iterable[str]) -> Tuple[str, ...]:
        """Return ``names`` plus their transitive dependencies, dependencies first.

        The order is deterministic: among handlers whose dependencies are all
        satisfied, the one registered first comes first.
        """

        required: set[str] = set()
        pending = list(names)
        while pending:
            name = pending.pop()
            if name in required:
                continue
            if name not in cls._entries():
                raise HandlerDependencyError(f"Unknown trace handler '{name}'")
            required.add(name)
            pending.extend(cls._dependencies()[name])

        registration_order = [name for name in cls._entries() if name in required]
        sorter: TopologicalSorter[str] = TopologicalSorter()
        for name in registration_order:
            sorter.add(name, *cls._dependencies()[name])
        sorter.prepare()

        position = {name: index for index, name in enumerate(registration_order)}
        ordered: list[str] = []
        while sorter.is_active():
            ready = sorted(sorter.get_ready(), key=position.__getitem__)
            for name in ready:
                ordered.append(name)
                sorter.done(name)
        return tuple(ordered)

    @classmethod
    def clear(cls) -> None:
        super().clear()
        cls._dependencies().clear()


def _ensure_acyclic(graph: Dict[str, Tuple[str, ...]]) -> None:
    try:
        TopologicalSorter(graph).prepare()
    except CycleError as exc:
        cycle = " -> ".join(exc.args[1]) if len(exc.args) > 1 else "unknown"
        raise HandlerDependencyError(f"Handler dependency cycle detected: {cycle}") from exc


__all__ = ["HandlerRegistry", "RegistryBase"]
