from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from uni.ast import FuncDecl


@dataclass
class Scope:
    """One name-to-value binding table. `parent` is a handle into the owning Environment."""
    parent: Optional[int]
    variables: Dict[str, Any] = field(default_factory=dict)
    functions: Dict[str, FuncDecl] = field(default_factory=dict)


class Environment:
    """Arena holding every scope of a running program.

    Scopes are addressed by integer handles and refer to their parent by
    handle, so the arena is the only owner. A block or call takes a child
    scope with `child()` and the scope is released when it exits; released
    slots are reused. The root scope lives as long as the environment.
    """
    def __init__(self):
        self.scopes: List[Optional[Scope]] = []
        self.free: List[int] = []
        self.root = self.new_scope()

    def new_scope(self, parent: Optional[int] = None) -> int:
        scope = Scope(parent)
        if self.free:
            handle = self.free.pop()
            self.scopes[handle] = scope
        else:
            handle = len(self.scopes)
            self.scopes.append(scope)
        return handle

    def release(self, handle: int):
        if handle == self.root:
            raise ValueError('the root scope cannot be released')
        self.scope(handle)
        self.scopes[handle] = None
        self.free.append(handle)

    @contextmanager
    def child(self, parent: int) -> Iterator[int]:
        handle = self.new_scope(parent)
        try:
            yield handle
        finally:
            self.release(handle)

    def scope(self, handle: int) -> Scope:
        scope = self.scopes[handle]
        if scope is None:
            raise KeyError(f'scope {handle} has been released')
        return scope

    def chain(self, handle: int) -> Iterator[Scope]:
        """Yield the scope and then each of its ancestors up to the root."""
        current: Optional[int] = handle
        while current is not None:
            scope = self.scope(current)
            yield scope
            current = scope.parent

    @property
    def live_scopes(self) -> int:
        return len(self.scopes) - len(self.free)

    def get(self, handle: int, name: str) -> Tuple[Any, bool]:
        for scope in self.chain(handle):
            if name in scope.variables:
                return scope.variables[name], True
        return None, False

    def declare(self, handle: int, name: str, value: Any):
        self.scope(handle).variables[name] = value

    def set(self, handle: int, name: str, value: Any) -> bool:
        # overwrite in the nearest scope that already binds the name
        for scope in self.chain(handle):
            if name in scope.variables:
                scope.variables[name] = value
                return True
        return False

    def get_function(self, handle: int, name: str) -> Tuple[Optional[FuncDecl], bool]:
        for scope in self.chain(handle):
            if name in scope.functions:
                return scope.functions[name], True
        return None, False

    def set_function(self, handle: int, name: str, decl: FuncDecl):
        self.scope(handle).functions[name] = decl
