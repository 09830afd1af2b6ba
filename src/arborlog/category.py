"""
Category tree nodes.

A category is the unit callers log against. Categories form a tree through
their parent links and register themselves with a service the moment they are
constructed, so every category has runtime settings from birth.
"""

from __future__ import annotations

import re
import weakref
from typing import TYPE_CHECKING, Optional

from .exceptions import CategoryServiceMismatch, InvalidCategoryName

if TYPE_CHECKING:
    from .service import CategoryService

_NAME_PATTERN = re.compile(r"[A-Za-z0-9_]+")

PATH_SEPARATOR = "#"


class Category:
    """Named node in the logging-scope tree.

    Identity matters: two categories with the same path are different
    categories with their own settings. Equality and hashing are therefore
    left as object identity.

    Args:
        name: Letters, digits and '_' only.
        parent: Parent category, None for a root.
        service: Service to register with. Roots default to the process-wide
            current service. Children use their parent's service; passing a
            different one raises ``CategoryServiceMismatch``.
    """

    def __init__(
        self,
        name: str,
        parent: Optional[Category] = None,
        *,
        service: Optional[CategoryService] = None,
    ) -> None:
        if not isinstance(name, str) or _NAME_PATTERN.fullmatch(name) is None:
            raise InvalidCategoryName(name=str(name))

        self._name = name
        self._parent_ref: Optional[weakref.ReferenceType[Category]] = None
        self._children: list[Category] = []

        if parent is not None:
            if service is not None and service is not parent.service:
                raise CategoryServiceMismatch(name=name, parent_path=parent.path)
            self._parent_ref = weakref.ref(parent)
            parent._children.append(self)
            service = parent.service

        if service is None:
            from .service import get_service

            service = get_service()

        self._service = service
        service.register(self)

    @property
    def name(self) -> str:
        return self._name

    @property
    def parent(self) -> Optional[Category]:
        if self._parent_ref is None:
            return None
        return self._parent_ref()

    @property
    def children(self) -> tuple[Category, ...]:
        return tuple(self._children)

    @property
    def service(self) -> CategoryService:
        return self._service

    @property
    def is_root(self) -> bool:
        return self.parent is None

    @property
    def root(self) -> Category:
        node = self
        while node.parent is not None:
            node = node.parent
        return node

    @property
    def path(self) -> str:
        """Names from the topmost ancestor down to this category, joined by '#'."""
        names = []
        node: Optional[Category] = self
        while node is not None:
            names.append(node.name)
            node = node.parent
        return PATH_SEPARATOR.join(reversed(names))

    def descendants(self) -> list[Category]:
        """All categories below this one, depth first in creation order."""
        result: list[Category] = []
        for child in self._children:
            result.append(child)
            result.extend(child.descendants())
        return result

    def __repr__(self) -> str:
        return f"Category(path={self.path!r})"
