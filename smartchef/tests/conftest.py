"""Pytest configuration and fixtures."""

import copy
import itertools

import pytest
from fastapi.testclient import TestClient

from smartchef.app.api.dependencies import get_generator, get_store
from smartchef.app.main import app
from smartchef.app.services.recipe_store import RecipeStore

_push_ids = itertools.count()


class FakeReference:
    """In-memory stand-in for firebase_admin.db.Reference."""

    def __init__(self, tree=None, path=()):
        self.tree = {} if tree is None else tree
        self.path = path

    @property
    def key(self):
        return self.path[-1] if self.path else None

    def child(self, path):
        if not path or any(ch in ".$#[]" for ch in path):
            raise ValueError(f"Invalid path argument: {path!r}")
        parts = tuple(part for part in path.split("/") if part)
        return FakeReference(self.tree, self.path + parts)

    def _parent(self, create):
        node = self.tree
        for part in self.path[:-1]:
            if part not in node:
                if not create:
                    return None
                node[part] = {}
            node = node[part]
        return node

    def get(self):
        node = self.tree
        for part in self.path:
            if not isinstance(node, dict) or part not in node:
                return None
            node = node[part]
        return copy.deepcopy(node)

    def set(self, value):
        self._parent(create=True)[self.path[-1]] = copy.deepcopy(value)

    def update(self, value):
        parent = self._parent(create=True)
        parent.setdefault(self.path[-1], {}).update(copy.deepcopy(value))

    def push(self, value=None):
        ref = self.child(f"-push{next(_push_ids):08d}")
        ref.set(value if value is not None else "")
        return ref

    def delete(self):
        parent = self._parent(create=False)
        if parent is not None:
            parent.pop(self.path[-1], None)


@pytest.fixture
def fake_db():
    return FakeReference()


@pytest.fixture
def store(fake_db):
    return RecipeStore(fake_db)


@pytest.fixture
def replies():
    """Texts the fake generator returns, in order."""
    return []


@pytest.fixture
def prompts():
    return []


@pytest.fixture
def client(store, replies, prompts):
    async def fake_generator(prompt):
        prompts.append(prompt)
        return replies.pop(0)

    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_generator] = lambda: fake_generator
    yield TestClient(app)
    app.dependency_overrides.clear()
