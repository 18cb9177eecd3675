# Shared fixtures: an in-memory store standing in for the repositories.

import itertools

import pytest
from fastapi.testclient import TestClient

import main
from core.dependencies import connection
from core.results import StoreErrorKind, StoreResult
from questions import repository as question_repository
from questions.schemas import VOTE_DOWN, VOTE_UP, Question, parse_serial_id
from tags import repository as tag_repository
from tags.schemas import Tag

FAKE_CONNECTION = object()


class FakeStore:
    """Implements the repository functions over dicts.

    Set `down = True` to make every call fail as if the database were
    unreachable.
    """

    def __init__(self):
        self.tags = {}
        self.questions = {}
        self.down = False
        self.question_inserts = 0
        self._tag_ids = itertools.count(1)
        self._question_ids = itertools.count(1)

    # helpers for arranging test data

    def add_tag(self, name, slug, description=""):
        tag_id = next(self._tag_ids)
        tag = Tag(id=str(tag_id), name=name, description=description, slug=slug)
        self.tags[tag_id] = tag
        return tag

    def add_question(self, tag, question="Q?", answer="A.", votes_up=0, votes_down=0):
        question_id = next(self._question_ids)
        record = Question(
            id=str(question_id),
            tag_id=tag.id,
            question=question,
            answer=answer,
            votes_up=votes_up,
            votes_down=votes_down,
        )
        self.questions[question_id] = record
        return record

    def _unavailable(self):
        return StoreResult.failure(StoreErrorKind.UNAVAILABLE)

    @staticmethod
    def _key(value):
        try:
            return parse_serial_id(value)
        except ValueError:
            return None

    # repository surface

    async def list_tags(self, conn):
        if self.down:
            return self._unavailable()
        return StoreResult.success(list(self.tags.values()))

    async def tag_exists(self, conn, tag_id):
        if self.down:
            return self._unavailable()
        return StoreResult.success(tag_id in self.tags)

    async def get_tag_by_slug(self, conn, slug):
        if self.down:
            return self._unavailable()
        for tag in self.tags.values():
            if tag.slug == slug:
                return StoreResult.success(tag)
        return StoreResult.not_found()

    async def insert_tag(self, conn, tag):
        if self.down:
            return self._unavailable()
        if any(existing.slug == tag.slug for existing in self.tags.values()):
            return StoreResult.failure(StoreErrorKind.CONSTRAINT_VIOLATION)
        created = self.add_tag(tag.name, tag.slug, tag.description)
        return StoreResult.success(created.id)

    async def list_questions_by_tag(self, conn, tag_id):
        if self.down:
            return self._unavailable()
        return StoreResult.success([q for q in self.questions.values() if q.tag_id == tag_id])

    async def get_question_by_id(self, conn, question_id):
        if self.down:
            return self._unavailable()
        question = self.questions.get(self._key(question_id))
        if question is None:
            return StoreResult.not_found()
        return StoreResult.success(question)

    async def insert_question(self, conn, question):
        tag_id = parse_serial_id(question.tag_id)
        if self.down:
            return self._unavailable()
        if tag_id not in self.tags:
            return StoreResult.failure(StoreErrorKind.CONSTRAINT_VIOLATION)
        self.question_inserts += 1
        created = self.add_question(
            self.tags[tag_id],
            question=question.question,
            answer=question.answer,
            votes_up=question.votes_up,
            votes_down=question.votes_down,
        )
        return StoreResult.success(created.id)

    async def update_question(self, conn, question):
        if self.down:
            return self._unavailable()
        key = self._key(question.id)
        if key not in self.questions:
            return StoreResult.not_found()
        self.questions[key] = self.questions[key].model_copy(
            update={"votes_up": question.votes_up, "votes_down": question.votes_down}
        )
        return StoreResult.success(True)

    async def increment_vote(self, conn, question_id, vote_type):
        if self.down:
            return self._unavailable()
        key = self._key(question_id)
        if key not in self.questions:
            return StoreResult.not_found()
        current = self.questions[key]
        field = {VOTE_UP: "votes_up", VOTE_DOWN: "votes_down"}[vote_type]
        self.questions[key] = current.model_copy(update={field: getattr(current, field) + 1})
        return StoreResult.success(self.questions[key])


_TAG_FUNCTIONS = ("list_tags", "tag_exists", "get_tag_by_slug", "insert_tag")
_QUESTION_FUNCTIONS = (
    "list_questions_by_tag",
    "get_question_by_id",
    "insert_question",
    "update_question",
    "increment_vote",
)


@pytest.fixture
def store(monkeypatch):
    fake = FakeStore()
    for name in _TAG_FUNCTIONS:
        monkeypatch.setattr(tag_repository, name, getattr(fake, name))
    for name in _QUESTION_FUNCTIONS:
        monkeypatch.setattr(question_repository, name, getattr(fake, name))
    return fake


async def _fake_connection():
    yield FAKE_CONNECTION


@pytest.fixture
def client(store):
    main.app.dependency_overrides[connection] = _fake_connection
    try:
        yield TestClient(main.app)
    finally:
        main.app.dependency_overrides.clear()
