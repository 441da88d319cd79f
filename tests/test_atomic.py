import pytest
from sqlalchemy import func, select

from questionbank.core.database import ATOMIC_DEPTH, atomic
from questionbank.core.errors import PartialWriteFailure, UnresolvedReference
from questionbank.models.orm import Group, Question, StudentAnswer
from questionbank.services.answers import seed_answer_sheet
from questionbank.services.portable import export_one, import_one
from questionbank.services.replication import replicate


def persisted(session_factory, model, key):
    db = session_factory()
    try:
        return db.get(model, key) is not None
    finally:
        db.close()


def test_import_after_a_read_is_committed(session_factory, bank):
    db = session_factory()
    document = export_one(db, bank["essay"])
    assert db.in_transaction()
    question = import_one(db, document, bank["group"])
    db.close()
    assert persisted(session_factory, Question, question.id)


def test_replicate_after_a_read_is_committed(session_factory, bank):
    db = session_factory()
    db.get(Question, bank["web"])
    copy = replicate(db, bank["web"])
    db.close()
    assert persisted(session_factory, Question, copy.id)


def test_seed_after_a_read_is_committed(session_factory, bank):
    db = session_factory()
    db.get(Question, bank["essay"])
    (answer,) = seed_answer_sheet(db, [bank["essay"]], "ada@example.org")
    db.close()
    assert persisted(session_factory, StudentAnswer, answer.id)


def test_nested_block_rolls_back_alone(session_factory, bank):
    db = session_factory()
    with atomic(db, "outer"):
        db.add(Group(label="Kept"))
        with pytest.raises(UnresolvedReference):
            with atomic(db, "inner"):
                db.add(Group(label="Dropped"))
                db.flush()
                raise UnresolvedReference("no such thing")
        assert db.info[ATOMIC_DEPTH] == 1
    assert db.info[ATOMIC_DEPTH] == 0
    db.close()

    db = session_factory()
    labels = set(db.scalars(select(Group.label)))
    db.close()
    assert "Kept" in labels
    assert "Dropped" not in labels


def test_unexpected_failure_is_wrapped_and_rolled_back(session_factory, bank):
    db = session_factory()
    before = db.scalar(select(func.count()).select_from(Group))
    with pytest.raises(PartialWriteFailure) as excinfo:
        with atomic(db, "broken"):
            db.add(Group(label="Half"))
            db.flush()
            raise RuntimeError("connection lost")
    assert isinstance(excinfo.value.__cause__, RuntimeError)
    assert db.info[ATOMIC_DEPTH] == 0
    assert db.scalar(select(func.count()).select_from(Group)) == before
    db.close()
