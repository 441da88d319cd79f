import enum
import uuid
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import (
    Boolean, Column, DateTime, Enum as SQLEnum, Float, ForeignKey,
    ForeignKeyConstraint, Index, Integer, JSON, String, Table, Text,
    UniqueConstraint, Uuid, func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from questionbank.core.database import Base


def _enum(cls):
    return SQLEnum(
        cls,
        values_callable=lambda members: [m.value for m in members],
        native_enum=False,
        length=32,
    )


def _pk():
    return mapped_column(Uuid, primary_key=True, default=uuid.uuid4)


# ========== Enums ==========

class QuestionType(str, enum.Enum):
    MULTIPLE_CHOICE = "multipleChoice"
    TRUE_FALSE = "trueFalse"
    ESSAY = "essay"
    WEB = "web"
    EXACT_MATCH = "exactMatch"
    CODE = "code"
    DATABASE = "database"


class QuestionStatus(str, enum.Enum):
    ACTIVE = "ACTIVE"
    ARCHIVED = "ARCHIVED"


class QuestionUsageStatus(str, enum.Enum):
    UNUSED = "UNUSED"
    USED = "USED"
    NOT_APPLICABLE = "NOT_APPLICABLE"


class QuestionSource(str, enum.Enum):
    BANK = "BANK"
    COPY = "COPY"
    EVAL = "EVAL"


class MultipleChoiceGradingPolicy(str, enum.Enum):
    ALL_OR_NOTHING = "ALL_OR_NOTHING"
    GRADUAL_CREDIT = "GRADUAL_CREDIT"


class CodeQuestionType(str, enum.Enum):
    CODE_WRITING = "codeWriting"
    CODE_READING = "codeReading"


class StudentPermission(str, enum.Enum):
    UPDATE = "UPDATE"
    VIEW = "VIEW"
    HIDDEN = "HIDDEN"


class QueryOutputStatus(str, enum.Enum):
    NEUTRAL = "NEUTRAL"
    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    WARNING = "WARNING"
    RUNNING = "RUNNING"


class QueryOutputType(str, enum.Enum):
    TABULAR = "TABULAR"
    SCALAR = "SCALAR"
    TEXT = "TEXT"


class DatabaseDBMS(str, enum.Enum):
    POSTGRES = "POSTGRES"
    MYSQL = "MYSQL"


class CodeReadingOutputStatus(str, enum.Enum):
    NEUTRAL = "NEUTRAL"
    MATCH = "MATCH"
    MISMATCH = "MISMATCH"


class StudentAnswerStatus(str, enum.Enum):
    MISSING = "MISSING"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"


class GradingStatus(str, enum.Enum):
    UNGRADED = "UNGRADED"
    GRADED = "GRADED"
    AUTOGRADED = "AUTOGRADED"


# ========== Ownership & Tags ==========

class Group(Base):
    __tablename__ = "groups"

    id: Mapped[uuid.UUID] = _pk()
    label: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())


class Tag(Base):
    __tablename__ = "tags"

    group_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("groups.id", ondelete="CASCADE"), primary_key=True
    )
    label: Mapped[str] = mapped_column(String(100), primary_key=True)


class QuestionTag(Base):
    __tablename__ = "question_tags"
    __table_args__ = (
        ForeignKeyConstraint(
            ["group_id", "label"], ["tags.group_id", "tags.label"], ondelete="CASCADE"
        ),
    )

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True
    )
    group_id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True)
    label: Mapped[str] = mapped_column(String(100), primary_key=True)


# ========== Question ==========

class Question(Base):
    __tablename__ = "questions"
    __table_args__ = (
        Index("idx_questions_group", "group_id"),
        Index("idx_questions_source", "source_question_id"),
    )

    id: Mapped[uuid.UUID] = _pk()
    group_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("groups.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[QuestionType] = mapped_column(_enum(QuestionType), nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    content: Mapped[Optional[str]] = mapped_column(Text)
    scratchpad: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[QuestionStatus] = mapped_column(
        _enum(QuestionStatus), nullable=False, default=QuestionStatus.ACTIVE
    )
    usage_status: Mapped[QuestionUsageStatus] = mapped_column(
        _enum(QuestionUsageStatus), nullable=False, default=QuestionUsageStatus.UNUSED
    )
    source: Mapped[QuestionSource] = mapped_column(
        _enum(QuestionSource), nullable=False, default=QuestionSource.BANK
    )
    source_question_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="SET NULL")
    )
    last_used: Mapped[Optional[datetime]] = mapped_column(DateTime)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )

    # Relationships
    group: Mapped["Group"] = relationship()
    source_question: Mapped[Optional["Question"]] = relationship(remote_side=[id])
    tags: Mapped[List["QuestionTag"]] = relationship(cascade="all, delete-orphan")
    multiple_choice: Mapped[Optional["MultipleChoice"]] = relationship(
        cascade="all, delete-orphan"
    )
    true_false: Mapped[Optional["TrueFalse"]] = relationship(cascade="all, delete-orphan")
    essay: Mapped[Optional["Essay"]] = relationship(cascade="all, delete-orphan")
    web: Mapped[Optional["Web"]] = relationship(cascade="all, delete-orphan")
    exact_match: Mapped[Optional["ExactMatch"]] = relationship(cascade="all, delete-orphan")
    code: Mapped[Optional["Code"]] = relationship(cascade="all, delete-orphan")
    database: Mapped[Optional["Database"]] = relationship(cascade="all, delete-orphan")
    student_answers: Mapped[List["StudentAnswer"]] = relationship(
        back_populates="question", cascade="all, delete-orphan"
    )


# ========== Choice set ==========

class MultipleChoice(Base):
    __tablename__ = "multiple_choice"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True
    )
    grading_policy: Mapped[MultipleChoiceGradingPolicy] = mapped_column(
        _enum(MultipleChoiceGradingPolicy),
        nullable=False,
        default=MultipleChoiceGradingPolicy.ALL_OR_NOTHING,
    )
    activate_student_comment: Mapped[bool] = mapped_column(Boolean, default=False)
    student_comment_label: Mapped[Optional[str]] = mapped_column(String(255))
    activate_selection_limit: Mapped[bool] = mapped_column(Boolean, default=False)
    selection_limit: Mapped[int] = mapped_column(Integer, default=0)

    options: Mapped[List["Option"]] = relationship(cascade="all, delete-orphan")


class Option(Base):
    __tablename__ = "options"
    __table_args__ = (Index("idx_options_question", "question_id"),)

    id: Mapped[uuid.UUID] = _pk()
    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("multiple_choice.question_id", ondelete="CASCADE"), nullable=False
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    text: Mapped[Optional[str]] = mapped_column(Text)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


# ========== Boolean / free text / web ==========

class TrueFalse(Base):
    __tablename__ = "true_false"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True
    )
    is_true: Mapped[Optional[bool]] = mapped_column(Boolean)


class Essay(Base):
    __tablename__ = "essay"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True
    )
    solution: Mapped[Optional[str]] = mapped_column(Text)
    template: Mapped[Optional[str]] = mapped_column(Text)


class Web(Base):
    __tablename__ = "web"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True
    )
    template_html: Mapped[Optional[str]] = mapped_column(Text)
    template_css: Mapped[Optional[str]] = mapped_column(Text)
    template_js: Mapped[Optional[str]] = mapped_column(Text)
    solution_html: Mapped[Optional[str]] = mapped_column(Text)
    solution_css: Mapped[Optional[str]] = mapped_column(Text)
    solution_js: Mapped[Optional[str]] = mapped_column(Text)


# ========== Exact match ==========

class ExactMatch(Base):
    __tablename__ = "exact_match"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True
    )

    fields: Mapped[List["ExactMatchField"]] = relationship(cascade="all, delete-orphan")


class ExactMatchField(Base):
    __tablename__ = "exact_match_fields"
    __table_args__ = (Index("idx_emf_question", "question_id"),)

    id: Mapped[uuid.UUID] = _pk()
    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("exact_match.question_id", ondelete="CASCADE"), nullable=False
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    statement: Mapped[Optional[str]] = mapped_column(Text)
    match_regex: Mapped[Optional[str]] = mapped_column(Text)


# ========== Executable code ==========

class Code(Base):
    __tablename__ = "code"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True
    )
    language: Mapped[Optional[str]] = mapped_column(String(50))
    code_type: Mapped[CodeQuestionType] = mapped_column(
        _enum(CodeQuestionType), nullable=False, default=CodeQuestionType.CODE_WRITING
    )

    sandbox: Mapped[Optional["Sandbox"]] = relationship(cascade="all, delete-orphan")
    code_writing: Mapped[Optional["CodeWriting"]] = relationship(cascade="all, delete-orphan")
    code_reading: Mapped[Optional["CodeReading"]] = relationship(cascade="all, delete-orphan")


class Sandbox(Base):
    __tablename__ = "sandboxes"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("code.question_id", ondelete="CASCADE"), primary_key=True
    )
    image: Mapped[str] = mapped_column(String(255), nullable=False)
    before_all: Mapped[Optional[str]] = mapped_column(Text)


class CodeWriting(Base):
    __tablename__ = "code_writing"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("code.question_id", ondelete="CASCADE"), primary_key=True
    )
    code_check_enabled: Mapped[bool] = mapped_column(Boolean, default=True)

    test_cases: Mapped[List["TestCase"]] = relationship(cascade="all, delete-orphan")
    template_files: Mapped[List["CodeToTemplateFile"]] = relationship(
        cascade="all, delete-orphan"
    )
    solution_files: Mapped[List["CodeToSolutionFile"]] = relationship(
        cascade="all, delete-orphan"
    )


class TestCase(Base):
    __tablename__ = "test_cases"
    __test__ = False  # not a pytest class
    __table_args__ = (
        UniqueConstraint("question_id", "index", name="uq_test_case_index"),
    )

    id: Mapped[uuid.UUID] = _pk()
    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("code_writing.question_id", ondelete="CASCADE"), nullable=False
    )
    index: Mapped[int] = mapped_column(Integer, nullable=False)
    exec: Mapped[str] = mapped_column(Text, nullable=False, default="")
    input: Mapped[str] = mapped_column(Text, nullable=False, default="")
    expected_output: Mapped[str] = mapped_column(Text, nullable=False, default="")


class File(Base):
    __tablename__ = "files"
    __table_args__ = (Index("idx_files_question", "question_id"),)

    id: Mapped[uuid.UUID] = _pk()
    question_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE")
    )
    path: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )


class CodeToTemplateFile(Base):
    __tablename__ = "code_to_template_files"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("code_writing.question_id", ondelete="CASCADE"), primary_key=True
    )
    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("files.id", ondelete="CASCADE"), primary_key=True
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    student_permission: Mapped[StudentPermission] = mapped_column(
        _enum(StudentPermission), nullable=False, default=StudentPermission.UPDATE
    )

    file: Mapped["File"] = relationship()


class CodeToSolutionFile(Base):
    __tablename__ = "code_to_solution_files"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("code_writing.question_id", ondelete="CASCADE"), primary_key=True
    )
    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("files.id", ondelete="CASCADE"), primary_key=True
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    file: Mapped["File"] = relationship()


class CodeReading(Base):
    __tablename__ = "code_reading"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("code.question_id", ondelete="CASCADE"), primary_key=True
    )
    context_exec: Mapped[Optional[str]] = mapped_column(Text)
    context_path: Mapped[Optional[str]] = mapped_column(String(255))
    context: Mapped[Optional[str]] = mapped_column(Text)
    student_output_test: Mapped[bool] = mapped_column(Boolean, default=False)

    snippets: Mapped[List["CodeReadingSnippet"]] = relationship(cascade="all, delete-orphan")


class CodeReadingSnippet(Base):
    __tablename__ = "code_reading_snippets"

    id: Mapped[uuid.UUID] = _pk()
    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("code_reading.question_id", ondelete="CASCADE"), nullable=False
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    snippet: Mapped[Optional[str]] = mapped_column(Text)
    output: Mapped[Optional[str]] = mapped_column(Text)


# ========== Database ==========

class Database(Base):
    __tablename__ = "database"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), primary_key=True
    )
    image: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    solution_queries: Mapped[List["DatabaseToSolutionQuery"]] = relationship(
        cascade="all, delete-orphan"
    )


class DatabaseQuery(Base):
    __tablename__ = "database_queries"
    __table_args__ = (Index("idx_dq_question", "question_id"),)

    id: Mapped[uuid.UUID] = _pk()
    question_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE")
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    title: Mapped[Optional[str]] = mapped_column(String(255))
    description: Mapped[Optional[str]] = mapped_column(Text)
    content: Mapped[Optional[str]] = mapped_column(Text)
    template: Mapped[Optional[str]] = mapped_column(Text)
    lint_active: Mapped[bool] = mapped_column(Boolean, default=False)
    lint_rules: Mapped[Optional[str]] = mapped_column(Text)
    student_permission: Mapped[StudentPermission] = mapped_column(
        _enum(StudentPermission), nullable=False, default=StudentPermission.UPDATE
    )
    test_query: Mapped[bool] = mapped_column(Boolean, default=False)

    output_tests: Mapped[List["DatabaseQueryOutputTest"]] = relationship(
        cascade="all, delete-orphan"
    )


class DatabaseQueryOutputTest(Base):
    __tablename__ = "database_query_output_tests"

    id: Mapped[uuid.UUID] = _pk()
    query_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("database_queries.id", ondelete="CASCADE"), nullable=False
    )
    test: Mapped[str] = mapped_column(String(50), nullable=False)


class DatabaseQueryOutput(Base):
    __tablename__ = "database_query_outputs"

    id: Mapped[uuid.UUID] = _pk()
    query_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("database_queries.id", ondelete="CASCADE"), nullable=False
    )
    output: Mapped[Optional[Any]] = mapped_column(JSON)
    status: Mapped[QueryOutputStatus] = mapped_column(
        _enum(QueryOutputStatus), nullable=False, default=QueryOutputStatus.NEUTRAL
    )
    type: Mapped[QueryOutputType] = mapped_column(
        _enum(QueryOutputType), nullable=False, default=QueryOutputType.TEXT
    )
    dbms: Mapped[DatabaseDBMS] = mapped_column(
        _enum(DatabaseDBMS), nullable=False, default=DatabaseDBMS.POSTGRES
    )


class DatabaseToSolutionQuery(Base):
    __tablename__ = "database_to_solution_queries"

    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("database.question_id", ondelete="CASCADE"), primary_key=True
    )
    query_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("database_queries.id", ondelete="CASCADE"), primary_key=True
    )
    output_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid, ForeignKey("database_query_outputs.id", ondelete="SET NULL")
    )

    query: Mapped["DatabaseQuery"] = relationship()
    output: Mapped[Optional["DatabaseQueryOutput"]] = relationship()


# ========== Participant answers ==========

class StudentAnswer(Base):
    __tablename__ = "student_answers"
    __table_args__ = (
        UniqueConstraint("question_id", "user_email", name="uq_student_answer"),
        Index("idx_sa_user", "user_email"),
    )

    id: Mapped[uuid.UUID] = _pk()
    question_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("questions.id", ondelete="CASCADE"), nullable=False
    )
    user_email: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[StudentAnswerStatus] = mapped_column(
        _enum(StudentAnswerStatus), nullable=False, default=StudentAnswerStatus.MISSING
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=func.now(), onupdate=func.now()
    )

    question: Mapped["Question"] = relationship(back_populates="student_answers")
    multiple_choice: Mapped[Optional["StudentAnswerMultipleChoice"]] = relationship(
        cascade="all, delete-orphan"
    )
    true_false: Mapped[Optional["StudentAnswerTrueFalse"]] = relationship(
        cascade="all, delete-orphan"
    )
    essay: Mapped[Optional["StudentAnswerEssay"]] = relationship(cascade="all, delete-orphan")
    web: Mapped[Optional["StudentAnswerWeb"]] = relationship(cascade="all, delete-orphan")
    exact_match: Mapped[Optional["StudentAnswerExactMatch"]] = relationship(
        cascade="all, delete-orphan"
    )
    code: Mapped[Optional["StudentAnswerCode"]] = relationship(cascade="all, delete-orphan")
    database: Mapped[Optional["StudentAnswerDatabase"]] = relationship(
        cascade="all, delete-orphan"
    )
    grading: Mapped[Optional["StudentQuestionGrading"]] = relationship(
        cascade="all, delete-orphan"
    )


student_answer_mc_options = Table(
    "student_answer_mc_options",
    Base.metadata,
    Column(
        "student_answer_id", Uuid,
        ForeignKey("student_answer_multiple_choice.student_answer_id", ondelete="CASCADE"),
        primary_key=True,
    ),
    Column("option_id", Uuid, ForeignKey("options.id", ondelete="CASCADE"), primary_key=True),
)


class StudentAnswerMultipleChoice(Base):
    __tablename__ = "student_answer_multiple_choice"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answers.id", ondelete="CASCADE"), primary_key=True
    )
    comment: Mapped[Optional[str]] = mapped_column(Text)

    options: Mapped[List["Option"]] = relationship(secondary=student_answer_mc_options)


class StudentAnswerTrueFalse(Base):
    __tablename__ = "student_answer_true_false"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answers.id", ondelete="CASCADE"), primary_key=True
    )
    is_true: Mapped[Optional[bool]] = mapped_column(Boolean)


class StudentAnswerEssay(Base):
    __tablename__ = "student_answer_essay"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answers.id", ondelete="CASCADE"), primary_key=True
    )
    content: Mapped[Optional[str]] = mapped_column(Text)


class StudentAnswerWeb(Base):
    __tablename__ = "student_answer_web"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answers.id", ondelete="CASCADE"), primary_key=True
    )
    html: Mapped[Optional[str]] = mapped_column(Text)
    css: Mapped[Optional[str]] = mapped_column(Text)
    js: Mapped[Optional[str]] = mapped_column(Text)


class StudentAnswerExactMatch(Base):
    __tablename__ = "student_answer_exact_match"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answers.id", ondelete="CASCADE"), primary_key=True
    )

    fields: Mapped[List["StudentAnswerExactMatchField"]] = relationship(
        cascade="all, delete-orphan"
    )


class StudentAnswerExactMatchField(Base):
    __tablename__ = "student_answer_exact_match_fields"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("student_answer_exact_match.student_answer_id", ondelete="CASCADE"),
        primary_key=True,
    )
    field_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("exact_match_fields.id", ondelete="CASCADE"), primary_key=True
    )
    value: Mapped[Optional[str]] = mapped_column(Text)

    field: Mapped["ExactMatchField"] = relationship()


class StudentAnswerCode(Base):
    __tablename__ = "student_answer_code"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answers.id", ondelete="CASCADE"), primary_key=True
    )
    code_type: Mapped[CodeQuestionType] = mapped_column(
        _enum(CodeQuestionType), nullable=False, default=CodeQuestionType.CODE_WRITING
    )
    all_test_cases_passed: Mapped[bool] = mapped_column(Boolean, default=False)

    files: Mapped[List["StudentAnswerCodeToFile"]] = relationship(cascade="all, delete-orphan")
    outputs: Mapped[List["StudentAnswerCodeReadingOutput"]] = relationship(
        cascade="all, delete-orphan"
    )


class StudentAnswerCodeToFile(Base):
    __tablename__ = "student_answer_code_to_files"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answer_code.student_answer_id", ondelete="CASCADE"),
        primary_key=True,
    )
    file_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("files.id", ondelete="CASCADE"), primary_key=True
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    student_permission: Mapped[StudentPermission] = mapped_column(
        _enum(StudentPermission), nullable=False, default=StudentPermission.UPDATE
    )

    file: Mapped["File"] = relationship()


class StudentAnswerCodeReadingOutput(Base):
    __tablename__ = "student_answer_code_reading_outputs"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answer_code.student_answer_id", ondelete="CASCADE"),
        primary_key=True,
    )
    snippet_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("code_reading_snippets.id", ondelete="CASCADE"), primary_key=True
    )
    output: Mapped[Optional[str]] = mapped_column(Text)
    status: Mapped[CodeReadingOutputStatus] = mapped_column(
        _enum(CodeReadingOutputStatus), nullable=False, default=CodeReadingOutputStatus.NEUTRAL
    )

    snippet: Mapped["CodeReadingSnippet"] = relationship()


class StudentAnswerDatabase(Base):
    __tablename__ = "student_answer_database"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answers.id", ondelete="CASCADE"), primary_key=True
    )

    queries: Mapped[List["StudentAnswerDatabaseToQuery"]] = relationship(
        cascade="all, delete-orphan"
    )


class StudentAnswerDatabaseToQuery(Base):
    __tablename__ = "student_answer_database_to_queries"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answer_database.student_answer_id", ondelete="CASCADE"),
        primary_key=True,
    )
    query_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("database_queries.id", ondelete="CASCADE"), primary_key=True
    )
    order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    query: Mapped["DatabaseQuery"] = relationship()


class StudentQuestionGrading(Base):
    __tablename__ = "student_question_gradings"

    student_answer_id: Mapped[uuid.UUID] = mapped_column(
        Uuid, ForeignKey("student_answers.id", ondelete="CASCADE"), primary_key=True
    )
    status: Mapped[GradingStatus] = mapped_column(
        _enum(GradingStatus), nullable=False, default=GradingStatus.UNGRADED
    )
    points_obtained: Mapped[float] = mapped_column(Float, default=0.0)
    comment: Mapped[Optional[str]] = mapped_column(Text)
    signed_by: Mapped[Optional[str]] = mapped_column(String(255))
