"""recordspine -- Table-bound record models over a pluggable storage layer.

Manifesto:
    Most CRUD code repeats the same five concerns for every table: build a
    filtered query, validate what is about to be written, strip the fields a
    caller must never set, stamp created/modified times, and give the
    application a place to hook in before and after each operation.
    ``recordspine`` implements them once, behind one base class.

    - **Declarative models:** table, rules, protected fields and hooks are class attributes
    - **Deterministic SQL:** equal filter sets always compile to identical text and bindings
    - **No state leaks:** every terminal call consumes the pending query state
    - **Protocol-first:** Storage and RuleValidator are protocols, not base classes

Architecture::

    Layer 1 -- Types & Errors
        errors.py       Structured error hierarchy (RecordSpineError + 4 kinds)
        result.py       Ok / Err envelope for validation outcomes
        protocols.py    Storage and RuleValidator contracts
        timestamps.py   UTC clock + stamp rendering

    Layer 2 -- Building blocks
        query.py        QuerySpec / QueryState, filter compilation
        hooks.py        Eight-chain observer pipeline
        rules.py        Pipe-rule validator backed by pydantic
        validation.py   ValidationGate (rules + insert-only rules)
        schema.py       SchemaFieldList + FieldAuthorizer

    Layer 3 -- Orchestration & drivers
        model.py        RecordModel (find/insert/update/delete/count)
        storage.py      SQLAlchemyStorage + create_storage()
        settings.py     RecordSettings (RECORDSPINE_* env vars)
        logging.py      structlog configuration

Quick start::

    from recordspine import RecordModel, create_storage

    class Users(RecordModel):
        table_name = "users"
        validate_rules = {"email": "required|trim|valid_email"}

    users = Users(create_storage("sqlite:///app.db"))
    users.where("age >", 18).order_by("name").find_all()

Tags:
    crud, repository, sqlalchemy, hooks, validation
"""

from recordspine.errors import (
    ConfigurationError,
    ErrorCategory,
    InvalidArgumentError,
    RecordSpineError,
    RecordValidationError,
    StorageError,
)
from recordspine.hooks import HookContext, HookStage, ObserverPipeline
from recordspine.logging import configure_logging, get_logger
from recordspine.model import RecordModel
from recordspine.protocols import ParamType, RuleValidator, Storage
from recordspine.query import QuerySpec, ReturnShape
from recordspine.result import Err, Ok, Result
from recordspine.rules import PipeRuleValidator
from recordspine.settings import RecordSettings, get_settings
from recordspine.storage import SQLAlchemyStorage, create_storage

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # errors
    "ErrorCategory",
    "RecordSpineError",
    "InvalidArgumentError",
    "RecordValidationError",
    "ConfigurationError",
    "StorageError",
    # results
    "Result",
    "Ok",
    "Err",
    # model
    "RecordModel",
    "QuerySpec",
    "ReturnShape",
    "HookContext",
    "HookStage",
    "ObserverPipeline",
    # collaborators
    "Storage",
    "RuleValidator",
    "ParamType",
    "SQLAlchemyStorage",
    "create_storage",
    "PipeRuleValidator",
    # config
    "RecordSettings",
    "get_settings",
    "configure_logging",
    "get_logger",
]
