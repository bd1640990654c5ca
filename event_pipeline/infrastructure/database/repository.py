# event_pipeline/infrastructure/database/repository.py

from typing import Any, Mapping, Optional, Sequence, Type

from sqlalchemy.dialects.postgresql import Insert, insert


def upsert_statement(
    model: Type[Any],
    values: Mapping[str, Any],
    index_elements: Sequence[str],
    set_: Optional[Mapping[str, Any]] = None,
) -> Insert:
    """
    INSERT ... ON CONFLICT (index_elements) DO UPDATE. Single statement, so concurrent writers
    for the same key serialize in the database rather than racing in the application.
    By default every non-key column takes the incoming value.
    """
    stmt = insert(model).values(**values)
    if set_ is None:
        set_ = {k: stmt.excluded[k] for k in values if k not in index_elements}
    return stmt.on_conflict_do_update(
        index_elements=list(index_elements),
        set_=dict(set_),
    )


def insert_ignore_statement(
    model: Type[Any],
    values: Mapping[str, Any],
    index_elements: Sequence[str],
) -> Insert:
    """INSERT ... ON CONFLICT (index_elements) DO NOTHING."""
    return insert(model).values(**values).on_conflict_do_nothing(index_elements=list(index_elements))
