from types import TracebackType
from typing import Any, Type, TypeVar

from sqlalchemy import Engine
from sqlalchemy.orm import Session

T = TypeVar("T")


class DbSession:
    """
    Wraps a SQLAlchemy session and hands out repositories bound to it
    """

    def __init__(self, engine: Engine) -> None:
        self.session = Session(engine, expire_on_commit=False)

    def __enter__(self) -> "DbSession":
        return self

    def __exit__(
        self,
        exc_type: Type[BaseException] | None,
        exc_value: BaseException | None,
        traceback: TracebackType | None,
    ) -> None:
        if exc_type is not None:
            self.session.rollback()
        self.session.close()

    def get_repository(self, repository_class: Type[T]) -> T:
        return repository_class(self)  # type: ignore[call-arg]

    def add(self, entry: Any) -> None:
        self.session.add(entry)

    def delete(self, entry: Any) -> None:
        self.session.delete(entry)

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()
