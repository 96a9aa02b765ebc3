# agroshop/data/store.py
from typing import Any, Callable, TypeVar

from sqlalchemy import inspect, select, update
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session, sessionmaker
from tenacity import Retrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from agroshop.domain.errors import TransactionConflict, TransactionTooLarge
from agroshop.utils.settings import MAX_TRANSACTION_DOCUMENTS, TRANSACTION_MAX_ATTEMPTS
from agroshop.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def _primary_key(model):
    return inspect(model).primary_key[0]


# deadlock i serialization failure (Postgres), zablokowana baza (SQLite)
RETRYABLE_SQLSTATES = {"40P01", "40001"}


def is_retryable_db_error(error: DBAPIError) -> bool:
    orig = error.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code in RETRYABLE_SQLSTATES:
        return True
    return "database is locked" in str(orig)


class Transaction:
    """
    Transakcja na dokumentach z optymistyczna kontrola wspolbieznosci.

    - get() czyta dokument i zapamietuje jego wersje (read set)
    - update()/create() tylko kolejkuja zapisy, nic nie trafia do bazy przed commit()
    - commit() sprawdza wersje calego read setu i zapisuje warunkowo
      (UPDATE ... WHERE version = odczytana), 0 rows -> TransactionConflict
    """

    def __init__(self, session: Session, max_documents: int = MAX_TRANSACTION_DOCUMENTS):
        self.session = session
        self.max_documents = max_documents
        self._reads: dict[tuple, tuple[Any, int | None]] = {}
        self._writes: dict[tuple, dict] = {}
        self._creates: list = []

    def get(self, model, key):
        ident = (model, key)
        if ident in self._reads:
            return self._reads[ident][0]

        doc = self.session.get(model, key)
        self._reads[ident] = (doc, doc.version if doc is not None else None)
        return doc

    def update(self, doc, **patch) -> None:
        model = type(doc)
        key = inspect(doc).identity[0]
        ident = (model, key)
        if ident not in self._reads:
            raise RuntimeError(f"{model.__tablename__}/{key} must be read before it is updated")

        self._writes.setdefault(ident, {}).update(patch)

    def create(self, doc) -> None:
        self._creates.append(doc)

    @property
    def touched(self) -> int:
        return len(self._reads.keys() | self._writes.keys()) + len(self._creates)

    def _sorted(self, idents):
        # stala kolejnosc blokad (tabela, klucz) - dwa zamowienia z koszykami
        # [P1, P2] i [P2, P1] nie moga sie zakleszczyc
        return sorted(idents, key=lambda ident: (ident[0].__tablename__, str(ident[1])))

    def commit(self) -> None:
        if self.touched > self.max_documents:
            raise TransactionTooLarge(self.touched, self.max_documents)

        for ident in self._sorted(self._writes):
            model, key = ident
            _, version = self._reads[ident]
            result = self.session.execute(
                update(model)
                .where(_primary_key(model) == key, model.version == version)
                .values(**self._writes[ident], version=version + 1)
                .execution_options(synchronize_session=False)
            )
            if result.rowcount == 0:
                raise TransactionConflict()

        # dokumenty tylko czytane - sprawdzane po zapisach, gdy transakcja w bazie
        # juz trzyma blokade zapisu, wersja nie moze sie zmienic do commita
        read_only = [ident for ident in self._reads if ident not in self._writes]
        for ident in self._sorted(read_only):
            model, key = ident
            current = self.session.execute(
                select(model.version).where(_primary_key(model) == key).with_for_update()
            ).scalar_one_or_none()
            if current != self._reads[ident][1]:
                raise TransactionConflict()

        self.session.add_all(self._creates)
        try:
            self.session.flush()
        except IntegrityError as e:
            # ktos inny utworzyl ten sam dokument w miedzyczasie
            raise TransactionConflict() from e

        self.session.commit()


class DocumentStore:
    """
    Magazyn dokumentow (products / users / orders) nad SQLAlchemy.
    Tworzony jawnie i wstrzykiwany do serwisow, bez globalnego singletona.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        max_attempts: int = TRANSACTION_MAX_ATTEMPTS,
        max_documents: int = MAX_TRANSACTION_DOCUMENTS,
        wait_multiplier: float = 0.05,
    ):
        self.session_factory = session_factory
        self.max_attempts = max_attempts
        self.max_documents = max_documents
        self.wait_multiplier = wait_multiplier

    def session(self) -> Session:
        return self.session_factory()

    def _retrying(self) -> Retrying:
        return Retrying(
            reraise=True,
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self.wait_multiplier, max=1),
            retry=retry_if_exception_type(TransactionConflict),
            before_sleep=lambda state: logger.warning(
                f"Konflikt transakcji, proba {state.attempt_number}/{self.max_attempts} - ponawiam"
            ),
        )

    def _run_once(self, fn: Callable[[Transaction], T]) -> T:
        session = self.session_factory()
        try:
            tx = Transaction(session, self.max_documents)
            result = fn(tx)
            tx.commit()
            return result
        except DBAPIError as e:
            session.rollback()
            if is_retryable_db_error(e):
                raise TransactionConflict() from e
            raise
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def run_transaction(self, fn: Callable[[Transaction], T]) -> T:
        """
        Uruchamia fn(tx) atomowo. Przy konflikcie wersji cala funkcja jest
        wykonywana od nowa, wiec fn nie moze miec efektow ubocznych poza tx.
        Bledy biznesowe z fn nie sa ponawiane.
        """
        return self._retrying()(self._run_once, fn)
