"""Test config and shared fixtures."""
import copy
import pytest
from types import SimpleNamespace
from typing import Any, AsyncGenerator, Dict, List, Optional
from bson import ObjectId
from httpx import ASGITransport, AsyncClient

from main import app
from doccrud.context import session_context
from doccrud.repository import TransactionService
from apps.articles.repository import ArticleAuditRepository, ArticleRepository


# --- In-memory stand-in for the motor client/database/collection/session API ---

def _field(document: Dict[str, Any], path: str) -> Any:
    value: Any = document
    for part in path.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _match_condition(value: Any, condition: Any) -> bool:
    if isinstance(condition, dict) and condition and all(key.startswith("$") for key in condition):
        for op, arg in condition.items():
            if op == "$in" and value not in arg:
                return False
            if op == "$nin" and value in arg:
                return False
            if op == "$ne" and value == arg:
                return False
            if op == "$gt" and not (value is not None and value > arg):
                return False
            if op == "$gte" and not (value is not None and value >= arg):
                return False
            if op == "$lt" and not (value is not None and value < arg):
                return False
            if op == "$lte" and not (value is not None and value <= arg):
                return False
            if op == "$exists" and (value is not None) != bool(arg):
                return False
        return True
    if isinstance(value, list) and not isinstance(condition, list):
        return condition in value
    return value == condition


def matches(document: Dict[str, Any], filter: Dict[str, Any]) -> bool:
    for key, condition in filter.items():
        if key == "$and":
            if not all(matches(document, sub) for sub in condition):
                return False
        elif key == "$or":
            if not any(matches(document, sub) for sub in condition):
                return False
        elif not _match_condition(_field(document, key), condition):
            return False
    return True


def apply_update(document: Dict[str, Any], update: Dict[str, Any]) -> None:
    for op, fields in update.items():
        for key, value in fields.items():
            if op == "$set":
                document[key] = copy.deepcopy(value)
            elif op == "$inc":
                document[key] = document.get(key, 0) + value
            elif op == "$unset":
                document.pop(key, None)
            elif op == "$push":
                document.setdefault(key, []).append(copy.deepcopy(value))
            else:
                raise ValueError(f"Unsupported update operator {op}")


def project(document: Dict[str, Any], projection: Any) -> Dict[str, Any]:
    if not projection:
        return document
    fields = list(projection) if not isinstance(projection, dict) else [k for k, v in projection.items() if v]
    projected = {key: document[key] for key in fields if key in document}
    if "_id" in document and (not isinstance(projection, dict) or projection.get("_id", 1)):
        projected["_id"] = document["_id"]
    return projected


def sort_documents(documents: List[Dict[str, Any]], sort: Any) -> List[Dict[str, Any]]:
    items = sort.items() if isinstance(sort, dict) else sort
    for field, direction in reversed(list(items)):
        documents = sorted(documents, key=lambda d: _field(d, field), reverse=direction < 0)
    return documents


class FakeCursor:
    def __init__(self, documents: List[Dict[str, Any]]):
        self._documents = documents
        self._skip = 0
        self._limit = 0

    def skip(self, count: int) -> "FakeCursor":
        self._skip = count
        return self

    def limit(self, count: int) -> "FakeCursor":
        self._limit = count
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        documents = self._documents[self._skip:]
        if self._limit:
            documents = documents[:self._limit]
        if length:
            documents = documents[:length]
        return documents


class FakeCollection:
    """Implements the subset of AsyncIOMotorCollection the repositories use."""

    def __init__(self, name: str):
        self.name = name
        self.documents: List[Dict[str, Any]] = []
        # (method, session) for every driver call
        self.calls: List[tuple] = []

    def _record(self, method: str, session: Any) -> None:
        self.calls.append((method, session))

    def called(self, method: str) -> List[Any]:
        return [session for name, session in self.calls if name == method]

    def _matching(self, filter: Dict[str, Any]) -> List[Dict[str, Any]]:
        return [document for document in self.documents if matches(document, filter)]

    def find(self, filter=None, projection=None, *, session=None, sort=None) -> FakeCursor:
        self._record("find", session)
        documents = self._matching(filter or {})
        if sort:
            documents = sort_documents(documents, sort)
        return FakeCursor([project(copy.deepcopy(d), projection) for d in documents])

    async def find_one(self, filter=None, projection=None, *, session=None, sort=None):
        self._record("find_one", session)
        documents = self._matching(filter or {})
        if sort:
            documents = sort_documents(documents, sort)
        return project(copy.deepcopy(documents[0]), projection) if documents else None

    async def count_documents(self, filter, *, session=None) -> int:
        self._record("count_documents", session)
        return len(self._matching(filter))

    async def insert_one(self, document, *, session=None):
        self._record("insert_one", session)
        document.setdefault("_id", ObjectId())
        self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_id=document["_id"])

    async def insert_many(self, documents, *, session=None):
        self._record("insert_many", session)
        for document in documents:
            document.setdefault("_id", ObjectId())
            self.documents.append(copy.deepcopy(document))
        return SimpleNamespace(inserted_ids=[document["_id"] for document in documents])

    async def find_one_and_update(self, filter, update, *, return_document=False, session=None, projection=None, sort=None):
        self._record("find_one_and_update", session)
        documents = self._matching(filter)
        if sort:
            documents = sort_documents(documents, sort)
        if not documents:
            return None
        target = documents[0]
        before = copy.deepcopy(target)
        apply_update(target, update)
        return project(copy.deepcopy(target) if return_document else before, projection)

    async def update_many(self, filter, update, *, session=None):
        self._record("update_many", session)
        documents = self._matching(filter)
        for document in documents:
            apply_update(document, update)
        return SimpleNamespace(matched_count=len(documents), modified_count=len(documents))

    async def delete_one(self, filter, *, session=None):
        self._record("delete_one", session)
        documents = self._matching(filter)
        if documents:
            self.documents.remove(documents[0])
        return SimpleNamespace(deleted_count=len(documents[:1]))

    async def delete_many(self, filter, *, session=None):
        self._record("delete_many", session)
        documents = self._matching(filter)
        self.documents = [d for d in self.documents if d not in documents]
        return SimpleNamespace(deleted_count=len(documents))

    def aggregate(self, pipeline, *, session=None, **kwargs) -> FakeCursor:
        self._record("aggregate", session)
        documents = copy.deepcopy(self.documents)
        for stage in pipeline:
            (op, arg), = stage.items()
            if op == "$match":
                documents = [d for d in documents if matches(d, arg)]
            elif op == "$group":
                groups: Dict[Any, Dict[str, Any]] = {}
                key_expr = arg["_id"]
                for document in documents:
                    key = _field(document, key_expr[1:]) if isinstance(key_expr, str) else key_expr
                    group = groups.setdefault(key, {"_id": key})
                    for name, accumulator in arg.items():
                        if name == "_id":
                            continue
                        amount = accumulator["$sum"]
                        amount = _field(document, amount[1:]) if isinstance(amount, str) else amount
                        group[name] = group.get(name, 0) + amount
                documents = list(groups.values())
            elif op == "$sort":
                documents = sort_documents(documents, arg)
            elif op == "$count":
                documents = [{arg: len(documents)}] if documents else []
            else:
                raise ValueError(f"Unsupported stage {op}")
        return FakeCursor(documents)


class FakeDatabase:
    def __init__(self, name: str):
        self.name = name
        self.collections: Dict[str, FakeCollection] = {}

    def __getitem__(self, name: str) -> FakeCollection:
        if name not in self.collections:
            self.collections[name] = FakeCollection(name)
        return self.collections[name]

    async def list_collection_names(self) -> List[str]:
        return list(self.collections)

    async def create_collection(self, name: str) -> FakeCollection:
        return self[name]


class FakeSession:
    """with_transaction commits on success and restores the pre-transaction state on error."""

    def __init__(self, client: "FakeClient"):
        self.client = client
        self.in_transaction = False
        self.transactions = 0
        self.committed = False
        self.aborted = False
        self.ended = False

    async def with_transaction(self, callback):
        if self.in_transaction:
            raise RuntimeError("Transaction already in progress")
        snapshot = self.client.snapshot()
        self.in_transaction = True
        self.transactions += 1
        try:
            result = await callback(self)
        except BaseException:
            self.client.restore(snapshot)
            self.aborted = True
            raise
        finally:
            self.in_transaction = False
        self.committed = True
        return result

    async def end_session(self):
        self.ended = True


class FakeClient:
    def __init__(self):
        self.databases: Dict[str, FakeDatabase] = {}
        self.sessions: List[FakeSession] = []

    def __getitem__(self, name: str) -> FakeDatabase:
        if name not in self.databases:
            self.databases[name] = FakeDatabase(name)
        return self.databases[name]

    async def start_session(self) -> FakeSession:
        session = FakeSession(self)
        self.sessions.append(session)
        return session

    def snapshot(self):
        return {
            (db_name, col_name): copy.deepcopy(collection.documents)
            for db_name, database in self.databases.items()
            for col_name, collection in database.collections.items()
        }

    def restore(self, snapshot) -> None:
        for db_name, database in self.databases.items():
            for col_name, collection in database.collections.items():
                collection.documents = snapshot.get((db_name, col_name), [])


# --- Fixtures ---

@pytest.fixture
def mongo_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def database(mongo_client: FakeClient) -> FakeDatabase:
    return mongo_client["test_db"]


@pytest.fixture
def transactions(mongo_client: FakeClient) -> TransactionService:
    return TransactionService(mongo_client)


@pytest.fixture
def article_repository(database: FakeDatabase) -> ArticleRepository:
    return ArticleRepository(database)


@pytest.fixture
def audit_repository(database: FakeDatabase) -> ArticleAuditRepository:
    return ArticleAuditRepository(database)


@pytest.fixture(autouse=True)
def empty_session_context():
    """Every test starts and ends without an active session."""
    session_context.set(None)
    yield
    session_context.set(None)


@pytest.fixture
async def client(
    database: FakeDatabase,
    transactions: TransactionService,
) -> AsyncGenerator[AsyncClient, None]:
    """Create test client."""
    from apps.articles.api.router import get_database, get_transaction_service

    app.dependency_overrides[get_database] = lambda: database
    app.dependency_overrides[get_transaction_service] = lambda: transactions

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
