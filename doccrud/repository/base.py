"""
Repository abstract base class and generic MongoDB implementation.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, Generic, List, Mapping, Optional, Sequence, Type, TypeVar, Union
from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorClientSession, AsyncIOMotorCollection, AsyncIOMotorDatabase
from pymongo import ReturnDocument
from doccrud.context import SessionContext, session_context
from .policy import check_existence, paginate, skip_and_limit
from .types import DEFAULT_OPTIONS, BaseEntity, Document, Filter, FilterOrId, PaginationResult, QueryOptions

E = TypeVar("E", bound=BaseEntity)


class ICrudRepository(ABC, Generic[E]):
    """Repository interface; defines the CRUD contract every entity gets."""

    @abstractmethod
    async def find_one(self, filter: FilterOrId, options: QueryOptions = DEFAULT_OPTIONS) -> Optional[Document]:
        """Find a single document by id or filter."""
        pass

    @abstractmethod
    async def find_many(
        self, filter: Optional[Filter] = None, options: QueryOptions = DEFAULT_OPTIONS
    ) -> Union[List[Document], PaginationResult[Document]]:
        """Find documents; paginated when options.pagination is set."""
        pass

    @abstractmethod
    async def is_exists(self, filter: Filter, options: QueryOptions = DEFAULT_OPTIONS) -> bool:
        """Check whether any document matches."""
        pass

    @abstractmethod
    async def count(self, filter: Optional[Filter] = None) -> int:
        """Count matching documents."""
        pass

    @abstractmethod
    async def create(self, data: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]) -> Union[Document, List[Document]]:
        """Insert one payload or a batch."""
        pass

    @abstractmethod
    async def update_one(
        self, filter: FilterOrId, data: Mapping[str, Any], options: QueryOptions = DEFAULT_OPTIONS
    ) -> Optional[Document]:
        """Update one document and return its new state."""
        pass

    @abstractmethod
    async def update_many(
        self, filter: Filter, data: Mapping[str, Any], options: QueryOptions = DEFAULT_OPTIONS
    ) -> List[Document]:
        """Update all matches and return their new state."""
        pass

    @abstractmethod
    async def delete_one(self, filter: FilterOrId, options: QueryOptions = DEFAULT_OPTIONS) -> Optional[Document]:
        """Delete one document and return it as it was."""
        pass

    @abstractmethod
    async def delete_many(self, filter: Filter, options: QueryOptions = DEFAULT_OPTIONS) -> List[Document]:
        """Delete all matches and return them as they were."""
        pass

    @abstractmethod
    async def aggregation(self, pipeline: List[Mapping[str, Any]], **kwargs: Any) -> List[Any]:
        """Run an aggregation pipeline."""
        pass


class CrudRepository(ICrudRepository[E]):
    """
    Generic CRUD over one collection.

    Every call reads the active session from the context store (set by
    ``TransactionService.run``) and passes it to the driver; with no active
    transaction the call runs unscoped.
    """

    def __init__(
        self,
        database: AsyncIOMotorDatabase,
        entity: Type[E],
        context: Optional[SessionContext] = None,
    ):
        """Initialize repository with database, entity type and session context."""
        self.entity = entity
        self.collection: AsyncIOMotorCollection = database[entity.collection_name()]
        self.context = context or session_context

    @property
    def session(self) -> Optional[AsyncIOMotorClientSession]:
        return self.context.get()

    @staticmethod
    def resolve_filter(filter: Optional[FilterOrId]) -> Dict[str, Any]:
        """Turn an ObjectId (or its string/bytes form) into an _id filter."""
        if filter is None:
            return {}
        if isinstance(filter, Mapping):
            return dict(filter)
        # Malformed ids raise bson InvalidId here
        return {"_id": filter if isinstance(filter, ObjectId) else ObjectId(filter)}

    @staticmethod
    def _query_kwargs(options: QueryOptions) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        if options.projection is not None:
            kwargs["projection"] = options.projection
        if options.sort:
            kwargs["sort"] = list(options.sort)
        return kwargs

    async def _find(self, filter: Mapping[str, Any], options: QueryOptions = DEFAULT_OPTIONS, skip: int = 0, limit: int = 0) -> List[Document]:
        cursor = self.collection.find(filter, session=self.session, **self._query_kwargs(options))
        if skip:
            cursor = cursor.skip(skip)
        if limit:
            cursor = cursor.limit(limit)
        return await cursor.to_list(length=None)

    async def find_one(self, filter: FilterOrId, options: QueryOptions = DEFAULT_OPTIONS) -> Optional[Document]:
        document = await self.collection.find_one(
            self.resolve_filter(filter), session=self.session, **self._query_kwargs(options)
        )
        check_existence(document, options)
        return document

    async def find_many(
        self, filter: Optional[Filter] = None, options: QueryOptions = DEFAULT_OPTIONS
    ) -> Union[List[Document], PaginationResult[Document]]:
        query = self.resolve_filter(filter)

        if options.pagination is None:
            documents = await self._find(query, options)
            check_existence(documents, options)
            return documents

        window = skip_and_limit(options.pagination)
        skip, limit = window if window else (0, 0)
        documents = await self._find(query, options, skip=skip, limit=limit)
        total = await self.collection.count_documents(query, session=self.session)

        check_existence(documents, options)

        return paginate(documents, total, options.pagination)

    async def is_exists(self, filter: Filter, options: QueryOptions = DEFAULT_OPTIONS) -> bool:
        # Only the id comes back, the document itself is never materialized
        probe = await self.collection.find_one(
            self.resolve_filter(filter), projection={"_id": 1}, session=self.session
        )
        check_existence(probe, options)
        return probe is not None

    async def count(self, filter: Optional[Filter] = None) -> int:
        return await self.collection.count_documents(self.resolve_filter(filter), session=self.session)

    async def create(self, data: Union[Mapping[str, Any], Sequence[Mapping[str, Any]]]) -> Union[Document, List[Document]]:
        if isinstance(data, Mapping):
            document = dict(data)
            result = await self.collection.insert_one(document, session=self.session)
            document["_id"] = result.inserted_id
            return document

        documents = [dict(item) for item in data]
        if not documents:
            return []
        result = await self.collection.insert_many(documents, session=self.session)
        for document, inserted_id in zip(documents, result.inserted_ids):
            document["_id"] = inserted_id
        return documents

    async def update_one(
        self, filter: FilterOrId, data: Mapping[str, Any], options: QueryOptions = DEFAULT_OPTIONS
    ) -> Optional[Document]:
        document = await self.collection.find_one_and_update(
            self.resolve_filter(filter),
            data,
            return_document=ReturnDocument.AFTER,
            session=self.session,
            **self._query_kwargs(options),
        )
        check_existence(document, options)
        return document

    async def update_many(
        self, filter: Filter, data: Mapping[str, Any], options: QueryOptions = DEFAULT_OPTIONS
    ) -> List[Document]:
        targets = await self._find(self.resolve_filter(filter))
        check_existence(targets, options)

        if not targets:
            return []

        by_ids = {"_id": {"$in": [document["_id"] for document in targets]}}
        await self.collection.update_many(by_ids, data, session=self.session)

        return await self._find(by_ids, options)

    async def delete_one(self, filter: FilterOrId, options: QueryOptions = DEFAULT_OPTIONS) -> Optional[Document]:
        target = await self.collection.find_one(self.resolve_filter(filter), session=self.session)
        check_existence(target, options)

        if target:
            await self.collection.delete_one({"_id": target["_id"]}, session=self.session)

        return target

    async def delete_many(self, filter: Filter, options: QueryOptions = DEFAULT_OPTIONS) -> List[Document]:
        targets = await self._find(self.resolve_filter(filter))
        check_existence(targets, options)

        if targets:
            await self.collection.delete_many(
                {"_id": {"$in": [document["_id"] for document in targets]}}, session=self.session
            )

        return targets

    async def aggregation(self, pipeline: List[Mapping[str, Any]], **kwargs: Any) -> List[Any]:
        cursor = self.collection.aggregate(list(pipeline), session=self.session, **kwargs)
        return await cursor.to_list(length=None)
