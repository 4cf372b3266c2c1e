# shared fixtures for mood journal api tests
# provides mock db, test users, session tokens, llm patches and httpx test client

import copy
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from bson import ObjectId
from httpx import AsyncClient, ASGITransport

from mood_journal.main import app
from mood_journal.services.db import get_db
from mood_journal.services.auth_service import create_session_token


# test ids, fixed so every import of this module agrees on them
OWNER_OID = ObjectId("64b000000000000000000001")
OTHER_OID = ObjectId("64b000000000000000000002")
OWNER_ID = str(OWNER_OID)
OTHER_ID = str(OTHER_OID)

SHARE_TOKEN = "abc123"


# test user documents (as they'd appear from mongodb)

OWNER_DOC = {
    "_id": OWNER_OID,
    "email": "minji.choi@example.com",
    "name": "Minji Choi",
    "avatar": "https://example.com/minji.png",
    "provider": "google",
    "provider_id": "google-1001",
    "created_at": "2025-05-01T00:00:00+00:00",
    "last_login_at": "2025-06-01T00:00:00+00:00",
}

OTHER_DOC = {
    "_id": OTHER_OID,
    "email": "sam.lee@example.com",
    "name": "Sam Lee",
    "avatar": None,
    "provider": "naver",
    "provider_id": "naver-2002",
    "created_at": "2025-05-10T00:00:00+00:00",
    "last_login_at": "2025-06-02T00:00:00+00:00",
}


# sample diary entries

PRIVATE_ENTRY = {
    "_id": ObjectId(),
    "id": 42,
    "user_id": OWNER_ID,
    "author_name": "Minji",
    "title": "Rainy Monday",
    "date": "2025-06-10 09:30",
    "emotion": "🌧️",
    "entry": "It rained all day and I stayed in reading. Quiet but a little lonely.",
    "visibility": "private",
    "created_at": "2025-06-10T09:30:00+00:00",
    "updated_at": "2025-06-10T09:30:00+00:00",
}

SHARED_ENTRY = {
    "_id": ObjectId(),
    "id": 43,
    "user_id": OWNER_ID,
    "author_name": "Minji",
    "title": "Picnic with friends",
    "date": "2025-06-11 18:00",
    "emotion": "😊",
    "entry": "We had a picnic by the river. Everyone brought something and we laughed a lot.",
    "visibility": "shared",
    "share_token": SHARE_TOKEN,
    "created_at": "2025-06-11T18:00:00+00:00",
    "updated_at": "2025-06-11T18:00:00+00:00",
}

FEEDBACK_ENTRY = {
    "_id": ObjectId(),
    "id": 44,
    "user_id": OWNER_ID,
    "author_name": "Minji",
    "title": "Exam week",
    "date": "2025-06-12 22:10",
    "emotion": "😰",
    "entry": "Three exams in two days. I barely slept.",
    "visibility": "private",
    "ai_feedback": "already generated",
    "ai_feedback_at": "2025-06-12T22:15:00+00:00",
    "created_at": "2025-06-12T22:10:00+00:00",
    "updated_at": "2025-06-12T22:10:00+00:00",
}

# was shared once, then made private again, the token is retained but dead
UNSHARED_ENTRY = {
    "_id": ObjectId(),
    "id": 45,
    "user_id": OWNER_ID,
    "author_name": "Minji",
    "title": "Old news",
    "date": "2025-06-13 08:00",
    "emotion": "😐",
    "entry": "Shared this with a friend, then changed my mind.",
    "visibility": "private",
    "share_token": "retained456",
    "created_at": "2025-06-13T08:00:00+00:00",
    "updated_at": "2025-06-13T08:00:00+00:00",
}

OTHER_USER_ENTRY = {
    "_id": ObjectId(),
    "id": 50,
    "user_id": OTHER_ID,
    "author_name": "Sam",
    "title": "Gym day",
    "date": "2025-06-09 07:00",
    "emotion": "💪",
    "entry": "Morning workout, felt strong.",
    "visibility": "private",
    "created_at": "2025-06-09T07:00:00+00:00",
    "updated_at": "2025-06-09T07:00:00+00:00",
}

SAMPLE_COMMENTS = [
    {
        "_id": ObjectId(),
        "id": 1,
        "entry_id": 43,
        "share_token": SHARE_TOKEN,
        "author_name": "Jiwoo",
        "content": "Looks like so much fun!",
        "created_at": "2025-06-11T19:00:00+00:00",
    },
    {
        "_id": ObjectId(),
        "id": 2,
        "entry_id": 43,
        "share_token": SHARE_TOKEN,
        "author_name": None,
        "content": "Next time invite me",
        "created_at": "2025-06-11T20:00:00+00:00",
    },
]

SAMPLE_ANALYSES = [
    {
        "_id": ObjectId(),
        "diary_id": 42,
        "user_id": OWNER_ID,
        "date": "2025-06-10 09:30",
        "emotions": {"calm": 60, "loneliness": 40},
        "created_at": "2025-06-10T09:31:00+00:00",
    },
    {
        "_id": ObjectId(),
        "diary_id": 43,
        "user_id": OWNER_ID,
        "date": "2025-06-11 18:00",
        "emotions": {"joy": 80, "calm": 20},
        "created_at": "2025-06-11T18:01:00+00:00",
    },
    {
        "_id": ObjectId(),
        "diary_id": 50,
        "user_id": OTHER_ID,
        "date": "2025-06-09 07:00",
        "emotions": {"pride": 100},
        "created_at": "2025-06-09T07:01:00+00:00",
    },
]


# async cursor mock

class AsyncCursorMock:
    """mock for motor's async cursor, supports async for and chained methods"""

    def __init__(self, data=None):
        self._data = data or []
        self._index = 0

    def sort(self, key, direction=1):
        self._data = sorted(self._data, key=lambda d: d.get(key) or "", reverse=direction == -1)
        return self

    def skip(self, n):
        self._data = self._data[n:]
        return self

    def limit(self, n):
        self._data = self._data[:n]
        return self

    def __aiter__(self):
        self._index = 0
        return self

    async def __anext__(self):
        if self._index >= len(self._data):
            raise StopAsyncIteration
        item = self._data[self._index]
        self._index += 1
        return item

    async def to_list(self, length=None):
        if length is not None:
            return self._data[:length]
        return self._data


class MockCollection:
    """mock for a motor collection with async methods"""

    def __init__(self, data=None):
        self._data = data or []
        self.inserted = []
        self.write_calls = 0

    def find(self, query=None, projection=None):
        results = self._data
        if query:
            results = [d for d in results if self._matches(d, query)]
        return AsyncCursorMock(list(results))

    async def find_one(self, query=None, projection=None):
        if not query:
            return self._data[0] if self._data else None
        for doc in self._data:
            if self._matches(doc, query):
                return doc
        return None

    async def insert_one(self, doc):
        self.write_calls += 1
        oid = doc.get("_id", ObjectId())
        doc["_id"] = oid
        self._data.append(doc)
        self.inserted.append(doc)
        result = MagicMock()
        result.inserted_id = oid
        return result

    async def count_documents(self, query=None):
        if not query:
            return len(self._data)
        return len([d for d in self._data if self._matches(d, query)])

    def _apply_update(self, doc, update):
        if "$set" in update:
            doc.update(update["$set"])
        if "$inc" in update:
            for key, val in update["$inc"].items():
                doc[key] = doc.get(key, 0) + val

    def _upsert_doc(self, query, update):
        doc = {k: v for k, v in query.items() if not isinstance(v, dict) and not k.startswith("$")}
        if "_id" not in doc:
            doc["_id"] = ObjectId()
        self._apply_update(doc, update)
        self._data.append(doc)
        return doc

    async def update_one(self, query, update, upsert=False):
        self.write_calls += 1
        result = MagicMock()
        result.modified_count = 0
        result.matched_count = 0
        for doc in self._data:
            if self._matches(doc, query):
                self._apply_update(doc, update)
                result.matched_count = 1
                result.modified_count = 1
                return result
        if upsert:
            result.upserted_id = self._upsert_doc(query, update)["_id"]
        return result

    async def find_one_and_update(self, query, update, upsert=False, return_document=False, **kwargs):
        self.write_calls += 1
        for doc in self._data:
            if self._matches(doc, query):
                before = copy.deepcopy(doc)
                self._apply_update(doc, update)
                return doc if return_document else before
        if upsert:
            doc = self._upsert_doc(query, update)
            return doc if return_document else None
        return None

    async def delete_one(self, query):
        self.write_calls += 1
        result = MagicMock()
        result.deleted_count = 0
        for i, doc in enumerate(self._data):
            if self._matches(doc, query):
                del self._data[i]
                result.deleted_count = 1
                break
        return result

    async def create_index(self, *args, **kwargs):
        return "mock_index"

    def _matches(self, doc, query):
        """basic mongodb query matching for tests"""
        for key, value in query.items():
            if key == "$or":
                if not any(self._matches(doc, cond) for cond in value):
                    return False
                continue
            doc_val = doc.get(key)
            if isinstance(value, dict):
                if "$in" in value:
                    if doc_val not in value["$in"]:
                        return False
                elif "$gte" in value:
                    if doc_val is None or doc_val < value["$gte"]:
                        return False
            elif doc_val != value:
                return False
        return True


class MockDatabase:
    """mock database that mimics the Database class"""

    def __init__(self):
        self.users = MockCollection([copy.deepcopy(OWNER_DOC), copy.deepcopy(OTHER_DOC)])
        self.diaries = MockCollection([
            copy.deepcopy(PRIVATE_ENTRY),
            copy.deepcopy(SHARED_ENTRY),
            copy.deepcopy(FEEDBACK_ENTRY),
            copy.deepcopy(UNSHARED_ENTRY),
            copy.deepcopy(OTHER_USER_ENTRY),
        ])
        self.comments = MockCollection([copy.deepcopy(c) for c in SAMPLE_COMMENTS])
        self.emotion_analyses = MockCollection([copy.deepcopy(a) for a in SAMPLE_ANALYSES])
        # ids handed out by next_sequence start above the sample data
        self.counters = MockCollection([
            {"_id": "diaries", "seq": 100},
            {"_id": "comments", "seq": 10},
        ])

    async def connect(self):
        pass

    async def close(self):
        pass


@pytest.fixture
def mock_db():
    """create a fresh mock database for each test"""
    return MockDatabase()


def session_headers(user_id: str) -> dict:
    """bearer header carrying a real signed session for `user_id`"""
    token = create_session_token({"sub": user_id})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def owner_headers():
    return session_headers(OWNER_ID)


@pytest.fixture
def other_headers():
    return session_headers(OTHER_ID)


@pytest.fixture
def mock_llm():
    """patch every gemini call the routers make"""
    with patch("mood_journal.routers.diary.summarize_title", new_callable=AsyncMock, return_value="A sunny walk") as title, \
            patch("mood_journal.routers.diary.convert_emotion_to_emoji", new_callable=AsyncMock, return_value="😊") as emoji, \
            patch("mood_journal.services.emotion_service.analyze_emotion", new_callable=AsyncMock, return_value={"joy": 70.0, "calm": 30.0}) as emotions, \
            patch("mood_journal.routers.feedback.generate_feedback", new_callable=AsyncMock, return_value="What a lovely day. Keep noticing the small things.") as fb:
        yield MagicMock(title=title, emoji=emoji, emotions=emotions, feedback=fb)


@pytest_asyncio.fixture
async def client(mock_db):
    """httpx async test client with the mock database injected"""

    async def override_get_db():
        return mock_db

    app.dependency_overrides[get_db] = override_get_db

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
