import logging
from datetime import datetime

from bson import ObjectId
from bson.errors import InvalidId
from flask import current_app
from pymongo import MongoClient
from pymongo.server_api import ServerApi

logger = logging.getLogger(__name__)

COLLECTIONS = (
    'users',
    'credentials',
    'healthData',
    'medications',
    'symptomReports',
    'aiSuggestions',
    'chatMessages',
)


class DocumentStore:
    """Handle on the MongoDB database used by every service.

    The wrapped client owns the connection pool; build one store per process
    and pass it to the services that need it.
    """

    def __init__(self, client, db_name):
        self.client = client
        self.db = client[db_name]

    @classmethod
    def from_uri(cls, uri, db_name):
        client = MongoClient(uri, server_api=ServerApi('1'), serverSelectionTimeoutMS=10000)
        logger.info("Connected to MongoDB database %s", db_name)
        return cls(client, db_name)

    @property
    def users(self):
        return self.db['users']

    @property
    def credentials(self):
        return self.db['credentials']

    @property
    def health_data(self):
        return self.db['healthData']

    @property
    def medications(self):
        return self.db['medications']

    @property
    def symptom_reports(self):
        return self.db['symptomReports']

    @property
    def ai_suggestions(self):
        return self.db['aiSuggestions']

    @property
    def chat_messages(self):
        return self.db['chatMessages']

    def ping(self):
        self.client.admin.command('ping')

    def close(self):
        self.client.close()


def init_app(app, store=None):
    if store is None:
        uri = app.config.get('MONGODB_URI')
        if not uri:
            raise RuntimeError("MONGODB_URI is not set")
        store = DocumentStore.from_uri(uri, app.config['MONGODB_DB_NAME'])
    app.extensions['store'] = store
    return store


def get_store():
    return current_app.extensions['store']


def to_object_id(value):
    """Parse a hex string into an ObjectId, or None when it is not one."""
    if isinstance(value, ObjectId):
        return value
    # ObjectId(None) mints a fresh id instead of failing
    if not value or not isinstance(value, str):
        logger.warning("Invalid string ID for ObjectId conversion: %r", value)
        return None
    try:
        return ObjectId(value)
    except (InvalidId, TypeError):
        logger.warning("Invalid string ID for ObjectId conversion: %s", value)
        return None


def serialize(doc):
    # ObjectIds become hex strings and datetimes ISO strings; `_id` is mirrored as `id`
    if doc is None:
        return None
    out = {}
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            value = str(value)
        elif isinstance(value, datetime):
            value = value.isoformat()
        out[key] = value
    if '_id' in out:
        out['id'] = out['_id']
    return out
