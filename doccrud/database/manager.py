from .mongo_driver import MongoDriver

class DatabaseManager:
    _instance = None

    def __init__(self, settings, mongo: MongoDriver = None):
        self.mongo = mongo or MongoDriver(settings.MONGO_URL, settings.MONGO_DB)

    @classmethod
    def get_instance(cls, settings=None):
        if cls._instance is None:
            if settings is None:
                from doccrud.config import settings as app_settings
                settings = app_settings
            cls._instance = cls(settings)
        return cls._instance

    @classmethod
    def reset_instance(cls, instance: "DatabaseManager" = None):
        """Replace (or drop) the singleton, e.g. to install a test driver."""
        cls._instance = instance
