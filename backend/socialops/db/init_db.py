import socialops.db.models  # noqa: F401
from socialops.db.base import Base
from socialops.db.session import Database


def init_db(database: Database) -> None:
    Base.metadata.create_all(bind=database.engine)


if __name__ == "__main__":
    from socialops.core.config import settings

    init_db(Database.from_settings(settings))
